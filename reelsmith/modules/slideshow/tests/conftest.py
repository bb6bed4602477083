"""
Pytest fixtures for slideshow tests.
"""
import asyncio
import json
import pytest
from pathlib import Path
from uuid import uuid4

from reelsmith.shared.config import Settings


def make_executable(path: Path) -> Path:
    """Create a stub executable so availability checks pass."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\nexit 0\n")
    path.chmod(0o755)
    return path


@pytest.fixture
def sample_job_id():
    """Create a sample job ID."""
    return uuid4()


@pytest.fixture
def tool_settings(tmp_path):
    """Settings pointing at stub ffmpeg/ffprobe and a per-test temp dir."""
    return Settings(
        _env_file=None,
        ffmpeg_path=str(make_executable(tmp_path / "bin" / "ffmpeg")),
        ffprobe_path=str(make_executable(tmp_path / "bin" / "ffprobe")),
        temp_dir=tmp_path / "temp",
        cancel_grace_seconds=0.5,
        log_dir=None,
    )


@pytest.fixture
def sample_images(tmp_path):
    """Create image files (content is irrelevant to the mocked encoder)."""
    def _create_images(count: int = 3, extension: str = ".jpg"):
        image_dir = tmp_path / "images"
        image_dir.mkdir(exist_ok=True)
        paths = []
        for i in range(count):
            image_path = image_dir / f"image_{i}{extension}"
            image_path.write_bytes(b"\xff\xd8\xff" + bytes([i]) * 64)
            paths.append(image_path)
        return paths
    return _create_images


def render_probe_json(
    duration: float = 6.0,
    width: int = 1920,
    height: int = 1080,
    format_name: str = "mov,mp4,m4a,3gp,3g2,mj2",
    with_video: bool = True
) -> str:
    """ffprobe -print_format json output for a simple file."""
    streams = [{"index": 0, "codec_type": "audio", "codec_name": "aac"}]
    if with_video:
        streams.insert(0, {
            "index": 0,
            "codec_type": "video",
            "codec_name": "h264",
            "width": width,
            "height": height,
        })
    return json.dumps({
        "streams": streams,
        "format": {"format_name": format_name, "duration": f"{duration:.6f}"},
    })


class FakeProcess:
    """Stands in for asyncio.subprocess.Process."""

    def __init__(self, returncode: int = 0, stdout: bytes = b"", stderr: bytes = b"", hang: bool = False):
        self.stdout = asyncio.StreamReader()
        self.stderr = asyncio.StreamReader()
        self.stdout.feed_data(stdout)
        self.stderr.feed_data(stderr)
        self._final_returncode = returncode
        self._done = asyncio.Event()
        self.returncode = None
        self.terminated = False
        self.killed = False
        if not hang:
            self._finish(returncode)

    def _finish(self, returncode: int) -> None:
        self.returncode = returncode
        if not self.stdout.at_eof():
            self.stdout.feed_eof()
        if not self.stderr.at_eof():
            self.stderr.feed_eof()
        self._done.set()

    async def wait(self) -> int:
        await self._done.wait()
        return self.returncode

    async def communicate(self):
        await self.wait()
        return await self.stdout.read(), await self.stderr.read()

    def terminate(self) -> None:
        self.terminated = True
        self._finish(-15)

    def kill(self) -> None:
        self.killed = True
        self._finish(-9)


@pytest.fixture
def fake_process():
    """Factory for FakeProcess (must be called inside a running event loop)."""
    return FakeProcess


@pytest.fixture
def probe_json():
    """Factory for canned ffprobe JSON."""
    return render_probe_json
