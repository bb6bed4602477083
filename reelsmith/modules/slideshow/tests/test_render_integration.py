"""
Integration tests for slideshow rendering.

Runs the transition graphs through a real FFmpeg and counts the frames of the
finished video. Skipped when ffmpeg or ffprobe is not installed.
"""
import shutil
import subprocess
import pytest
from pathlib import Path

from reelsmith.modules.slideshow import VideoProcessor
from reelsmith.shared.config import Settings
from reelsmith.shared.models.video import VideoJobConfig

IMAGE_COLORS = ("red", "green", "blue", "yellow")


@pytest.fixture
def real_settings(tmp_path):
    """Settings pointing at the installed ffmpeg/ffprobe."""
    ffmpeg = shutil.which("ffmpeg")
    ffprobe = shutil.which("ffprobe")
    if ffmpeg is None or ffprobe is None:
        pytest.skip("ffmpeg/ffprobe not installed")
    return Settings(
        _env_file=None,
        ffmpeg_path=ffmpeg,
        ffprobe_path=ffprobe,
        temp_dir=tmp_path / "temp",
        log_dir=None,
    )


@pytest.fixture
def real_images(real_settings, tmp_path):
    """Write solid-colour 16:9 PNGs so every output frame is letterboxed."""
    def _create_images(count: int):
        image_dir = tmp_path / "images"
        image_dir.mkdir(exist_ok=True)
        paths = []
        for i in range(count):
            path = image_dir / f"image_{i}.png"
            subprocess.run(
                [
                    real_settings.ffmpeg_path, "-v", "error", "-y",
                    "-f", "lavfi", "-i", f"color=c={IMAGE_COLORS[i % len(IMAGE_COLORS)]}:s=480x270",
                    "-frames:v", "1",
                    str(path),
                ],
                check=True,
                capture_output=True,
            )
            paths.append(path)
        return paths
    return _create_images


def count_frames(ffprobe_path: str, video_path: Path) -> int:
    result = subprocess.run(
        [
            ffprobe_path, "-v", "error",
            "-count_frames",
            "-select_streams", "v:0",
            "-show_entries", "stream=nb_read_frames",
            "-of", "csv=p=0",
            str(video_path),
        ],
        check=True,
        capture_output=True,
        text=True,
    )
    return int(result.stdout.strip())


@pytest.mark.integration
@pytest.mark.asyncio
@pytest.mark.parametrize("transition", ["fade", "slide", "zoom", "none"])
@pytest.mark.parametrize("image_count,duration,fps", [
    (3, 2.0, 30),
    (3, 0.5, 24),
    (2, 1.0, 25),
])
async def test_rendered_frame_count_matches_timeline(
    real_settings, real_images, tmp_path, transition, image_count, duration, fps
):
    """Test that every transition renders N * D * fps frames at the output size."""
    output = tmp_path / f"{transition}.mp4"
    options = VideoJobConfig(
        width=320, height=240, fps=fps, image_duration=duration, quality="low", transition=transition
    )

    metadata = await VideoProcessor(real_settings).create_video_from_images(
        real_images(image_count), output, options
    )

    assert count_frames(real_settings.ffprobe_path, output) == round(image_count * duration * fps)
    assert (metadata.width, metadata.height) == (320, 240)
    assert metadata.duration == pytest.approx(image_count * duration, abs=0.1)
    assert metadata.format == "mp4"


@pytest.mark.integration
@pytest.mark.asyncio
@pytest.mark.parametrize("transition", ["fade", "slide", "zoom"])
async def test_no_temporary_files_left(real_settings, real_images, tmp_path, transition):
    output = tmp_path / "out.mp4"
    options = VideoJobConfig(width=320, height=240, fps=24, image_duration=1.0, transition=transition)

    await VideoProcessor(real_settings).create_video_from_images(real_images(3), output, options)

    assert output.exists()
    assert not list(tmp_path.glob("out.part-*"))
    temp_dir = real_settings.temp_dir
    assert not temp_dir.exists() or list(temp_dir.iterdir()) == []


@pytest.mark.integration
@pytest.mark.asyncio
async def test_single_image_slide(real_settings, real_images, tmp_path):
    output = tmp_path / "single.mp4"
    options = VideoJobConfig(width=320, height=240, fps=30, image_duration=2.0, transition="slide")

    await VideoProcessor(real_settings).create_video_from_images(real_images(1), output, options)

    assert count_frames(real_settings.ffprobe_path, output) == 60
