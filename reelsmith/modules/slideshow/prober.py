"""
Media metadata probing for slideshow module.

Uses ffprobe for stream/container facts and the filesystem for size.
"""
import json
from pathlib import Path
from typing import Any, Dict, Optional, Union
from uuid import UUID, uuid4

from reelsmith.shared.config import Settings
from reelsmith.shared.errors import EncodeError, ProbeError
from reelsmith.shared.logging import get_logger
from reelsmith.shared.models.video import MediaMetadata
from .utils import require_tool, run_ffmpeg_command

logger = get_logger("slideshow.prober")


def _as_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def container_name(format_name: Optional[str], suffix: str = "") -> str:
    """
    Reduce ffprobe's demuxer list (e.g. "mov,mp4,m4a,3gp,3g2,mj2") to one name.

    The entry matching the file suffix wins, otherwise the first entry.
    """
    names = [name.strip() for name in (format_name or "").split(",") if name.strip()]
    if not names:
        return "unknown"
    wanted = suffix.lower().lstrip(".")
    return wanted if wanted in names else names[0]


def parse_probe_output(probe: Dict[str, Any], size: int, suffix: str = "") -> MediaMetadata:
    """
    Build MediaMetadata from ffprobe JSON.

    Raises:
        ProbeError: If the file has no video stream
    """
    streams = probe.get("streams") or []
    video_stream = next((s for s in streams if s.get("codec_type") == "video"), None)
    if video_stream is None:
        raise ProbeError("No video stream found")

    fmt = probe.get("format") or {}
    return MediaMetadata(
        duration=_as_float(fmt.get("duration")),
        width=_as_int(video_stream.get("width")),
        height=_as_int(video_stream.get("height")),
        size=size,
        format=container_name(fmt.get("format_name"), suffix)
    )


class MetadataProber:
    """Reads duration, dimensions, size and container of a media file."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def build_command(self, media_path: Path):
        return [
            self.settings.ffprobe_path,
            "-v", "error",
            "-print_format", "json",
            "-show_format",
            "-show_streams",
            str(media_path),
        ]

    async def probe(self, media_path: Union[str, Path], job_id: Optional[UUID] = None) -> MediaMetadata:
        """
        Probe a media file.

        Args:
            media_path: File to inspect
            job_id: Job ID for logging

        Returns:
            MediaMetadata

        Raises:
            ConfigurationError: If ffprobe is missing
            ProbeError: If the file is unreadable, unparsable or has no video stream
        """
        job_id = job_id or uuid4()
        media_path = Path(media_path)
        require_tool(self.settings.ffprobe_path, "ffprobe")

        # Size comes from the filesystem, not from the encoder's own report
        try:
            size = media_path.stat().st_size
        except OSError as e:
            raise ProbeError(f"Cannot read media file {media_path}: {e}") from e

        try:
            stdout, _ = await run_ffmpeg_command(self.build_command(media_path), job_id=job_id)
        except EncodeError as e:
            raise ProbeError(f"ffprobe failed for {media_path}: {e.stderr.strip() or e}") from e

        try:
            probe = json.loads(stdout)
        except json.JSONDecodeError as e:
            raise ProbeError(f"Unreadable ffprobe output for {media_path}: {e}") from e

        metadata = parse_probe_output(probe, size, media_path.suffix)
        logger.info(
            f"Probed {media_path.name}: {metadata.duration:.3f}s "
            f"{metadata.width}x{metadata.height} {metadata.format}",
            extra={"job_id": str(job_id), "size_bytes": metadata.size}
        )
        return metadata
