"""
Video resizing for slideshow module.

Letterboxes a finished video onto a new frame size, keeping its aspect ratio.
"""
from pathlib import Path
from typing import Optional, Union
from uuid import UUID, uuid4

from reelsmith.shared.config import Settings
from reelsmith.shared.errors import ValidationError
from reelsmith.shared.logging import get_logger
from .config import OUTPUT_PIXEL_FORMAT, OUTPUT_VIDEO_CODEC
from .utils import (
    letterbox_filter,
    discard_partial,
    partial_path_for,
    promote_partial,
    require_tool,
    run_ffmpeg_command,
)

logger = get_logger("slideshow.resizer")


class VideoResizer:
    def __init__(self, settings: Settings):
        self.settings = settings

    async def resize(
        self,
        input_path: Union[str, Path],
        destination: Union[str, Path],
        width: int,
        height: int,
        job_id: Optional[UUID] = None
    ) -> Path:
        """
        Re-encode input_path at width x height.

        Raises:
            ValidationError: Missing input or invalid size (nothing launched)
            EncodeError: If ffmpeg fails
        """
        job_id = job_id or uuid4()
        input_path, destination = Path(input_path), Path(destination)

        if width <= 0 or height <= 0 or width % 2 or height % 2:
            raise ValidationError(f"Output size must be positive and even, got {width}x{height}")
        if not input_path.is_file():
            raise ValidationError(f"Input video not found: {input_path}")
        require_tool(self.settings.ffmpeg_path, "ffmpeg")

        partial_path = partial_path_for(destination, job_id)
        cmd = [
            self.settings.ffmpeg_path, "-hide_banner", "-nostdin",
            "-i", str(input_path),
            "-vf", letterbox_filter(width, height),
            "-c:v", OUTPUT_VIDEO_CODEC,
            "-pix_fmt", OUTPUT_PIXEL_FORMAT,
            "-c:a", "copy",
            "-y",
            str(partial_path),
        ]

        logger.info(
            f"Resizing video to {width}x{height}",
            extra={"job_id": str(job_id), "input": str(input_path)}
        )
        try:
            await run_ffmpeg_command(
                cmd, job_id=job_id, cancel_grace_seconds=self.settings.cancel_grace_seconds
            )
            promote_partial(partial_path, destination)
        except BaseException:
            discard_partial(partial_path, job_id)
            raise
        return destination
