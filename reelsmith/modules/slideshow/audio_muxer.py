"""
Audio muxing for slideshow module.

Adds a separate audio track to a finished silent video.
"""
from pathlib import Path
from typing import Optional, Union
from uuid import UUID, uuid4

from reelsmith.shared.config import Settings
from reelsmith.shared.errors import EncodeError, MuxError
from reelsmith.shared.logging import get_logger
from .config import OUTPUT_AUDIO_CODEC
from .utils import (
    discard_partial,
    partial_path_for,
    promote_partial,
    require_tool,
    run_ffmpeg_command,
)

logger = get_logger("slideshow.audio_muxer")


class AudioMuxer:
    """
    Copies the video stream untouched, transcodes audio to AAC and stops at
    the shorter of the two streams.

    The video input must be fully written before mux starts.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def build_command(self, video_path: Path, audio_path: Path, output_path: Path):
        cmd = [self.settings.ffmpeg_path, "-hide_banner", "-nostdin"]
        if self.settings.ffmpeg_threads:
            cmd.extend(["-threads", str(self.settings.ffmpeg_threads)])
        cmd.extend([
            "-i", str(video_path),
            "-i", str(audio_path),
            "-map", "0:v:0",
            "-map", "1:a:0",
            "-c:v", "copy",  # Copy video (no re-encoding)
            "-c:a", OUTPUT_AUDIO_CODEC,
            "-shortest",
            "-y",
            str(output_path),
        ])
        return cmd

    async def mux(
        self,
        video_path: Union[str, Path],
        audio_path: Union[str, Path],
        destination: Union[str, Path],
        job_id: Optional[UUID] = None
    ) -> Path:
        """
        Combine video and audio into destination.

        Returns:
            destination

        Raises:
            MuxError: If an input is missing or ffmpeg rejects the inputs
            ConfigurationError: If ffmpeg is missing
            MediaIOError: If the output cannot be moved into place
        """
        job_id = job_id or uuid4()
        video_path, audio_path, destination = Path(video_path), Path(audio_path), Path(destination)

        for label, path in (("Video", video_path), ("Audio", audio_path)):
            if not path.is_file():
                raise MuxError(f"{label} input not found: {path}")
        require_tool(self.settings.ffmpeg_path, "ffmpeg")

        partial_path = partial_path_for(destination, job_id)
        logger.info(
            "Muxing audio into video",
            extra={"job_id": str(job_id), "video": str(video_path), "audio": str(audio_path)}
        )
        try:
            try:
                await run_ffmpeg_command(
                    self.build_command(video_path, audio_path, partial_path),
                    job_id=job_id,
                    cancel_grace_seconds=self.settings.cancel_grace_seconds
                )
            except EncodeError as e:
                raise MuxError(f"Failed to mux audio: {e}") from e
            promote_partial(partial_path, destination)
        except BaseException:
            discard_partial(partial_path, job_id)
            raise

        logger.info("Audio muxed", extra={"job_id": str(job_id), "destination": str(destination)})
        return destination
