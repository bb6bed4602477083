"""
Main entry point for slideshow module.

Orchestrates image-to-video composition: validates inputs, builds the manifest,
resolves encoder settings, runs the encode, then probes the result. Optional
audio mux and resize run on finished files only.
"""
import time
from pathlib import Path
from typing import Optional, Sequence, Union
from uuid import UUID, uuid4

from reelsmith.shared.config import Settings, get_settings
from reelsmith.shared.errors import ValidationError
from reelsmith.shared.logging import get_logger, job_context
from reelsmith.shared.models.video import MediaMetadata, QualityTier, VideoJobConfig

from .audio_muxer import AudioMuxer
from .encode_profile import resolve_encode_profile
from .executor import EventObserver, PipelineExecutor
from .manifest import build_manifest
from .prober import MetadataProber
from .resizer import VideoResizer
from .size_estimator import estimate_video_size
from .validator import ensure_image_formats

logger = get_logger("slideshow.process")

PathLike = Union[str, Path]


class VideoProcessor:
    """
    Image-to-video pipeline bound to one explicit Settings instance.

    Every method is a coroutine; wrap it in asyncio.create_task to get a
    cancellable job, and in asyncio.wait_for to bound its duration.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.executor = PipelineExecutor(self.settings)
        self.prober = MetadataProber(self.settings)
        self.muxer = AudioMuxer(self.settings)
        self.resizer = VideoResizer(self.settings)

    async def create_video_from_images(
        self,
        image_paths: Sequence[PathLike],
        output_path: PathLike,
        options: Optional[VideoJobConfig] = None,
        on_event: Optional[EventObserver] = None,
        job_id: Optional[UUID] = None
    ) -> MediaMetadata:
        """
        Encode an ordered image list into a video and probe it.

        Args:
            image_paths: Images in screen order
            output_path: Destination video path
            options: Output settings (defaults: 1920x1080, 3s/image, 30fps, mp4, medium, fade)
            on_event: Optional lifecycle observer
            job_id: Job identifier (generated when omitted)

        Returns:
            MediaMetadata of the finished video

        Raises:
            ValidationError: Empty list or unsupported formats (nothing launched)
            ConfigurationError: Missing tools or impossible configuration
            EncodeError / MediaIOError / ProbeError: After launch; temp files already removed
        """
        job_id = job_id or uuid4()
        with job_context(job_id):
            options = options or VideoJobConfig()
            start_time = time.time()

            # Input validation happens before any file or process exists
            if not image_paths:
                raise ValidationError("At least one image is required")
            ensure_image_formats(image_paths)

            output_path = Path(output_path)
            if not output_path.suffix:
                output_path = output_path.with_suffix(f".{options.output_format}")
            elif output_path.suffix.lower().lstrip(".") != options.output_format:
                raise ValidationError(
                    f"Output path {output_path} does not match format '{options.output_format}'"
                )

            manifest = build_manifest(image_paths, options.image_duration)
            profile = resolve_encode_profile(options.quality)

            logger.info(
                f"Creating video from {manifest.image_count} images "
                f"(~{self.estimate_size(manifest.image_count, options.image_duration, options.quality):.1f} MB)",
                extra={
                    "job_id": str(job_id),
                    "width": options.width,
                    "height": options.height,
                    "fps": options.fps,
                    "quality": options.quality.value,
                    "transition": options.transition.type,
                }
            )

            await self.executor.run(
                options,
                manifest,
                profile,
                output_path,
                transition=options.transition,
                on_event=on_event,
                job_id=job_id
            )
            metadata = await self.prober.probe(output_path, job_id=job_id)

            logger.info(
                f"Video created in {time.time() - start_time:.2f}s",
                extra={"job_id": str(job_id), "duration": metadata.duration, "size_bytes": metadata.size}
            )
            return metadata

    async def add_audio_to_video(
        self,
        video_path: PathLike,
        audio_path: PathLike,
        output_path: PathLike,
        job_id: Optional[UUID] = None
    ) -> MediaMetadata:
        """
        Mux an audio track into a finished video ("shortest" semantics) and probe it.

        Raises:
            MuxError: Missing or incompatible inputs
        """
        job_id = job_id or uuid4()
        with job_context(job_id):
            destination = await self.muxer.mux(video_path, audio_path, output_path, job_id=job_id)
            return await self.prober.probe(destination, job_id=job_id)

    async def resize_video(
        self,
        input_path: PathLike,
        output_path: PathLike,
        width: int,
        height: int,
        job_id: Optional[UUID] = None
    ) -> MediaMetadata:
        """Letterbox a finished video to width x height and probe it."""
        job_id = job_id or uuid4()
        with job_context(job_id):
            destination = await self.resizer.resize(input_path, output_path, width, height, job_id=job_id)
            return await self.prober.probe(destination, job_id=job_id)

    async def get_video_metadata(self, video_path: PathLike) -> MediaMetadata:
        return await self.prober.probe(video_path)

    @staticmethod
    def estimate_size(
        image_count: int,
        duration: float,
        quality: Union[QualityTier, str, None] = QualityTier.MEDIUM
    ) -> float:
        return estimate_video_size(image_count, duration, quality)
