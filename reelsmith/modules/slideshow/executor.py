"""
Encode execution for slideshow module.

Runs one image-to-video encode end-to-end: encoder inputs, ffmpeg
lifecycle, lifecycle events and cleanup on every exit path.
"""
import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Callable, List, Optional, Sequence
from uuid import UUID, uuid4

from reelsmith.shared.config import Settings
from reelsmith.shared.errors import ValidationError
from reelsmith.shared.logging import get_logger
from reelsmith.shared.models.video import (
    EncodeProfile,
    Manifest,
    NoTransition,
    PipelineEvent,
    VideoJobConfig,
)
from .config import GRAPH_OUTPUT_LABEL, OUTPUT_PIXEL_FORMAT, OUTPUT_VIDEO_CODEC
from .manifest import concat_input_args, looped_input_args, manifest_descriptor
from .transitions import compose_transition_graph, image_input_durations
from .utils import (
    discard_partial,
    partial_path_for,
    promote_partial,
    require_tool,
    run_ffmpeg_command,
)

logger = get_logger("slideshow.executor")

EventObserver = Callable[[PipelineEvent], None]


class PipelineExecutor:
    """
    Owns one encode job at a time; instances share no mutable state, so
    several may run concurrently against distinct destinations.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def _emit(self, observer: Optional[EventObserver], event: PipelineEvent) -> None:
        # Observers are informational; their failures never affect the job
        if observer is None:
            return
        try:
            observer(event)
        except Exception as e:
            logger.warning(
                f"Event observer failed on '{event.kind}': {e}",
                extra={"job_id": str(event.job_id)}
            )

    @asynccontextmanager
    async def _encoder_inputs(
        self,
        manifest: Manifest,
        input_durations: Optional[Sequence[float]],
        fps: int,
        job_id: UUID
    ) -> AsyncIterator[List[str]]:
        """Yield encoder input options; the concat descriptor lives only inside this block."""
        if input_durations is not None:
            yield looped_input_args(manifest, input_durations, fps)
            return
        async with manifest_descriptor(manifest, self.settings.temp_dir, job_id) as descriptor_path:
            yield concat_input_args(descriptor_path)

    def build_command(
        self,
        input_args: List[str],
        output_path: Path,
        config: VideoJobConfig,
        profile: EncodeProfile,
        filter_graph: Optional[str],
        total_seconds: float
    ) -> List[str]:
        """Assemble the ffmpeg invocation; input_args come from concat_input_args or looped_input_args."""
        cmd = [self.settings.ffmpeg_path, "-hide_banner", "-nostdin"]
        if self.settings.ffmpeg_threads:
            cmd.extend(["-threads", str(self.settings.ffmpeg_threads)])
        cmd.extend(input_args)
        if filter_graph:
            cmd.extend([
                "-filter_complex", filter_graph,
                "-map", f"[{GRAPH_OUTPUT_LABEL}]",
            ])
        cmd.extend([
            "-c:v", OUTPUT_VIDEO_CODEC,
            "-pix_fmt", OUTPUT_PIXEL_FORMAT,
            "-r", str(config.fps),
            "-s", f"{config.width}x{config.height}",
            "-preset", profile.preset,
            "-crf", str(profile.crf),
            "-t", f"{total_seconds:g}",
            "-progress", "pipe:1",
            "-nostats",
            "-y",
            str(output_path),
        ])
        return cmd

    async def run(
        self,
        config: VideoJobConfig,
        manifest: Manifest,
        profile: EncodeProfile,
        destination: Path,
        transition=None,
        on_event: Optional[EventObserver] = None,
        job_id: Optional[UUID] = None
    ) -> Path:
        """
        Encode the manifest into a video at destination.

        Args:
            config: Output size, fps and format
            manifest: Timed images, non-empty
            profile: Resolved preset and CRF
            destination: Final output path (its directory must exist)
            transition: Transition variant; defaults to config.transition
            on_event: Optional lifecycle observer (best-effort)
            job_id: Job ID for logging and temp naming

        Returns:
            destination, after any concat descriptor has been removed

        Raises:
            ValidationError: Empty manifest (nothing launched)
            ConfigurationError: Missing encoder or impossible graph (nothing launched),
                or the encoder could not be started
            EncodeError: Encoder exited nonzero
            MediaIOError: Descriptor or output could not be written or moved
        """
        job_id = job_id or uuid4()
        transition = transition if transition is not None else config.transition
        destination = Path(destination)

        if not manifest.images:
            raise ValidationError("Cannot encode an empty manifest")
        if len({image.duration for image in manifest.images}) > 1 and not isinstance(transition, NoTransition):
            raise ValidationError("Transitions require the same duration for every image")
        require_tool(self.settings.ffmpeg_path, "ffmpeg")

        per_image_duration = manifest.images[0].duration
        total_seconds = manifest.total_duration
        filter_graph = compose_transition_graph(
            transition,
            manifest.image_count,
            per_image_duration,
            config.fps,
            frame_size=(config.width, config.height)
        )
        input_durations = image_input_durations(
            transition, manifest.image_count, per_image_duration, config.fps
        )

        partial_path = partial_path_for(destination, job_id)

        def report_progress(percent: float) -> None:
            self._emit(on_event, PipelineEvent(kind="progress", job_id=job_id, percent=percent))

        try:
            async with self._encoder_inputs(manifest, input_durations, config.fps, job_id) as input_args:
                cmd = self.build_command(
                    input_args, partial_path, config, profile, filter_graph, total_seconds
                )
                self._emit(on_event, PipelineEvent(kind="started", job_id=job_id, command=cmd))
                logger.info(
                    f"Encoding {manifest.image_count} images ({total_seconds:g}s, "
                    f"{transition.type}, preset={profile.preset}, crf={profile.crf})",
                    extra={"job_id": str(job_id), "destination": str(destination)}
                )
                await run_ffmpeg_command(
                    cmd,
                    job_id=job_id,
                    total_seconds=total_seconds,
                    on_progress=report_progress,
                    cancel_grace_seconds=self.settings.cancel_grace_seconds
                )
            # Descriptor is gone before the output is claimed
            promote_partial(partial_path, destination)
        except BaseException as e:
            # Same cleanup for errors and cancellation; never leave a claimable output
            discard_partial(partial_path, job_id)
            error = "cancelled" if isinstance(e, asyncio.CancelledError) else str(e)
            self._emit(on_event, PipelineEvent(kind="failed", job_id=job_id, error=error))
            logger.warning(f"Encode failed: {error}", extra={"job_id": str(job_id)})
            raise

        self._emit(on_event, PipelineEvent(kind="completed", job_id=job_id, percent=100.0))
        logger.info("Encode completed", extra={"job_id": str(job_id), "destination": str(destination)})
        return destination
