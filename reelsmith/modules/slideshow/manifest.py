"""
Concat manifest building for slideshow module.

Turns an ordered image list into a timed concat-demuxer descriptor that lives
only for the duration of one encode.
"""
import asyncio
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, List, Sequence, Union
from uuid import UUID

from reelsmith.shared.errors import MediaIOError
from reelsmith.shared.logging import get_logger
from reelsmith.shared.models.video import Manifest
from .config import DESCRIPTOR_PREFIX, DESCRIPTOR_SUFFIX

logger = get_logger("slideshow.manifest")


def build_manifest(image_paths: Sequence[Union[str, Path]], duration: float) -> Manifest:
    """
    Build a manifest with absolute paths and a uniform per-image duration.

    Raises:
        ValidationError: If the list is empty or duration is not positive
    """
    return Manifest.from_paths(image_paths, duration)


def _quote(path: Path) -> str:
    # concat demuxer: close the quote, emit an escaped quote, reopen
    return "'" + str(path).replace("'", "'\\''") + "'"


def render_concat_descriptor(manifest: Manifest) -> str:
    """
    Render a manifest in ffmpeg concat-demuxer syntax.

    The demuxer ignores the duration of the final entry, so the last image is
    listed once more without a duration.
    """
    lines = []
    for image in manifest.images:
        lines.append(f"file {_quote(image.path)}")
        lines.append(f"duration {image.duration:g}")
    lines.append(f"file {_quote(manifest.images[-1].path)}")
    return "\n".join(lines) + "\n"


def descriptor_path_for(temp_dir: Path, job_id: UUID) -> Path:
    """Unique descriptor path: job id prefix, nanosecond timestamp suffix."""
    return temp_dir / f"{DESCRIPTOR_PREFIX}{job_id.hex[:8]}_{time.time_ns()}{DESCRIPTOR_SUFFIX}"


def _write_descriptor(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _discard_descriptor(path: Path, job_id: UUID) -> None:
    """Remove a descriptor while another error is propagating; log instead of raising."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        # The job's own failure takes precedence
        logger.warning(
            f"Failed to delete concat descriptor: {e}",
            extra={"job_id": str(job_id), "descriptor": str(path)}
        )


def concat_input_args(descriptor_path: Path) -> List[str]:
    """Encoder input options reading the descriptor as one concatenated stream."""
    return ["-f", "concat", "-safe", "0", "-i", str(descriptor_path)]


def looped_input_args(manifest: Manifest, input_durations: Sequence[float], fps: int) -> List[str]:
    """
    Encoder input options opening every image as its own constant-rate stream.

    Input i is manifest.images[i] repeated at fps for input_durations[i] seconds.
    """
    args: List[str] = []
    for image, length in zip(manifest.images, input_durations):
        args.extend([
            "-loop", "1",
            "-framerate", str(fps),
            "-t", f"{length:.6f}",
            "-i", str(image.path),
        ])
    return args


@asynccontextmanager
async def manifest_descriptor(
    manifest: Manifest,
    temp_dir: Path,
    job_id: UUID
) -> AsyncIterator[Path]:
    """
    Materialize the manifest as a temporary descriptor file.

    The file is removed exactly once when the block exits, whether it
    completes, raises or is cancelled, including cancellation while the
    file is still being written.

    Args:
        manifest: Images to list
        temp_dir: Directory for transient descriptors (created on demand)
        job_id: Job ID for naming and logging

    Yields:
        Path to the descriptor

    Raises:
        MediaIOError: If the descriptor cannot be written
    """
    descriptor_path = descriptor_path_for(temp_dir, job_id)
    content = render_concat_descriptor(manifest)

    write = asyncio.ensure_future(asyncio.to_thread(_write_descriptor, descriptor_path, content))
    try:
        await asyncio.shield(write)
    except OSError as e:
        # A half-written file may exist
        _discard_descriptor(descriptor_path, job_id)
        raise MediaIOError(f"Failed to write concat descriptor {descriptor_path}: {e}") from e
    except BaseException:
        # Worker threads cannot be interrupted; the file appears once the
        # write finishes, so wait for it before removing
        if not write.done():
            await asyncio.wait([write])
        if not write.cancelled() and write.exception() is not None:
            logger.debug(
                f"Descriptor write failed after cancellation: {write.exception()}",
                extra={"job_id": str(job_id)}
            )
        _discard_descriptor(descriptor_path, job_id)
        raise

    logger.debug(
        f"Wrote concat descriptor ({manifest.image_count} images)",
        extra={"job_id": str(job_id), "descriptor": str(descriptor_path)}
    )

    try:
        yield descriptor_path
    except BaseException:
        _discard_descriptor(descriptor_path, job_id)
        raise

    try:
        descriptor_path.unlink(missing_ok=True)
    except OSError as e:
        raise MediaIOError(f"Failed to delete concat descriptor {descriptor_path}: {e}") from e
    logger.debug(
        "Deleted concat descriptor",
        extra={"job_id": str(job_id), "descriptor": str(descriptor_path)}
    )
