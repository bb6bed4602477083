"""
Utility functions for slideshow module.

FFmpeg/ffprobe process execution, availability checks and partial-output handling.
"""
import asyncio
import os
import shutil
from pathlib import Path
from typing import Callable, List, Optional, Tuple
from uuid import UUID

from reelsmith.shared.errors import ConfigurationError, EncodeError, MediaIOError
from reelsmith.shared.logging import get_logger
from .config import PARTIAL_MARKER

logger = get_logger("slideshow.utils")

ProgressCallback = Callable[[float], None]

# Keep the tail of stderr in error messages
STDERR_TAIL_CHARS = 2000


def check_tool_available(executable: str) -> bool:
    """
    Check if an executable exists, either as a path or on PATH.

    Args:
        executable: Configured path or bare command name

    Returns:
        True if the executable can be launched
    """
    if os.sep in executable or (os.altsep and os.altsep in executable):
        return os.path.isfile(executable) and os.access(executable, os.X_OK)
    return shutil.which(executable) is not None


def require_tool(executable: str, name: str) -> None:
    """
    Raises:
        ConfigurationError: If the executable is missing
    """
    if not check_tool_available(executable):
        raise ConfigurationError(
            f"{name} not found at '{executable}'. Install FFmpeg or set "
            f"{name.upper()}_PATH:\n"
            "  macOS: brew install ffmpeg\n"
            "  Linux: apt-get install ffmpeg or yum install ffmpeg\n"
            "  Windows: Download from https://ffmpeg.org/"
        )


def letterbox_filter(width: int, height: int) -> str:
    """Scale to fit inside width x height, pad the rest with black."""
    return (
        f"scale={width}:{height}:force_original_aspect_ratio=decrease,"
        f"pad={width}:{height}:(ow-iw)/2:(oh-ih)/2:color=black,"
        f"setsar=1"
    )


def partial_path_for(destination: Path, job_id: UUID) -> Path:
    """
    Sibling path the encoder writes to before the result is moved into place.

    The real extension is kept last so ffmpeg still infers the container.
    """
    return destination.with_name(
        f"{destination.stem}{PARTIAL_MARKER}-{job_id.hex[:8]}{destination.suffix}"
    )


def discard_partial(partial_path: Path, job_id: UUID) -> None:
    """Remove a partial output, logging rather than raising on failure."""
    try:
        partial_path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(
            f"Failed to remove partial output: {e}",
            extra={"job_id": str(job_id), "partial_path": str(partial_path)}
        )


def promote_partial(partial_path: Path, destination: Path) -> Path:
    """
    Move a finished partial output onto its destination.

    Raises:
        MediaIOError: If the output is missing or cannot be moved
    """
    if not partial_path.exists():
        raise MediaIOError(f"Output not created: {partial_path}")
    try:
        os.replace(partial_path, destination)
    except OSError as e:
        raise MediaIOError(f"Failed to move output to {destination}: {e}") from e
    return destination


def parse_progress_seconds(line: str) -> Optional[float]:
    """
    Extract the encoded position from one `-progress` key=value line.

    Returns:
        Seconds encoded so far, or None for unrelated lines
    """
    key, _, value = line.strip().partition("=")
    if key not in ("out_time_us", "out_time_ms"):
        return None
    try:
        # out_time_ms is microseconds too, despite its name
        return int(value) / 1_000_000
    except ValueError:
        return None


async def _read_progress(
    stream: Optional[asyncio.StreamReader],
    total_seconds: Optional[float],
    on_progress: Optional[ProgressCallback]
) -> None:
    if stream is None:
        return
    while True:
        line = await stream.readline()
        if not line:
            return
        if on_progress is None or not total_seconds:
            continue
        seconds = parse_progress_seconds(line.decode(errors="replace"))
        if seconds is None:
            continue
        on_progress(max(0.0, min(100.0, seconds / total_seconds * 100)))


async def _read_all(stream: Optional[asyncio.StreamReader]) -> bytes:
    if stream is None:
        return b""
    return await stream.read()


async def terminate_process(process: asyncio.subprocess.Process, grace_seconds: float) -> None:
    """Send SIGTERM, then SIGKILL if the process outlives the grace period."""
    if process.returncode is not None:
        return
    try:
        process.terminate()
    except ProcessLookupError:
        return
    try:
        await asyncio.wait_for(process.wait(), timeout=grace_seconds)
    except asyncio.TimeoutError:
        try:
            process.kill()
        except ProcessLookupError:
            return
        await process.wait()


async def run_ffmpeg_command(
    cmd: List[str],
    job_id: UUID,
    total_seconds: Optional[float] = None,
    on_progress: Optional[ProgressCallback] = None,
    cancel_grace_seconds: float = 5.0
) -> Tuple[str, str]:
    """
    Run an FFmpeg/ffprobe command to completion.

    No timeout is applied; callers wrap the await in asyncio.wait_for when they
    need one. Cancelling the awaiting task terminates the process.

    Args:
        cmd: Command as list of strings (executable first)
        job_id: Job ID for logging
        total_seconds: Expected output length, for progress percentages
        on_progress: Called with a percentage for each `-progress` update
        cancel_grace_seconds: Time allowed between SIGTERM and SIGKILL

    Returns:
        Tuple of (stdout or "" when progress is consumed, stderr)

    Raises:
        ConfigurationError: If the executable cannot be launched
        EncodeError: If the command exits nonzero
    """
    logger.info(
        f"Running command: {' '.join(cmd)}",
        extra={"job_id": str(job_id), "command": cmd}
    )

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE
        )
    except OSError as e:
        raise ConfigurationError(f"Failed to launch {cmd[0]}: {e}") from e

    try:
        if on_progress is not None:
            _, stderr, _ = await asyncio.gather(
                _read_progress(process.stdout, total_seconds, on_progress),
                _read_all(process.stderr),
                process.wait()
            )
            stdout = b""
        else:
            stdout, stderr = await process.communicate()
    except asyncio.CancelledError:
        logger.warning(
            "Command cancelled, terminating process",
            extra={"job_id": str(job_id), "command": cmd}
        )
        await asyncio.shield(terminate_process(process, cancel_grace_seconds))
        raise

    stderr_text = stderr.decode(errors="replace") if stderr else ""
    if process.returncode != 0:
        error_msg = stderr_text[-STDERR_TAIL_CHARS:].strip() or "Unknown FFmpeg error"
        logger.error(
            f"Command failed with exit code {process.returncode}: {error_msg}",
            extra={"job_id": str(job_id), "returncode": process.returncode, "command": cmd}
        )
        raise EncodeError(
            f"{Path(cmd[0]).name} exited with code {process.returncode}: {error_msg}",
            returncode=process.returncode,
            stderr=stderr_text
        )

    return (stdout.decode(errors="replace") if stdout else ""), stderr_text
