"""
Transition filter graphs for slideshow module.

Builds the filter_complex applied to the encoder inputs: the concatenated
image stream [0:v] for fade and zoom, one looped input per image for slide.
Every timing value is derived from image count, per-image duration and fps only.
"""
from typing import List, Optional, Tuple

from reelsmith.shared.errors import ConfigurationError
from reelsmith.shared.logging import get_logger
from reelsmith.shared.models.video import (
    FadeTransition,
    NoTransition,
    SlideTransition,
    ZoomTransition,
)
from .config import GRAPH_OUTPUT_LABEL, OUTPUT_PIXEL_FORMAT
from .utils import letterbox_filter

logger = get_logger("slideshow.transitions")


def _normalize_chain(fps: int, frame_size: Optional[Tuple[int, int]]) -> List[str]:
    """
    Constant frame rate first so frame-based timing is exact, then letterbox
    every image onto the output frame when a size is known.
    """
    chain = [f"fps={fps}"]
    if frame_size is not None:
        chain.append(letterbox_filter(*frame_size))
    return chain


def timeline_frames(image_count: int, per_image_duration: float, fps: int) -> int:
    """Total frames in the nominal timeline."""
    return round(image_count * per_image_duration * fps)


def _fade_graph(
    transition: FadeTransition,
    image_count: int,
    per_image_duration: float,
    fps: int,
    frame_size: Optional[Tuple[int, int]]
) -> str:
    total_frames = timeline_frames(image_count, per_image_duration, fps)
    fade_frames = max(1, min(round(transition.fade_seconds * fps), total_frames // 2))
    # Fade-out ends on the last frame of the timeline
    fade_out_start = max(0, total_frames - fade_frames)

    chain = _normalize_chain(fps, frame_size)
    chain.append(f"fade=t=in:s=0:n={fade_frames}")
    chain.append(f"fade=t=out:s={fade_out_start}:n={fade_frames}")
    return f"[0:v]{','.join(chain)}[{GRAPH_OUTPUT_LABEL}]"


def _slide_window(transition: SlideTransition, per_image_duration: float) -> float:
    # Never longer than the shortest adjacent image
    return min(transition.window_seconds, per_image_duration)


def image_input_durations(
    transition,
    image_count: int,
    per_image_duration: float,
    fps: int
) -> Optional[List[float]]:
    """
    Lengths of the per-image looped inputs a graph reads, in manifest order.

    Returns:
        None when the graph reads the single concatenated stream [0:v]
    """
    if not isinstance(transition, SlideTransition) or image_count < 2:
        return None
    # Every image but the last stays on screen through the following window;
    # one spare frame keeps the window fully covered after rounding
    held = per_image_duration + _slide_window(transition, per_image_duration) + 1 / fps
    return [held] * (image_count - 1) + [per_image_duration]


def _slide_graph(
    transition: SlideTransition,
    image_count: int,
    per_image_duration: float,
    fps: int,
    frame_size: Optional[Tuple[int, int]]
) -> str:
    if image_count == 1:
        normalize = ",".join(_normalize_chain(fps, frame_size))
        return f"[0:v]{normalize}[{GRAPH_OUTPUT_LABEL}]"
    if frame_size is None:
        raise ConfigurationError("Slide transition requires an output frame size")

    window = _slide_window(transition, per_image_duration)
    # Input i is image i looped at fps (see image_input_durations); xfade
    # needs identical size, pixel format and frame rate on both sides
    parts = [
        f"[{i}:v]{letterbox_filter(*frame_size)},format={OUTPUT_PIXEL_FORMAT}[p{i}]"
        for i in range(image_count)
    ]

    # Output length is offset of the last xfade plus the last input: N * D
    previous = "p0"
    for k in range(1, image_count):
        label = GRAPH_OUTPUT_LABEL if k == image_count - 1 else f"x{k}"
        offset = k * per_image_duration
        parts.append(
            f"[{previous}][p{k}]xfade=transition=slide{transition.direction}"
            f":duration={window:g}:offset={offset:g}[{label}]"
        )
        previous = label

    return ";".join(parts)


def _zoom_graph(
    transition: ZoomTransition,
    image_count: int,
    per_image_duration: float,
    fps: int,
    frame_size: Optional[Tuple[int, int]]
) -> str:
    if frame_size is None:
        raise ConfigurationError("Zoom transition requires an output frame size")
    width, height = frame_size
    frames_per_image = max(1, round(per_image_duration * fps))
    total_frames = timeline_frames(image_count, per_image_duration, fps)
    growth = transition.zoom_ratio - 1.0

    # The concat stream carries one frame per image; zoompan expands each into
    # frames_per_image frames, so no fps conversion may precede it
    chain = [letterbox_filter(width, height)]
    # Upscale before cropping to keep the zoom smooth
    chain.append(f"scale=iw*{transition.oversample}:ih*{transition.oversample}")
    # Zoom restarts at 1.0 with every image and crops symmetrically around the centre
    chain.append(
        f"zoompan=z='1+{growth:g}*mod(on,{frames_per_image})/{frames_per_image}'"
        f":x='(iw-iw/zoom)/2':y='(ih-ih/zoom)/2'"
        f":d={frames_per_image}:fps={fps}:s={width}x{height}"
    )
    # Exactly N * D * fps frames on a 1/fps clock
    chain.append(f"trim=end_frame={total_frames}")
    chain.append(f"settb=1/{fps}")
    chain.append("setpts=N")
    return f"[0:v]{','.join(chain)}[{GRAPH_OUTPUT_LABEL}]"


def compose_transition_graph(
    transition,
    image_count: int,
    per_image_duration: float,
    fps: int,
    frame_size: Optional[Tuple[int, int]] = None
) -> Optional[str]:
    """
    Build the filter graph for a transition.

    Args:
        transition: One of NoTransition, FadeTransition, SlideTransition, ZoomTransition
        image_count: Number of images in the manifest
        per_image_duration: Seconds per image
        fps: Output frame rate
        frame_size: Output (width, height); required for zoom and multi-image slide

    Returns:
        filter_complex string whose output label is [v], or None for pass-through

    Raises:
        ConfigurationError: If the timing inputs are degenerate or the variant is unknown
    """
    if image_count <= 0:
        raise ConfigurationError(f"Transition graph requires at least one image, got {image_count}")
    if per_image_duration <= 0:
        raise ConfigurationError(f"Per-image duration must be positive, got {per_image_duration}")
    if fps <= 0:
        raise ConfigurationError(f"Frame rate must be positive, got {fps}")

    if isinstance(transition, NoTransition):
        return None
    if isinstance(transition, FadeTransition):
        graph = _fade_graph(transition, image_count, per_image_duration, fps, frame_size)
    elif isinstance(transition, SlideTransition):
        graph = _slide_graph(transition, image_count, per_image_duration, fps, frame_size)
    elif isinstance(transition, ZoomTransition):
        graph = _zoom_graph(transition, image_count, per_image_duration, fps, frame_size)
    else:
        raise ConfigurationError(f"Unsupported transition: {transition!r}")

    logger.debug(
        f"Composed {transition.type} graph for {image_count} images",
        extra={"transition": transition.type, "image_count": image_count, "filter_graph": graph}
    )
    return graph
