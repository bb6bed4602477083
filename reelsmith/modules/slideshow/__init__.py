"""
Slideshow module.

Turns an ordered list of still images into a finished video: timed concat
manifest, transition graph, quality profile, encode, optional audio mux and
metadata probe.
"""

from reelsmith.modules.slideshow.process import VideoProcessor
from reelsmith.modules.slideshow.validator import validate_image_formats
from reelsmith.modules.slideshow.size_estimator import estimate_video_size

__all__ = ["VideoProcessor", "validate_image_formats", "estimate_video_size"]
