"""
Slideshow configuration.

Centralized encoder settings, quality tiers and transition defaults.
"""
from typing import Dict, Tuple

from reelsmith.shared.models.video import QualityTier

# Supported still-image inputs (compared case-insensitively)
SUPPORTED_IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".bmp", ".tiff"})

# FFmpeg settings
OUTPUT_VIDEO_CODEC = "libx264"
OUTPUT_AUDIO_CODEC = "aac"
OUTPUT_PIXEL_FORMAT = "yuv420p"

# Quality tier -> (preset, crf). Higher quality: lower CRF, slower preset
ENCODE_PROFILES: Dict[QualityTier, Tuple[str, int]] = {
    QualityTier.LOW: ("ultrafast", 28),
    QualityTier.MEDIUM: ("medium", 23),
    QualityTier.HIGH: ("slow", 18),
}

# Size estimation (MB per image-second at medium quality)
BASE_MB_PER_IMAGE_SECOND = 0.5
QUALITY_SIZE_FACTORS: Dict[QualityTier, float] = {
    QualityTier.LOW: 0.5,
    QualityTier.MEDIUM: 1.0,
    QualityTier.HIGH: 2.0,
}

# Filter graph output label
GRAPH_OUTPUT_LABEL = "v"

# Concat descriptor naming, e.g. input_1a2b3c4d_1718000000000000000.txt
DESCRIPTOR_PREFIX = "input_"
DESCRIPTOR_SUFFIX = ".txt"

# Partial outputs are written beside the destination and renamed on success
PARTIAL_MARKER = ".part"
