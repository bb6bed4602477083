"""
Output size estimation for slideshow module.

Simple formula: image_count * duration * base_rate * quality_factor
"""
from typing import Union

from reelsmith.shared.models.video import QualityTier
from .config import BASE_MB_PER_IMAGE_SECOND, QUALITY_SIZE_FACTORS


def estimate_video_size(
    image_count: int,
    duration: float,
    quality: Union[QualityTier, str, None] = QualityTier.MEDIUM
) -> float:
    """
    Estimate output size in megabytes. Informational only.

    Args:
        image_count: Number of images
        duration: Seconds per image
        quality: Quality tier (unknown tiers count as medium)

    Returns:
        Approximate size in MB
    """
    tier = QualityTier.parse(quality)
    return image_count * duration * BASE_MB_PER_IMAGE_SECOND * QUALITY_SIZE_FACTORS[tier]
