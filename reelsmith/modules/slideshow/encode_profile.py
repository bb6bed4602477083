"""
Encoder parameter resolution for slideshow module.
"""
from typing import Union

from reelsmith.shared.models.video import EncodeProfile, QualityTier
from .config import ENCODE_PROFILES


def resolve_encode_profile(quality: Union[QualityTier, str, None] = None) -> EncodeProfile:
    """
    Map a quality tier to an x264 preset and CRF.

    Unknown or missing tiers resolve to the medium profile.
    """
    tier = QualityTier.parse(quality)
    preset, crf = ENCODE_PROFILES[tier]
    return EncodeProfile(preset=preset, crf=crf)
