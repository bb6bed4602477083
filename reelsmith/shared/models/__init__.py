"""
Data models for the composition pipeline.

This module exports all Pydantic models used across pipeline modules.
"""

from .video import (
    QualityTier,
    ImageInput,
    Manifest,
    NoTransition,
    FadeTransition,
    SlideTransition,
    ZoomTransition,
    TransitionSpec,
    EncodeProfile,
    VideoJobConfig,
    MediaMetadata,
    PipelineEvent,
)

__all__ = [
    "QualityTier",
    "ImageInput",
    "Manifest",
    # Transition variants
    "NoTransition",
    "FadeTransition",
    "SlideTransition",
    "ZoomTransition",
    "TransitionSpec",
    # Encoding
    "EncodeProfile",
    "VideoJobConfig",
    "MediaMetadata",
    "PipelineEvent",
]
