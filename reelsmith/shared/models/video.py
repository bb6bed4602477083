"""
Video composition data models.

Defines the timed image manifest, job configuration, transition variants,
encoder profile, lifecycle events and probed media metadata.
"""

from enum import Enum
from pathlib import Path
from typing import Annotated, List, Literal, Optional, Sequence, Union
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

from reelsmith.shared.errors import ValidationError


class QualityTier(str, Enum):
    """Output quality tier, ordered LOW < MEDIUM < HIGH."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def parse(cls, value) -> "QualityTier":
        """Coerce a tier or tier name; unknown or missing values fall back to medium."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.MEDIUM


class ImageInput(BaseModel):
    """One still image and how long it stays on screen."""

    model_config = ConfigDict(frozen=True)

    path: Path = Field(description="Absolute image path")
    duration: float = Field(description="Display duration in seconds")

    @field_validator("path")
    @classmethod
    def resolve_path(cls, v: Path) -> Path:
        """Resolve to absolute form; the encoder may run in another working directory."""
        return v.resolve()

    @field_validator("duration")
    @classmethod
    def validate_duration(cls, v: float) -> float:
        if v <= 0:
            raise ValidationError(f"Image duration must be positive, got {v}")
        return v


class Manifest(BaseModel):
    """Ordered image list; order defines screen-time sequence."""

    model_config = ConfigDict(frozen=True)

    images: List[ImageInput]

    @field_validator("images")
    @classmethod
    def validate_images(cls, v: List[ImageInput]) -> List[ImageInput]:
        if not v:
            raise ValidationError("Manifest requires at least one image")
        return v

    @classmethod
    def from_paths(cls, image_paths: Sequence[Union[str, Path]], duration: float) -> "Manifest":
        """Build a manifest giving every image the same duration."""
        return cls(images=[ImageInput(path=Path(p), duration=duration) for p in image_paths])

    @property
    def image_count(self) -> int:
        return len(self.images)

    @property
    def total_duration(self) -> float:
        """Nominal timeline length in seconds."""
        return sum(image.duration for image in self.images)


class NoTransition(BaseModel):
    """Pass-through, no effect graph."""
    type: Literal["none"] = "none"


class FadeTransition(BaseModel):
    """Fade in from black at the start, fade out to black at the end."""
    type: Literal["fade"] = "fade"
    fade_seconds: float = Field(default=0.5, gt=0)


class SlideTransition(BaseModel):
    """Directional slide between consecutive images."""
    type: Literal["slide"] = "slide"
    direction: Literal["left", "right", "up", "down"] = "left"
    window_seconds: float = Field(default=1.0, gt=0)


class ZoomTransition(BaseModel):
    """Continuous centred zoom on every image."""
    type: Literal["zoom"] = "zoom"
    zoom_ratio: float = Field(default=1.2, gt=1.0, description="Final zoom factor per image")
    oversample: int = Field(default=2, ge=1, description="Upscale ratio before cropping")


TransitionSpec = Annotated[
    Union[NoTransition, FadeTransition, SlideTransition, ZoomTransition],
    Field(discriminator="type")
]

TRANSITION_TYPES = {
    "none": NoTransition,
    "fade": FadeTransition,
    "slide": SlideTransition,
    "zoom": ZoomTransition,
}


class EncodeProfile(BaseModel):
    """Encoder preset and constant-rate-factor pair."""

    model_config = ConfigDict(frozen=True)

    preset: str
    crf: int


class VideoJobConfig(BaseModel):
    """Output settings for one image-to-video job."""

    width: int = 1920
    height: int = 1080
    image_duration: float = Field(default=3.0, description="Seconds per image")
    fps: int = 30
    output_format: str = "mp4"
    quality: QualityTier = QualityTier.MEDIUM
    transition: TransitionSpec = Field(default_factory=FadeTransition)

    @field_validator("width", "height", "fps", "image_duration")
    @classmethod
    def validate_positive(cls, v, info):
        if v <= 0:
            raise ValidationError(f"{info.field_name} must be positive, got {v}")
        return v

    @field_validator("quality", mode="before")
    @classmethod
    def coerce_quality(cls, v):
        """Unknown or missing tiers fall back to medium."""
        return QualityTier.parse(v)

    @field_validator("transition", mode="before")
    @classmethod
    def coerce_transition(cls, v):
        """Accept the short names "fade", "slide", "zoom" and "none"."""
        if v is None:
            return NoTransition()
        if isinstance(v, str):
            transition_cls = TRANSITION_TYPES.get(v.lower())
            if transition_cls is None:
                raise ValidationError(f"Unsupported transition: {v}")
            return transition_cls()
        return v

    @field_validator("output_format")
    @classmethod
    def validate_output_format(cls, v: str) -> str:
        v = v.lower().lstrip(".")
        if not v.isalnum():
            raise ValidationError(f"Invalid output format: {v}")
        return v

    @model_validator(mode="after")
    def validate_even_dimensions(self) -> "VideoJobConfig":
        # yuv420p needs even dimensions
        if self.width % 2 or self.height % 2:
            raise ValidationError(f"Output size must be even, got {self.width}x{self.height}")
        return self


class MediaMetadata(BaseModel):
    """Measured attributes of a finished media file."""

    model_config = ConfigDict(frozen=True)

    duration: float = Field(description="Duration in seconds, 0 if unavailable")
    width: int
    height: int
    size: int = Field(description="File size in bytes")
    format: str = Field(description="Container format name")


class PipelineEvent(BaseModel):
    """Lifecycle notification for one encode job."""

    kind: Literal["started", "progress", "completed", "failed"]
    job_id: UUID
    command: Optional[List[str]] = None
    percent: Optional[float] = None
    error: Optional[str] = None

    @field_serializer("job_id")
    def serialize_uuid(self, value: UUID) -> str:
        """Serialize UUID to string."""
        return str(value)
