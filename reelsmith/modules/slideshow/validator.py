"""
Input format validation for slideshow module.
"""
from pathlib import Path
from typing import Iterable, Union

from reelsmith.shared.errors import ValidationError
from .config import SUPPORTED_IMAGE_EXTENSIONS


def _extension(image_path: Union[str, Path]) -> str:
    return Path(image_path).suffix.lower()


def validate_image_formats(image_paths: Iterable[Union[str, Path]]) -> bool:
    """
    Check that every path has a supported image extension.

    Args:
        image_paths: Candidate image paths

    Returns:
        True if every extension (case-insensitive) is supported
    """
    return all(_extension(p) in SUPPORTED_IMAGE_EXTENSIONS for p in image_paths)


def ensure_image_formats(image_paths: Iterable[Union[str, Path]]) -> None:
    """
    Raise on the first unsupported image path.

    Raises:
        ValidationError: If any path has an unsupported extension
    """
    for image_path in image_paths:
        if _extension(image_path) not in SUPPORTED_IMAGE_EXTENSIONS:
            supported = ", ".join(sorted(SUPPORTED_IMAGE_EXTENSIONS))
            raise ValidationError(
                f"Unsupported image format '{_extension(image_path) or '<none>'}' "
                f"for {image_path} (supported: {supported})"
            )
