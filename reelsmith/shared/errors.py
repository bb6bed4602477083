"""
Error taxonomy.

Typed failures surfaced by the composition pipeline. Errors derive from
Exception rather than ValueError so pydantic validators propagate them unchanged.
"""
from typing import Optional


class ReelsmithError(Exception):
    """Base class for all pipeline errors."""


class ValidationError(ReelsmithError):
    """Input rejected before any external process is launched."""


class ConfigurationError(ReelsmithError):
    """Missing or misconfigured executable, or an impossible job configuration."""


# Settings validators raise ConfigError
ConfigError = ConfigurationError


class EncodeError(ReelsmithError):
    """External encoder exited unsuccessfully."""

    def __init__(self, message: str, returncode: Optional[int] = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class MediaIOError(ReelsmithError):
    """Temporary descriptor or output file could not be written, moved or read."""


class ProbeError(ReelsmithError):
    """Media file could not be probed, or has no video stream."""


class MuxError(ReelsmithError):
    """Audio and video inputs could not be combined."""
