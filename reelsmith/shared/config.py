"""
Configuration management.

Centralized environment variable management and validation.
"""

from pathlib import Path
from typing import Literal, Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from reelsmith.shared.errors import ConfigError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,  # Allow case-insensitive env var matching
        extra="ignore"
    )

    # External tools
    ffmpeg_path: str = "/usr/bin/ffmpeg"
    ffprobe_path: str = "/usr/bin/ffprobe"

    # FFMPEG_THREADS: 0 lets the encoder pick a thread count
    ffmpeg_threads: int = 0

    # Working directory for transient concat descriptors, created on demand
    temp_dir: Path = Path("temp")

    # CANCEL_GRACE_SECONDS: how long a cancelled encoder may take to exit
    # after SIGTERM before it is killed
    cancel_grace_seconds: float = 5.0

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_dir: Optional[Path] = Path("logs")  # Empty LOG_DIR disables the file handler

    @field_validator("ffmpeg_path", "ffprobe_path")
    @classmethod
    def validate_tool_path(cls, v: str) -> str:
        """Validate executable path is not blank."""
        if not v or not v.strip():
            raise ConfigError("FFMPEG_PATH and FFPROBE_PATH must not be empty")
        return v.strip()

    @field_validator("ffmpeg_threads")
    @classmethod
    def validate_ffmpeg_threads(cls, v: int) -> int:
        if v < 0:
            raise ConfigError("FFMPEG_THREADS must be >= 0")
        return v

    @field_validator("cancel_grace_seconds")
    @classmethod
    def validate_cancel_grace(cls, v: float) -> float:
        if v <= 0:
            raise ConfigError("CANCEL_GRACE_SECONDS must be positive")
        return v

    @field_validator("log_dir", mode="before")
    @classmethod
    def validate_log_dir(cls, v):
        """Treat an empty LOG_DIR as 'no file logging'."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return v


def get_settings() -> Settings:
    """
    Build a fresh Settings instance from the current environment.

    Returns:
        Settings

    Raises:
        ConfigError: If the environment holds invalid values
    """
    try:
        return Settings()
    except Exception as e:
        # Re-raise as ConfigError for consistency
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(f"Failed to load configuration: {str(e)}") from e


# Singleton instance (logging only; pipeline components take Settings explicitly)
settings = get_settings()
