"""
config.py - Environment-aware settings for classpool.

Settings are read from ``CLASSPOOL_*`` environment variables through
Pydantic's BaseSettings and validated on load. They control logging sinks
and the defaults of the package-scanning discovery provider; registries
themselves take no configuration.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


VALID_LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class ClassPoolSettings(BaseSettings):
    """
    Environment-aware settings for classpool.

    Example:
        CLASSPOOL_LOG_LEVEL=DEBUG CLASSPOOL_RECURSIVE=false python app.py
    """
    log_level: str = Field(
        default="WARNING",
        description="Minimum level for the console sink",
    )

    log_file: Optional[Path] = Field(
        default=None,
        description="Optional file sink receiving DEBUG and above",
    )

    console_logging: bool = Field(
        default=True,
        description="Attach a stderr sink when logging is auto-initialized",
    )

    include_private_modules: bool = Field(
        default=True,
        description="Scan modules whose name starts with an underscore",
    )

    recursive: bool = Field(
        default=True,
        description="Descend into sub-packages while scanning a namespace",
    )

    model_config = SettingsConfigDict(
        env_prefix="CLASSPOOL_",
        case_sensitive=False,
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the log level name."""
        level = v.upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log level '{v}'. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
            )
        return level


@lru_cache(maxsize=1)
def get_settings() -> ClassPoolSettings:
    """Return the process-wide settings, loading them on first use."""
    return ClassPoolSettings()


def reset_settings() -> None:
    """Forget cached settings so the environment is re-read on next access."""
    get_settings.cache_clear()


__all__ = [
    "ClassPoolSettings",
    "VALID_LOG_LEVELS",
    "get_settings",
    "reset_settings",
]
