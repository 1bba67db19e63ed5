"""
Process settings for instant-ink.
Handles environment variables and settings validation.
"""

import os
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from instant_ink.constants import AlertConstants, ConfigConstants


def _default_config_dir() -> str:
    """Resolve the per-user configuration directory."""
    base = os.getenv("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return str(Path(base) / ConfigConstants.CONFIG_DIR_NAME)


class InstantInkSettings(BaseSettings):
    """
    Process-level settings loaded from INSTANT_INK_* environment variables
    or a .env file.

    These are separate from the persisted printer configuration managed by
    ConfigService, which the user edits through the ``config`` subcommand.
    """

    log_level: str = Field(
        default="warning",
        description="Logging level: debug, info, warning, error, critical"
    )
    config_dir: str = Field(
        default_factory=_default_config_dir,
        description="Directory holding config.json. Created on first write."
    )
    low_ink_threshold: int = Field(
        default=AlertConstants.LOW_INK_THRESHOLD_PERCENT,
        description="Ink percentage at or below which an alert is printed.",
        ge=0,
        le=100
    )
    display_timezone: str = Field(
        default=ConfigConstants.DISPLAY_TIMEZONE,
        description="Timezone used for the Last Updated row of the table output."
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["debug", "info", "warning", "error", "critical"]
        if v.lower() not in valid_levels:
            raise ValueError(f"Log level must be one of: {', '.join(valid_levels)}")
        return v.lower()

    @property
    def config_path(self) -> Path:
        """Full path of the persisted configuration file."""
        return Path(self.config_dir) / ConfigConstants.CONFIG_FILE_NAME

    model_config = SettingsConfigDict(
        env_prefix="INSTANT_INK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )


# Global settings instance
_settings: Optional[InstantInkSettings] = None


def get_settings() -> InstantInkSettings:
    """Get global settings instance."""
    global _settings
    if _settings is None:
        _settings = InstantInkSettings()
    return _settings


def reload_settings() -> InstantInkSettings:
    """Reload settings from environment variables.

    Returns:
        Newly loaded InstantInkSettings instance.
    """
    global _settings
    _settings = InstantInkSettings()
    return _settings


def clear_settings() -> None:
    """Drop the global settings instance; the next get_settings() re-reads the environment."""
    global _settings
    _settings = None
