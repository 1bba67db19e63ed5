"""
Configuration service for instant-ink.
Manages the default printer and timeout persisted between invocations.
"""
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import structlog
from pydantic import ValidationError

from instant_ink.models.config import PersistedConfig
from instant_ink.utils.config import get_settings
from instant_ink.utils.exceptions import ConfigurationError

logger = structlog.get_logger()


class ConfigService:
    """Load and store PersistedConfig as JSON.

    A missing file means defaults; the file and its directory are created on
    first save.
    """

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize configuration service."""
        self.config_path = Path(config_path) if config_path else get_settings().config_path

    def load(self) -> PersistedConfig:
        """Read the config file, returning defaults when it does not exist.

        Raises:
            ConfigurationError: The file is unreadable or malformed.
        """
        if not self.config_path.exists():
            logger.debug("No config file, using defaults", path=str(self.config_path))
            return PersistedConfig()

        try:
            content = self.config_path.read_text(encoding="utf-8")
            config = PersistedConfig.model_validate(json.loads(content))
        except OSError as e:
            raise ConfigurationError(
                f"Failed to read config file: {e}", details={"path": str(self.config_path)}
            ) from e
        except (json.JSONDecodeError, ValidationError) as e:
            raise ConfigurationError(
                f"Failed to parse config file: {e}", details={"path": str(self.config_path)}
            ) from e

        logger.debug("Loaded config", path=str(self.config_path), printer_url=config.printer_url)
        return config

    def save(self, config: PersistedConfig) -> PersistedConfig:
        """Write the config file, stamping last_updated.

        Raises:
            ConfigurationError: The directory or file cannot be written.
        """
        stamped = config.model_copy(update={"last_updated": datetime.now(timezone.utc)})
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            self.config_path.write_text(stamped.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(
                f"Failed to write config file: {e}", details={"path": str(self.config_path)}
            ) from e

        logger.info("Configuration saved", path=str(self.config_path))
        return stamped

    def reset(self) -> PersistedConfig:
        """Overwrite the config file with defaults."""
        return self.save(PersistedConfig())
