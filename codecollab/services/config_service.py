"""
Configuration Service

Loads the JSON configuration file, with dotted-key access.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from codecollab.core.errors import ConfigError

logger = logging.getLogger("codecollab.ConfigService")

DEFAULT_CONFIG_PATH = Path.home() / ".codecollab" / "config.json"


class ConfigService:
    """
    Service class for configuration management.

    Provides:
    - Configuration loading (a missing file means an empty config)
    - Dotted-key lookup ("openai.api_key")
    """

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self._config: Dict[str, Any] = {}

    def load(self) -> Dict[str, Any]:
        """
        Load configuration from file.

        Raises:
            ConfigError: If the file exists but is not a JSON object
        """
        if not self.config_path.exists():
            logger.debug(f"No config file at {self.config_path}, using defaults")
            self._config = {}
            return {}

        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Error parsing {self.config_path}: {e}")
            raise ConfigError(
                f"Error parsing {self.config_path}: {e}\n"
                "Please ensure the config file is valid JSON."
            ) from e
        except OSError as e:
            raise ConfigError(f"Cannot read {self.config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"{self.config_path} must contain a JSON object")

        self._config = data
        logger.info(f"Configuration loaded from {self.config_path}")
        return self._config.copy()

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value.

        Args:
            key: Configuration key (supports dot notation: "openai.api_key")
            default: Default value if key not found
        """
        value: Any = self._config
        for k in key.split("."):
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default
        return value if value is not None else default
