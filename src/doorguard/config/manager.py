"""Configuration Manager - Environment-based startup configuration.

Loads the guard's configuration from the process environment, optionally
seeded from a .env file, validates every registered key and exposes the
result as an immutable GuardSettings instance.

Precedence: registry defaults < .env file < process environment
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
import structlog

from .registry import (
    REGISTRY,
    get_config_key,
    validate_config_value,
)

logger = structlog.get_logger(__name__)


class ConfigError(ValueError):
    """Raised when the startup configuration is missing or invalid."""


@dataclass(frozen=True)
class GuardSettings:
    """Validated startup configuration."""
    bus_id: str
    bus_address: str
    motion_device_id: str
    door_device_id: str
    telegram_chat_id: int
    telegram_token: str
    log_level: str = "INFO"

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "GuardSettings":
        return cls(
            bus_id=config["bus.id"],
            bus_address=config["bus.address"],
            motion_device_id=config["devices.motion_id"],
            door_device_id=config["devices.door_id"],
            telegram_chat_id=config["telegram.chat_id"],
            telegram_token=config["telegram.token"],
            log_level=config["logging.level"].upper(),
        )


def _redact_sensitive_value(key: str, value: Any) -> Any:
    """Redact secret configuration values for logging.

    Args:
        key: Configuration key
        value: Configuration value

    Returns:
        Original value if not secret, otherwise "[REDACTED]"
    """
    if key in REGISTRY and REGISTRY[key].secret:
        return "[REDACTED]"
    return value


class ConfigManager:
    """Loads and holds the guard configuration.

    Attributes:
        config: Parsed configuration keyed by dotted key path
        env_file: Optional .env file loaded before reading the environment
    """

    def __init__(self, env_file: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None):
        """Initialize configuration manager.

        Args:
            env_file: Path to .env file (default: .env in working directory)
            environ: Environment mapping to read from (default: os.environ)
        """
        self.config: dict[str, Any] = {}

        if env_file is None:
            env_file = Path(".env")

        self.env_file = env_file
        self._environ = environ

        logger.debug("config_manager_initialized", env_file=str(env_file))

    def load(self) -> GuardSettings:
        """Load, parse and validate every registered key.

        Returns:
            GuardSettings built from the loaded configuration

        Raises:
            ConfigError: If required variables are missing or values are invalid.
                All missing variables are reported in a single error.
        """
        if self._environ is None and self.env_file.exists():
            # Existing process variables are not overridden by the file
            load_dotenv(self.env_file, override=False)
            logger.info("env_file_loaded", env_file=str(self.env_file))

        environ = self._environ if self._environ is not None else os.environ

        config: dict[str, Any] = {}
        missing: list[str] = []

        for key, config_key in REGISTRY.items():
            raw = environ.get(config_key.env_var)
            if raw is None or raw.strip() == "":
                if config_key.required:
                    missing.append(config_key.env_var)
                else:
                    config[key] = config_key.default
                continue

            try:
                value = self._parse_env_value(raw.strip(), config_key.value_type)
            except ValueError as e:
                logger.error("env_parse_error", key=key, env_key=config_key.env_var, error=str(e))
                raise ConfigError(f"Failed to parse env var {config_key.env_var}: {e}") from e

            is_valid, error_msg = validate_config_value(key, value)
            if not is_valid:
                logger.error("config_validation_failed", key=key, error=error_msg)
                raise ConfigError(f"Config validation failed for {config_key.env_var}: {error_msg}")

            config[key] = value

        if missing:
            logger.error("config_missing_variables", missing=missing)
            raise ConfigError("Missing required environment variables: " + ", ".join(missing))

        self.config = config
        logger.info(
            "config_loaded",
            **{key.replace(".", "_"): _redact_sensitive_value(key, value) for key, value in config.items()},
        )
        return GuardSettings.from_config(config)

    def get(self, key: str) -> Any:
        """Get a loaded configuration value.

        Args:
            key: Configuration key path

        Returns:
            Configuration value, or the registry default if not loaded

        Raises:
            KeyError: If key not found in registry
        """
        config_key = get_config_key(key)
        return self.config.get(key, config_key.default)

    def _parse_env_value(self, value: str, target_type: type) -> Any:
        """Parse environment variable string to target type.

        Args:
            value: String value from environment variable
            target_type: Target Python type

        Returns:
            Parsed value in target type

        Raises:
            ValueError: If parsing fails
        """
        if target_type == int:
            return int(value)
        elif target_type == str:
            return value
        else:
            raise ValueError(f"Unsupported type for env parsing: {target_type}")


def load_settings(env_file: Optional[Path] = None) -> GuardSettings:
    """Load settings from the environment and an optional .env file.

    Args:
        env_file: Path to .env file

    Raises:
        ConfigError: If configuration is missing or invalid
    """
    return ConfigManager(env_file).load()
