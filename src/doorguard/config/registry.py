"""Configuration Registry - Defines every configuration key the guard reads.

This module provides the ConfigKey dataclass and REGISTRY dictionary that
maps dotted configuration keys to the environment variables they are read
from, together with their type, default and validation rules.

All keys are read once at startup. Changing a value requires a restart.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ConfigKey:
    """Defines a single configuration key with validation rules.

    Attributes:
        env_var: Environment variable the value is read from
        value_type: Expected Python type (str or int)
        required: Whether startup fails when the variable is absent
        default: Value used when an optional variable is absent
        secret: Never log the value when True
        validator: Custom validation function (optional)
    """
    env_var: str
    value_type: type
    required: bool = True
    default: Any = None
    secret: bool = False
    validator: Optional[Callable[[Any], bool]] = None


# Configuration Registry
# =======================
# All configuration keys must be registered here.

REGISTRY: dict[str, ConfigKey] = {
    # ===== DEVICE BUS =====
    "bus.id": ConfigKey(
        env_var="BUS_ID",
        value_type=str,
    ),
    "bus.address": ConfigKey(
        env_var="BUS",
        value_type=str,
    ),

    # ===== DEVICES =====
    "devices.motion_id": ConfigKey(
        env_var="LUMI_MOTION_ID",
        value_type=str,
    ),
    "devices.door_id": ConfigKey(
        env_var="LUMI_DOOR_ID",
        value_type=str,
    ),

    # ===== TELEGRAM =====
    "telegram.chat_id": ConfigKey(
        env_var="TELEGRAM_CHAT_ID",
        value_type=int,
    ),
    "telegram.token": ConfigKey(
        env_var="TELEGRAM_TOKEN",
        value_type=str,
        secret=True,
    ),

    # ===== LOGGING =====
    "logging.level": ConfigKey(
        env_var="GUARD_LOG_LEVEL",
        value_type=str,
        required=False,
        default="INFO",
        validator=lambda v: v.upper() in LOG_LEVELS,
    ),
}


def get_config_key(key: str) -> ConfigKey:
    """Get configuration key definition from registry.

    Args:
        key: Configuration key path (e.g., "telegram.chat_id")

    Returns:
        ConfigKey definition

    Raises:
        KeyError: If key not found in registry
    """
    if key not in REGISTRY:
        raise KeyError(f"Configuration key '{key}' not found in registry")
    return REGISTRY[key]


def validate_config_value(key: str, value: Any) -> tuple[bool, Optional[str]]:
    """Validate a configuration value against its registered definition.

    Args:
        key: Configuration key path
        value: Value to validate

    Returns:
        Tuple of (is_valid, error_message)
        error_message is None if valid
    """
    try:
        config_key = get_config_key(key)
    except KeyError as e:
        return False, str(e)

    # bool is an int subclass but never a valid chat id
    if isinstance(value, bool) or not isinstance(value, config_key.value_type):
        return False, f"Expected type {config_key.value_type.__name__}, got {type(value).__name__}"

    if config_key.validator is not None:
        try:
            if not config_key.validator(value):
                return False, f"Custom validation failed for value: {value}"
        except Exception as e:
            return False, f"Validator error: {str(e)}"

    return True, None


def get_required_keys() -> list[str]:
    """Get list of configuration keys that must be present at startup."""
    return [key for key, config_key in REGISTRY.items() if config_key.required]


def get_secret_keys() -> list[str]:
    """Get list of configuration keys whose values must never be logged."""
    return [key for key, config_key in REGISTRY.items() if config_key.secret]
