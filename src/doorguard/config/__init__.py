# Configuration - environment-driven startup settings

from .manager import (
    ConfigError,
    ConfigManager,
    GuardSettings,
    load_settings,
)
from .registry import REGISTRY, ConfigKey

__all__ = [
    "ConfigError",
    "ConfigKey",
    "ConfigManager",
    "GuardSettings",
    "REGISTRY",
    "load_settings",
]
