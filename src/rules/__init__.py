"""Workspace configuration for dryck-nav."""

from rules.config import (
    CONFIG_FILENAME,
    BaseClassConfig,
    ConfigError,
    LanguageServerConfig,
    NavConfig,
    load_config,
)

__all__ = [
    "CONFIG_FILENAME",
    "BaseClassConfig",
    "ConfigError",
    "LanguageServerConfig",
    "NavConfig",
    "load_config",
]
