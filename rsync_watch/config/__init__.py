"""Configuration package for rsync-watch."""

from .base_models import LogFormat, LogLevel
from .loader import (
    ConfigLoader,
    ConfigurationError,
    EnvironmentVariableError,
    find_config_file,
    load_config_from_dict,
)
from .models import RsyncWatchConfig, ServiceConfig, SettingsConfig

__all__ = [
    # Core classes
    "RsyncWatchConfig",
    "ServiceConfig",
    "SettingsConfig",
    "ConfigLoader",
    "find_config_file",
    "load_config_from_dict",

    # Errors
    "ConfigurationError",
    "EnvironmentVariableError",

    # Enums
    "LogFormat",
    "LogLevel",
]
