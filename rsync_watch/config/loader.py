"""Configuration loader with YAML parsing and environment variable substitution."""

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from rsync_watch.config.models import RsyncWatchConfig
from rsync_watch.security.validation import (
    sanitize_log_input,
    validate_environment_variable_name,
)

CONFIG_FILENAMES = [
    "rsync.yml",
    "rsync.yaml",
    "rsync-watch.yml",
    "rsync-watch.yaml",
]


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""


class EnvironmentVariableError(ConfigurationError):
    """Raised when environment variable substitution fails."""
    pass


class ConfigLoader:
    """Configuration loader with environment variable substitution."""

    # Pattern for environment variable substitution: ${VAR_NAME} or ${VAR_NAME:default_value}
    ENV_VAR_PATTERN = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*?)(?::([^}]*))?\}')

    def __init__(self, require_env_vars: bool = True, load_dotenv_file: bool = True) -> None:
        """Initialize the configuration loader.

        Args:
            require_env_vars: Whether to require all environment variables to exist
                            (if False, missing vars without defaults will be left as-is)
            load_dotenv_file: Whether to read a .env file next to the configuration
        """
        self.require_env_vars = require_env_vars
        self.load_dotenv_file = load_dotenv_file

    def load_config(self, config_path: Path) -> RsyncWatchConfig:
        """Load and validate configuration from YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            Validated RsyncWatchConfig instance

        Raises:
            ConfigurationError: If loading or validation fails
        """
        if not config_path.exists():
            raise ConfigurationError(f"Missing config file: {config_path}")

        if self.load_dotenv_file:
            env_file = config_path.parent / ".env"
            if env_file.exists():
                load_dotenv(env_file, override=False)

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                raw_content = f.read()

            substituted_content = self._substitute_env_vars(raw_content)

            config_data = yaml.safe_load(substituted_content)

            if not isinstance(config_data, dict):
                raise ConfigurationError("Configuration file must contain a YAML object")

            return build_config(config_data, config_dir=config_path.resolve().parent)

        except ConfigurationError:
            raise
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Failed to read configuration: {e}") from e

    def _substitute_env_vars(self, content: str) -> str:
        """Substitute environment variables in the content.

        Supports patterns like:
        - ${VAR_NAME} - Required environment variable
        - ${VAR_NAME:default} - Environment variable with default value

        Args:
            content: Raw configuration content

        Returns:
            Content with environment variables substituted

        Raises:
            EnvironmentVariableError: If required environment variable is missing
        """
        missing_vars = []

        def replace_env_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default_value = match.group(2)

            if not validate_environment_variable_name(var_name):
                raise EnvironmentVariableError(
                    f"Invalid environment variable name: '{sanitize_log_input(var_name)}'"
                )

            env_value = os.getenv(var_name)

            if env_value is not None:
                return env_value
            elif default_value is not None:
                return default_value
            elif self.require_env_vars:
                missing_vars.append(var_name)
            return match.group(0)

        result = self.ENV_VAR_PATTERN.sub(replace_env_var, content)

        if missing_vars:
            if len(missing_vars) == 1:
                raise EnvironmentVariableError(
                    f"Required environment variable '{missing_vars[0]}' is not set"
                )
            sorted_vars = sorted(set(missing_vars))
            raise EnvironmentVariableError(
                f"Required environment variables are not set: {', '.join(sorted_vars)}"
            )

        return result


def build_config(config_data: Dict[str, Any], config_dir: Optional[Path] = None) -> RsyncWatchConfig:
    """Validate raw configuration data.

    Args:
        config_data: Parsed configuration mapping
        config_dir: Directory relative service contexts are resolved against

    Returns:
        Validated RsyncWatchConfig instance

    Raises:
        ConfigurationError: If validation fails
    """
    settings = config_data.get("settings") or {}
    if not isinstance(settings, dict) or not settings.get("rsa_key_path"):
        raise ConfigurationError("rsa_key_path not set")

    if not config_data.get("services"):
        raise ConfigurationError("No services configured")

    data = {
        "settings": settings,
        "services": config_data["services"],
        "config_dir": config_dir,
    }
    try:
        return RsyncWatchConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed: {e}") from e


def load_config_from_dict(config_data: Dict[str, Any], config_dir: Optional[Path] = None) -> RsyncWatchConfig:
    """Load configuration from dictionary (for testing)."""
    return build_config(config_data, config_dir=config_dir)


def find_config_file(start_path: Optional[Path] = None) -> Optional[Path]:
    """Find configuration file by searching up directory tree.

    Searches for the following files in order:
    1. rsync.yml
    2. rsync.yaml
    3. rsync-watch.yml
    4. rsync-watch.yaml

    Args:
        start_path: Directory to start search from (defaults to current directory)

    Returns:
        Path to configuration file if found, None otherwise
    """
    if start_path is None:
        start_path = Path.cwd()

    current_path = start_path.resolve()

    while True:
        for filename in CONFIG_FILENAMES:
            config_path = current_path / filename
            if config_path.exists():
                return config_path

        parent = current_path.parent
        if parent == current_path:  # Reached root
            break
        current_path = parent

    return None


def validate_service_paths(config: RsyncWatchConfig) -> List[str]:
    """Check local paths referenced by the configuration.

    Args:
        config: Configuration to validate

    Returns:
        List of warning messages
    """
    warnings = []

    if not config.settings.rsa_key_path.exists():
        warnings.append(f"rsa_key_path does not exist: {config.settings.rsa_key_path}")

    for name, service in config.services.items():
        if not service.context.exists():
            warnings.append(f"Service '{name}': context does not exist: {service.context}")
        elif not service.context.is_dir():
            warnings.append(f"Service '{name}': context is not a directory: {service.context}")

    return warnings


def validate_service_ports(config: RsyncWatchConfig) -> List[str]:
    """Report services sharing one rsync ssh port.

    Args:
        config: Configuration to validate

    Returns:
        List of warning messages
    """
    warnings = []
    seen: Dict[int, str] = {}

    for name, service in config.services.items():
        port = service.rsync_ssh_port
        if port in seen:
            warnings.append(
                f"Services '{seen[port]}' and '{name}' share rsync_ssh_port {port}"
            )
        else:
            seen[port] = name

    return warnings
