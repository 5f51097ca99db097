"""
Configuration System

Single-file YAML configuration for the bridge. Features:
- YAML loading with validation and error handling
- Environment variable resolution (${VAR}, ${VAR:-default}, $VAR)
- .env loading from the working directory
- Dot-notation access to nested values
- Optional file: when no config.yml exists, every lookup returns its default

The configuration file is found through the CONFIG_FILE environment variable,
or as config.yml in the current working directory.
"""

import copy
import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError

from treebridge.base.errors import ConfigurationError
from treebridge.base.nodes import StaleNodePolicy

# Use standard logging (not get_logger) to avoid circular imports with logger.py
logger = logging.getLogger("CONFIG")

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-(.*?))?\}|\$([A-Za-z_][A-Za-z0-9_]*)")


class BridgeSettings(BaseModel):
    """Validated ``bridge`` section of the configuration."""

    stale_node_policy: StaleNodePolicy = StaleNodePolicy.FAIL


class ConfigBuilder:
    """
    Configuration builder for a single YAML file.

    Attributes:
        config_path: Path of the loaded file, or None when running on defaults
        raw_config: Configuration with environment variables resolved
    """

    def __init__(self, config_path: str | Path | None = None):
        """
        Initialize configuration builder.

        Args:
            config_path: Path to the config file. If None, uses ./config.yml when
                it exists and falls back to an empty configuration otherwise.

        Raises:
            FileNotFoundError: If an explicit config_path does not exist.
        """
        dotenv_path = Path.cwd() / ".env"
        if dotenv_path.exists():
            load_dotenv(dotenv_path, override=False)  # Don't override existing env vars
            logger.debug(f"Loaded .env file from {dotenv_path}")

        if config_path is None:
            cwd_config = Path.cwd() / "config.yml"
            config_path = cwd_config if cwd_config.exists() else None
        elif not Path(config_path).exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        self.config_path = Path(config_path) if config_path is not None else None
        if self.config_path is None:
            logger.debug("No config.yml found, using defaults")
            self._unexpanded_config: dict[str, Any] = {}
        else:
            self._unexpanded_config = self._load_yaml_file(self.config_path)
        self.raw_config = self._resolve_env_vars(copy.deepcopy(self._unexpanded_config))

    def _load_yaml_file(self, file_path: Path) -> dict[str, Any]:
        """Load and validate a YAML configuration file."""
        try:
            with open(file_path) as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            error_msg = f"Error parsing YAML configuration: {e}"
            logger.error(error_msg)
            raise ConfigurationError(error_msg) from e

        if config is None:
            logger.warning(f"Configuration file is empty: {file_path}")
            return {}

        if not isinstance(config, dict):
            error_msg = f"Configuration file must contain a dictionary/mapping: {file_path}"
            logger.error(error_msg)
            raise ConfigurationError(error_msg)

        logger.debug(f"Loaded configuration from {file_path}")
        return config

    def _resolve_env_vars(self, data: Any) -> Any:
        """Recursively resolve environment variables in configuration data."""
        if isinstance(data, dict):
            return {key: self._resolve_env_vars(value) for key, value in data.items()}
        elif isinstance(data, list):
            return [self._resolve_env_vars(item) for item in data]
        elif isinstance(data, str):

            def replace_env_var(match):
                if match.group(1):  # ${VAR_NAME:-default} or ${VAR_NAME}
                    var_name = match.group(1)
                    default_value = match.group(2)
                else:  # $VAR_NAME
                    var_name = match.group(3)
                    default_value = None

                env_value = os.environ.get(var_name)
                if env_value is None:
                    if default_value is not None:
                        return default_value
                    logger.info(f"Environment variable '{var_name}' not found, keeping original value")
                    return match.group(0)
                return env_value

            return _ENV_VAR_PATTERN.sub(replace_env_var, data)
        else:
            return data

    def get_unexpanded_config(self) -> dict[str, Any]:
        """Configuration with ${VAR} placeholders preserved."""
        return copy.deepcopy(self._unexpanded_config)

    def get(self, path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation path."""
        keys = path.split(".")
        value = self.raw_config

        try:
            for key in keys:
                value = value[key]
            return value
        except (KeyError, TypeError):
            return default

    def get_bridge_settings(self) -> BridgeSettings:
        """Validate and return the ``bridge`` section.

        Raises:
            ConfigurationError: If the section has invalid values
        """
        try:
            return BridgeSettings.model_validate(self.get("bridge", None) or {})
        except ValidationError as e:
            raise ConfigurationError(f"Invalid 'bridge' configuration: {e}") from e


# =============================================================================
# GLOBAL CONFIGURATION
# =============================================================================

_default_config: ConfigBuilder | None = None


def get_config_builder(config_path: str | Path | None = None) -> ConfigBuilder:
    """Get the configuration builder.

    With an explicit path a new builder is returned and also becomes the
    default. Without one, the default singleton is created from CONFIG_FILE
    or ./config.yml on first use.

    Examples:
        >>> config = get_config_builder()
        >>> policy = config.get("bridge.stale_node_policy", "fail")
    """
    global _default_config

    if config_path is not None:
        _default_config = ConfigBuilder(config_path)
        logger.info(f"Loaded configuration from explicit path: {config_path}")
        return _default_config

    if _default_config is None:
        _default_config = ConfigBuilder(os.environ.get("CONFIG_FILE"))
    return _default_config


def get_config_value(path: str, default: Any = None) -> Any:
    """
    Get a specific configuration value by dot-separated path.

    Args:
        path: Dot-separated configuration path (e.g., "bridge.stale_node_policy")
        default: Default value to return if path is not found

    Raises:
        ValueError: If path is empty or None

    Examples:
        >>> get_config_value("logging.rich_tracebacks", True)
    """
    if not path:
        raise ValueError("Configuration path cannot be empty or None")
    return get_config_builder().get(path, default)


def reset_config() -> None:
    """Drop the cached default configuration. Mostly useful in tests."""
    global _default_config
    _default_config = None
