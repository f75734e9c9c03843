"""Configuration loading for the shana runner.

This module handles loading runner configuration from an optional YAML
file and environment variables.

Contract:
- Inputs: Config file path, environment variables
- Outputs: ShanaSettings objects
- Side Effects: None (read-only)
"""

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from ..errors import ConfigurationError
from .settings import ShanaSettings

logger = logging.getLogger(__name__)


def get_home_dir() -> Path:
    """Get SHANA_HOME from environment.

    Returns:
        Path to root directory (default: ~/.shana)
    """
    root = os.environ.get("SHANA_HOME", "~/.shana")
    return Path(root).expanduser().resolve()


def get_config_path() -> Path:
    """Get path to the runner config file.

    Returns:
        Path to cli.yaml in $SHANA_HOME/config

    Example:
        >>> config_path = get_config_path()
        >>> assert config_path.name == "cli.yaml"
    """
    return get_home_dir() / "config" / "cli.yaml"


def load_settings(config_path: Path | None = None) -> ShanaSettings:
    """Load runner configuration from YAML and environment.

    Environment variables take precedence over YAML settings.
    Variables should be prefixed with SHANA_ (e.g., SHANA_GO_BINARY).

    Args:
        config_path: Optional config file path (default: cli.yaml in config dir)

    Returns:
        Validated runner settings

    Raises:
        ConfigurationError: If the file is not valid YAML or holds invalid values
    """
    if config_path is None:
        config_path = get_config_path()

    yaml_settings = {}
    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                yaml_settings = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load config from {config_path}: {e}") from e
        if not isinstance(yaml_settings, dict):
            raise ConfigurationError(f"Config file {config_path} must contain a mapping")
        logger.debug(f"Loaded config from {config_path}")

    # Only pass YAML values that don't have corresponding env vars
    filtered_yaml = {}
    for key, value in yaml_settings.items():
        env_key = f"SHANA_{str(key).upper()}"
        if env_key not in os.environ:
            filtered_yaml[key] = value

    try:
        settings = ShanaSettings(**filtered_yaml)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid shana settings: {e}") from e

    logger.debug(f"Runner configuration loaded: go_binary={settings.go_binary}, core_package={settings.core_package}")

    return settings
