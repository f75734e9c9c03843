"""Configuration module for shana_library.

Provides runner configuration loading from YAML and environment variables.

Public Interface:
    - ShanaSettings: Settings model
    - load_settings: Load configuration
    - get_config_path: Get config file path
"""

from .loader import get_config_path
from .loader import load_settings
from .settings import ShanaSettings

__all__ = [
    "ShanaSettings",
    "load_settings",
    "get_config_path",
]
