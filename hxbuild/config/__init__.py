"""Configuration module for hxbuild.

Provides build configuration loading from YAML and environment variables.

Public Interface:
    - BuildSettings: Settings model
    - load_config: Load configuration
    - create_default_config: Create default config file
    - get_config_path: Get per-user config file path
    - get_config_dir: Get per-user config directory
    - find_project_config: Find a project-local config file
"""

from .loader import create_default_config
from .loader import find_project_config
from .loader import get_config_dir
from .loader import get_config_path
from .loader import load_config
from .settings import BuildSettings

__all__ = [
    "BuildSettings",
    "load_config",
    "create_default_config",
    "get_config_path",
    "get_config_dir",
    "find_project_config",
]
