"""Configuration loading for hxbuild.

Config files are looked up in the current directory first (a project-local
hxbuild.yaml), then in the per-user config directory under $HXBUILD_HOME.

Contract:
- Inputs: Config file paths, HXBUILD_* environment variables
- Outputs: BuildSettings objects
- Side Effects: Creates the per-user config dir and default config file if missing
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from .settings import BuildSettings

logger = logging.getLogger(__name__)

ENV_PREFIX = "HXBUILD_"

DEFAULT_CONFIG = """# hxbuild configuration
# Paths are relative to source_root unless absolute

# Directory the compiler runs in
source_root: "."
build_script: "project-html5.hxml"

# Compiler install directory; leave empty to use `haxe` from PATH
haxe_directory: ""

# Directories watched in --watch mode
source_directories:
  - "Sources"

# Compilation server
port: 7000

# Worker fan-out: <resource_dir>/<worker_manifest> lists one worker per line
resource_dir: "build/html5-resources"
worker_manifest: "workers.txt"
worker_output_dir: "html5"
worker_output_extension: "js"

# Rename the compiler output after each successful compile
# temp_output: "build/html5/kha.js.temp"
# final_output: "build/html5/kha.js"

log_level: "info"
"""


CONFIG_FILE_NAME = "hxbuild.yaml"


def get_home_dir() -> Path:
    """Per-user hxbuild directory ($HXBUILD_HOME, default ~/.hxbuild)."""
    return Path(os.environ.get("HXBUILD_HOME", "~/.hxbuild")).expanduser().resolve()


def get_config_dir() -> Path:
    """Get configuration directory, creating it if needed.

    Returns:
        $HXBUILD_CONFIG_DIR if set, else $HXBUILD_HOME/config
    """
    env_override = os.environ.get("HXBUILD_CONFIG_DIR")
    config_dir = Path(env_override).resolve() if env_override else get_home_dir() / "config"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def find_project_config(directory: Path | None = None) -> Path | None:
    """Project-local hxbuild.yaml in directory (default: cwd), if present."""
    candidate = (directory or Path.cwd()) / CONFIG_FILE_NAME
    return candidate if candidate.is_file() else None


def get_config_path() -> Path:
    """Get path to the per-user config file.

    Returns:
        Path to hxbuild.yaml in config directory

    Example:
        >>> config_path = get_config_path()
        >>> assert config_path.name == "hxbuild.yaml"
    """
    return get_config_dir() / CONFIG_FILE_NAME


def create_default_config() -> None:
    """Create default config file if it doesn't exist."""
    config_path = get_config_path()

    if config_path.exists():
        logger.debug(f"Config file already exists: {config_path}")
        return

    config_path.write_text(DEFAULT_CONFIG, encoding="utf-8")
    logger.info(f"Created default config: {config_path}")


def load_config(config_path: Path | None = None, **overrides: Any) -> BuildSettings:
    """Load build configuration from YAML and environment.

    Precedence: defaults < YAML < environment variables < explicit overrides.
    Variables are prefixed with HXBUILD_ (e.g., HXBUILD_PORT).

    Args:
        config_path: Optional config file path (default: ./hxbuild.yaml if present,
            else hxbuild.yaml in the per-user config dir)
        **overrides: Values that win over every other source (None values are skipped)

    Returns:
        Validated build settings

    Example:
        >>> settings = load_config(port=7001)
        >>> assert settings.port == 7001
    """
    if config_path is None:
        config_path = find_project_config()
    if config_path is None:
        config_path = get_config_path()
        if not config_path.exists():
            create_default_config()

    yaml_settings: dict[str, Any] = {}
    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                yaml_settings = yaml.safe_load(f) or {}
            logger.debug(f"Loaded config from {config_path}")
        except Exception as e:
            logger.warning(f"Failed to load config from {config_path}: {e}")
            logger.info("Using default settings and environment variables")
        if not isinstance(yaml_settings, dict):
            logger.warning(f"Ignoring config {config_path}: expected a mapping")
            yaml_settings = {}
    else:
        logger.warning(f"Config file not found: {config_path}")

    # Only pass YAML values that don't have corresponding env vars
    filtered_yaml = {}
    for key, value in yaml_settings.items():
        env_key = f"{ENV_PREFIX}{key.upper()}"
        if env_key not in os.environ:
            filtered_yaml[key] = value

    filtered_yaml.update({key: value for key, value in overrides.items() if value is not None})

    settings = BuildSettings(**filtered_yaml)

    logger.info(
        f"Build configuration loaded: source_root={settings.source_root}, "
        f"build_script={settings.build_script}, port={settings.port}"
    )

    return settings
