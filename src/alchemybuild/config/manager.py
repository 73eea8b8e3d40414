"""
Configuration management and singleton pattern.

This module provides the main configuration loading and management interface,
implementing a singleton pattern to ensure configuration is loaded only once.
"""

import logging
from pathlib import Path
from typing import Mapping, Optional

from ..models.config import AppConfig, BuildSettings
from ..validation import handle_config_error, ErrorSeverity
from .environment import read_environment_overrides
from .loader import load_main_config
from .validators import validate_app_config

logger = logging.getLogger(__name__)

# --- Global Singleton for Configuration ---

_CONFIG: Optional[AppConfig] = None

# Default location, relative to this file: <repo>/conf/config.toml.
# Overridden by set_config_path() (tests, `--config`).
_DEFAULT_CONFIG_FILE_PATH = Path(__file__).parent.parent.parent.parent / "conf" / "config.toml"
_CONFIG_FILE_PATH = _DEFAULT_CONFIG_FILE_PATH


def set_config_path(config_path: Path) -> None:
    """
    Set a custom configuration file path.

    Args:
        config_path: Path to the config.toml file

    Note:
        Clears any cached configuration so the next get_config() reloads.
    """
    global _CONFIG_FILE_PATH, _CONFIG
    _CONFIG_FILE_PATH = Path(config_path)
    _CONFIG = None
    logger.info(f"Configuration path set to: {config_path}")


def clear_config_cache() -> None:
    """
    Clear the cached configuration, forcing a reload on next access.
    """
    global _CONFIG
    _CONFIG = None
    logger.debug("Configuration cache cleared")


def _load_config(config_path: Path) -> AppConfig:
    """
    Load and validate the application configuration.

    A missing default config.toml is not an error: built-in defaults are
    used and relative paths resolve against the current directory. An
    explicitly chosen path must exist.

    Raises:
        FileNotFoundError: If an explicitly set configuration file is missing
        ConfigurationError: If configuration validation fails
        tomllib.TOMLDecodeError: If the TOML file is malformed
    """
    if config_path == _DEFAULT_CONFIG_FILE_PATH and not config_path.exists():
        logger.info("No config.toml found, using built-in defaults")
        return validate_app_config({}, root_dir=Path.cwd())

    try:
        data = load_main_config(config_path)
        # conf/config.toml lives one level below the repository root
        root_dir = config_path.resolve().parent.parent
        app_config = validate_app_config(data, root_dir=root_dir)
        logger.info(f"Successfully loaded configuration from {config_path}")
        return app_config
    except FileNotFoundError as e:
        handle_config_error(
            error=e,
            context="loading configuration file",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise
    except Exception as e:
        handle_config_error(
            error=e,
            context="processing configuration",
            severity=ErrorSeverity.ERROR,
            reraise=True,
            logger=logger
        )
        raise


def get_config() -> AppConfig:
    """
    Get the global application configuration, loading it if necessary.

    Returns:
        The singleton AppConfig instance
    """
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = _load_config(_CONFIG_FILE_PATH)
    return _CONFIG


def build_settings(
    environ: Optional[Mapping[str, str]] = None,
    skip_dependencies: bool = False,
    skip_build: bool = False,
    requested_jobs: Optional[int] = None,
    source_dir: Optional[Path] = None,
) -> BuildSettings:
    """
    Combine the loaded configuration, environment overrides and CLI flags.

    Args:
        environ: Environment mapping, defaults to os.environ
        skip_dependencies: Skip distribution package installation
        skip_build: Configure only, do not build
        requested_jobs: Requested parallelism instead of the CPU count
        source_dir: Viewer checkout autobuild runs in, defaults to the cwd

    Returns:
        Immutable BuildSettings for one invocation
    """
    return BuildSettings(
        config=get_config(),
        overrides=read_environment_overrides(environ),
        skip_dependencies=skip_dependencies,
        skip_build=skip_build,
        requested_jobs=requested_jobs,
        source_dir=Path(source_dir) if source_dir is not None else Path.cwd(),
    )


def is_config_loaded() -> bool:
    """Check if configuration has been loaded and cached."""
    return _CONFIG is not None


def get_config_info() -> dict:
    """
    Get information about the current configuration state.

    Returns:
        Dictionary with configuration metadata
    """
    return {
        "config_loaded": is_config_loaded(),
        "config_path": str(_CONFIG_FILE_PATH),
        "root_dir": str(_CONFIG.root_dir) if _CONFIG else None,
    }
