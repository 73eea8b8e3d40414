"""
Configuration management for the alchemybuild package.

This module provides a clean interface for loading, validating, and accessing
configuration data from config.toml, and for folding environment variable
overrides into a single immutable BuildSettings object.
"""

# Main configuration interface
from .manager import (
    build_settings,
    clear_config_cache,
    get_config,
    get_config_info,
    is_config_loaded,
    set_config_path,
)

# For advanced usage - direct access to loaders and validators
from .environment import read_environment_overrides
from .loader import load_main_config, load_toml_file
from .validators import (
    validate_app_config,
    validate_build_config,
    validate_environment_config,
    validate_jobs_config,
    validate_packages_config,
    validate_scheduling_config,
)

__all__ = [
    # Main interface
    "build_settings",
    "get_config",
    "set_config_path",
    "clear_config_cache",
    "is_config_loaded",
    "get_config_info",
    # Advanced interface
    "read_environment_overrides",
    "load_toml_file",
    "load_main_config",
    "validate_app_config",
    "validate_build_config",
    "validate_environment_config",
    "validate_jobs_config",
    "validate_packages_config",
    "validate_scheduling_config",
]
