"""
alchemybuild: Alchemy Viewer Linux build helper.

Installs distribution packages, prepares a virtualenv with the build
tooling, selects compiler/cache/linker helpers, picks a job count that fits
in RAM, and drives `autobuild configure` and `autobuild build`.

The package is organized into specialized modules:
- config: TOML configuration and environment overrides
- models: Data structures and type definitions
- validation: Input validation and error handling
- system: Host probing, job planning, packages, toolchain, virtualenv
- orchestration: Ordered build steps and the build log
- cli: Command-line interface

Usage:
    From command line:
        alchemy-build [--no-deps] [--no-build] [-j N]

    Programmatically:
        from alchemybuild import resolve_jobs, MemorySnapshot
        resolve_jobs(8, MemorySnapshot(...), 1048576)
"""

# Main interfaces
from .config import build_settings, clear_config_cache, get_config, set_config_path
from .cli import main_cli
from .orchestration import BuildRunner

# Model classes for external use
from .models import (
    AppConfig,
    BuildSettings,
    EnvironmentOverrides,
    JobPlan,
    MemorySnapshot,
    RunSummary,
    StepResult,
    ToolchainPlan,
)

# Validation utilities
from .validation import (
    BuildStepError,
    ConfigurationError,
    ValidationError,
)

# System utilities
from .system import (
    PackageManager,
    plan_jobs,
    read_memory_snapshot,
    resolve_jobs,
)

__version__ = "1.0.0"

__all__ = [
    # Main interfaces
    "build_settings",
    "clear_config_cache",
    "get_config",
    "set_config_path",
    "main_cli",
    "BuildRunner",
    # Models
    "AppConfig",
    "BuildSettings",
    "EnvironmentOverrides",
    "JobPlan",
    "MemorySnapshot",
    "RunSummary",
    "StepResult",
    "ToolchainPlan",
    # Validation
    "BuildStepError",
    "ConfigurationError",
    "ValidationError",
    # System utilities
    "PackageManager",
    "plan_jobs",
    "read_memory_snapshot",
    "resolve_jobs",
]
