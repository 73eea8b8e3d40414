"""
System interaction utilities for the build helper.

This module provides the host-facing functionality:

- Command execution (interactive, captured, or teed to the build log)
- Memory and CPU probing through psutil
- Adaptive build job count planning
- Distribution detection and OS package installation
- Compiler, cache and linker selection
- Virtual environment creation for the build tooling
"""

# Command execution
from .commands import (
    build_priority_prefix,
    command_available,
    run_command,
    run_interactive,
    run_logged,
    source_shell_script,
    which,
)

# Memory probing and job planning
from .jobs import plan_jobs, resolve_jobs
from .memory import get_logical_cpu_count, read_memory_snapshot

# Distribution packages
from .packages import (
    Distribution,
    PackageManager,
    detect_distribution,
    install_packages,
    parse_os_release,
    read_os_release,
    read_package_list,
)

# Toolchain and virtualenv
from .toolchain import select_toolchain
from .venv import activated_environment, create_virtualenv

__all__ = [
    # Commands
    "build_priority_prefix",
    "command_available",
    "run_command",
    "run_interactive",
    "run_logged",
    "source_shell_script",
    "which",
    # Memory and jobs
    "get_logical_cpu_count",
    "plan_jobs",
    "read_memory_snapshot",
    "resolve_jobs",
    # Packages
    "Distribution",
    "PackageManager",
    "detect_distribution",
    "install_packages",
    "parse_os_release",
    "read_os_release",
    "read_package_list",
    # Toolchain and virtualenv
    "activated_environment",
    "create_virtualenv",
    "select_toolchain",
]
