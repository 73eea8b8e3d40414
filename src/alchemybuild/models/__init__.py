"""
Data models for the build helper.

Configuration Models:
- Build, jobs, environment, packages and scheduling settings from TOML
- Environment variable overrides and the combined immutable BuildSettings

Memory Models:
- MemorySnapshot of host RAM and swap
- JobPlan produced by the job count advisor

Runtime Models:
- Toolchain selection, per-step results and run summaries
"""

from .config import (
    AppConfig,
    BuildConfig,
    BuildSettings,
    EnvironmentConfig,
    EnvironmentOverrides,
    JobsConfig,
    PackagesConfig,
    SchedulingConfig,
)
from .memory import KIB_PER_GIB, JobPlan, MemorySnapshot
from .runtime import RunContext, RunSummary, StepResult, ToolchainPlan

__all__ = [
    # Configuration
    "AppConfig",
    "BuildConfig",
    "BuildSettings",
    "EnvironmentConfig",
    "EnvironmentOverrides",
    "JobsConfig",
    "PackagesConfig",
    "SchedulingConfig",
    # Memory
    "KIB_PER_GIB",
    "JobPlan",
    "MemorySnapshot",
    # Runtime
    "RunContext",
    "RunSummary",
    "StepResult",
    "ToolchainPlan",
]
