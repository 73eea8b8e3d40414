"""
Configuration data models.

This module contains the configuration structures loaded from `config.toml`
and the immutable settings object that combines them with environment
variable overrides and command-line flags.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .memory import KIB_PER_GIB

DEFAULT_PIP_PACKAGES = ["cmake", "llbase", "llsd", "certifi", "autobuild", "ninja"]


@dataclass(frozen=True)
class BuildConfig:
    """
    Settings for the autobuild invocation, from `[build]`.
    """

    # Address model passed as `autobuild -A`.
    architecture: str = "64"
    # Build configuration passed as `autobuild -c`.
    configuration: str = "ReleaseOS"
    # Extra CMake options forwarded after `--`.
    cmake_options: List[str] = field(
        default_factory=lambda: ["-DDISABLE_FATAL_WARNINGS=ON"]
    )
    # Emit compile_commands.json for clangd and friends.
    export_compile_commands: bool = True
    installable_cache: Path = Path("~/.cache/autobuild/alchemy/")
    # Relative to the viewer source directory.
    log_dir: Path = Path(".")


@dataclass(frozen=True)
class JobsConfig:
    """
    Settings for job count planning, from `[jobs]`.
    """

    # Average memory a single job needs to link the viewer.
    memory_per_job_kb: int = KIB_PER_GIB
    smart_job_count: bool = True


@dataclass(frozen=True)
class EnvironmentConfig:
    """
    Settings for the Python virtual environment, from `[environment]`.
    """

    python: str = "/usr/bin/python3"
    # Relative to the viewer source directory.
    venv_dir: Path = Path(".venv")
    pip_packages: List[str] = field(default_factory=lambda: list(DEFAULT_PIP_PACKAGES))


@dataclass(frozen=True)
class PackagesConfig:
    """
    Location of the per-distribution package lists, from `[packages]`.
    """

    list_dir: Path = Path("needed_packages")


@dataclass(frozen=True)
class SchedulingConfig:
    """
    Process priority and wrapper settings, from `[scheduling]`.
    """

    niceness: int = 18
    ionice_class: int = 3
    # Only used when its first element is found on PATH.
    secrets_wrapper: List[str] = field(default_factory=lambda: ["op", "run", "--"])
    # Optional shell snippet sourced before configuring.
    local_commands: Path = Path("local-commands.sh")


@dataclass(frozen=True)
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    build: BuildConfig
    jobs: JobsConfig
    environment: EnvironmentConfig
    packages: PackagesConfig
    scheduling: SchedulingConfig
    # Directory relative paths in the configuration are resolved against.
    root_dir: Path = Path(".")


@dataclass(frozen=True)
class EnvironmentOverrides:
    """
    Values read once from the process environment.
    """

    no_sccache: bool = False
    no_ccache: bool = False
    no_clang: bool = False
    no_mold: bool = False
    no_smart_job_count: bool = False
    # Explicit AUTOBUILD_CPU_COUNT; bypasses job planning entirely.
    cpu_count_override: Optional[int] = None
    # CARCH, used to name the build log.
    target_arch: str = ""
    installable_cache: Optional[Path] = None


@dataclass(frozen=True)
class BuildSettings:
    """
    Everything a build invocation needs, threaded explicitly through calls.
    """

    config: AppConfig
    overrides: EnvironmentOverrides
    skip_dependencies: bool = False
    skip_build: bool = False
    # Replaces the logical CPU count as the requested parallelism.
    requested_jobs: Optional[int] = None
    # Viewer checkout holding autobuild.xml; autobuild runs here.
    source_dir: Path = field(default_factory=Path.cwd)

    @property
    def installable_cache(self) -> Path:
        cache = self.overrides.installable_cache or self.config.build.installable_cache
        return self.resolve_path(Path(cache))

    @property
    def smart_job_count(self) -> bool:
        return self.config.jobs.smart_job_count and not self.overrides.no_smart_job_count

    def resolve_path(self, path: Path) -> Path:
        """Resolve a configured path against the configuration root."""
        return _resolve_against(self.config.root_dir, path)

    def resolve_source_path(self, path: Path) -> Path:
        """Resolve a configured path against the viewer source directory."""
        return _resolve_against(self.source_dir, path)


def _resolve_against(base: Path, path: Path) -> Path:
    path = Path(path).expanduser()
    if path.is_absolute():
        return path
    return base / path
