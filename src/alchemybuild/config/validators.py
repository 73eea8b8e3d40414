"""
Configuration validation utilities.

Each `[section]` of config.toml is validated into its own frozen dataclass.
Invalid values raise ConfigurationError naming the offending key.
"""

import functools
import logging
from pathlib import Path
from typing import Any, Callable, Dict, TypeVar

from ..models.config import (
    AppConfig,
    BuildConfig,
    EnvironmentConfig,
    JobsConfig,
    PackagesConfig,
    SchedulingConfig,
)
from ..validation import (
    ConfigurationError,
    ValidationError,
    validate_boolean,
    validate_non_empty_string,
    validate_positive_integer,
    validate_string_list,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

KNOWN_SECTIONS = ("build", "jobs", "environment", "packages", "scheduling")


def _as_configuration_error(func: Callable[..., T]) -> Callable[..., T]:
    """Re-raise generic ValidationErrors from a section validator as ConfigurationError."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> T:
        try:
            return func(*args, **kwargs)
        except ConfigurationError:
            raise
        except ValidationError as e:
            raise ConfigurationError(
                str(e), field_name=e.field_name, value=e.value, severity=e.severity
            ) from e

    return wrapper


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ConfigurationError(
            f"[{name}] must be a table", field_name=name, value=section
        )
    return section


@_as_configuration_error
def validate_build_config(build_data: Dict[str, Any]) -> BuildConfig:
    """
    Validate the `[build]` section.

    Raises:
        ConfigurationError: If validation fails
    """
    defaults = BuildConfig()
    return BuildConfig(
        architecture=validate_non_empty_string(
            str(build_data.get("architecture", defaults.architecture)),
            field_name="build.architecture",
        ),
        configuration=validate_non_empty_string(
            build_data.get("configuration", defaults.configuration),
            field_name="build.configuration",
        ),
        cmake_options=validate_string_list(
            build_data.get("cmake_options", list(defaults.cmake_options)),
            field_name="build.cmake_options",
        ),
        export_compile_commands=validate_boolean(
            build_data.get("export_compile_commands", defaults.export_compile_commands),
            field_name="build.export_compile_commands",
        ),
        installable_cache=Path(
            validate_non_empty_string(
                build_data.get("installable_cache", str(defaults.installable_cache)),
                field_name="build.installable_cache",
            )
        ),
        log_dir=Path(
            validate_non_empty_string(
                build_data.get("log_dir", str(defaults.log_dir)),
                field_name="build.log_dir",
            )
        ),
    )


@_as_configuration_error
def validate_jobs_config(jobs_data: Dict[str, Any]) -> JobsConfig:
    """
    Validate the `[jobs]` section.

    Raises:
        ConfigurationError: If memory_per_job_kb is not a positive integer
    """
    defaults = JobsConfig()
    return JobsConfig(
        memory_per_job_kb=validate_positive_integer(
            jobs_data.get("memory_per_job_kb", defaults.memory_per_job_kb),
            min_value=1,
            field_name="jobs.memory_per_job_kb",
        ),
        smart_job_count=validate_boolean(
            jobs_data.get("smart_job_count", defaults.smart_job_count),
            field_name="jobs.smart_job_count",
        ),
    )


@_as_configuration_error
def validate_environment_config(env_data: Dict[str, Any]) -> EnvironmentConfig:
    """Validate the `[environment]` section."""
    defaults = EnvironmentConfig()
    return EnvironmentConfig(
        python=validate_non_empty_string(
            env_data.get("python", defaults.python),
            field_name="environment.python",
        ),
        venv_dir=Path(
            validate_non_empty_string(
                env_data.get("venv_dir", str(defaults.venv_dir)),
                field_name="environment.venv_dir",
            )
        ),
        pip_packages=validate_string_list(
            env_data.get("pip_packages", list(defaults.pip_packages)),
            field_name="environment.pip_packages",
            allow_empty=False,
        ),
    )


@_as_configuration_error
def validate_packages_config(packages_data: Dict[str, Any]) -> PackagesConfig:
    """Validate the `[packages]` section."""
    defaults = PackagesConfig()
    return PackagesConfig(
        list_dir=Path(
            validate_non_empty_string(
                packages_data.get("list_dir", str(defaults.list_dir)),
                field_name="packages.list_dir",
            )
        ),
    )


@_as_configuration_error
def validate_scheduling_config(scheduling_data: Dict[str, Any]) -> SchedulingConfig:
    """
    Validate the `[scheduling]` section.

    niceness follows nice(1) (0-19) and ionice_class follows ionice(1)
    (0 none, 1 realtime, 2 best-effort, 3 idle).
    """
    defaults = SchedulingConfig()
    return SchedulingConfig(
        niceness=validate_positive_integer(
            scheduling_data.get("niceness", defaults.niceness),
            min_value=0,
            max_value=19,
            field_name="scheduling.niceness",
        ),
        ionice_class=validate_positive_integer(
            scheduling_data.get("ionice_class", defaults.ionice_class),
            min_value=0,
            max_value=3,
            field_name="scheduling.ionice_class",
        ),
        secrets_wrapper=validate_string_list(
            scheduling_data.get("secrets_wrapper", list(defaults.secrets_wrapper)),
            field_name="scheduling.secrets_wrapper",
        ),
        local_commands=Path(
            validate_non_empty_string(
                scheduling_data.get("local_commands", str(defaults.local_commands)),
                field_name="scheduling.local_commands",
            )
        ),
    )


def validate_app_config(data: Dict[str, Any], root_dir: Path) -> AppConfig:
    """
    Validate a whole parsed config.toml into an AppConfig.

    Unknown top-level sections are logged and ignored.

    Args:
        data: Parsed TOML data
        root_dir: Directory relative paths are resolved against

    Raises:
        ConfigurationError: If any section fails validation
    """
    for name in data:
        if name not in KNOWN_SECTIONS:
            logger.warning(f"Ignoring unknown configuration section [{name}]")

    return AppConfig(
        build=validate_build_config(_section(data, "build")),
        jobs=validate_jobs_config(_section(data, "jobs")),
        environment=validate_environment_config(_section(data, "environment")),
        packages=validate_packages_config(_section(data, "packages")),
        scheduling=validate_scheduling_config(_section(data, "scheduling")),
        root_dir=root_dir,
    )
