"""
Environment variable overrides.

The build helper has always been steered by a handful of environment
variables. They are read exactly once here and frozen into an
EnvironmentOverrides instance.
"""

import logging
import os
import platform
from pathlib import Path
from typing import Mapping, Optional

from ..models.config import EnvironmentOverrides
from ..validation import ConfigurationError, ValidationError, validate_positive_integer

logger = logging.getLogger(__name__)

FLAG_VARIABLES = {
    "NO_SCCACHE": "no_sccache",
    "NO_CCACHE": "no_ccache",
    "NO_CLANG": "no_clang",
    "NO_MOLD": "no_mold",
    "NO_SMART_JOB_COUNT": "no_smart_job_count",
}


def _flag(environ: Mapping[str, str], name: str) -> bool:
    # Matches shell `[[ -z "$VAR" ]]`: any non-empty value counts as set.
    return bool(environ.get(name, ""))


def read_environment_overrides(
    environ: Optional[Mapping[str, str]] = None,
) -> EnvironmentOverrides:
    """
    Build EnvironmentOverrides from an environment mapping.

    Args:
        environ: Mapping to read from, defaults to os.environ

    Returns:
        Frozen overrides

    Raises:
        ConfigurationError: If AUTOBUILD_CPU_COUNT is set but not a positive integer
    """
    if environ is None:
        environ = os.environ

    flags = {attr: _flag(environ, var) for var, attr in FLAG_VARIABLES.items()}
    for var, attr in FLAG_VARIABLES.items():
        if flags[attr]:
            logger.debug(f"{var} is set")

    cpu_count_override = None
    raw_cpu_count = environ.get("AUTOBUILD_CPU_COUNT", "")
    if raw_cpu_count:
        try:
            cpu_count_override = validate_positive_integer(
                raw_cpu_count, min_value=1, field_name="AUTOBUILD_CPU_COUNT"
            )
        except ValidationError as e:
            raise ConfigurationError(
                str(e), field_name=e.field_name, value=e.value
            ) from e

    target_arch = environ.get("CARCH", "") or platform.machine()

    installable_cache = None
    if environ.get("AUTOBUILD_INSTALLABLE_CACHE"):
        installable_cache = Path(environ["AUTOBUILD_INSTALLABLE_CACHE"])

    return EnvironmentOverrides(
        cpu_count_override=cpu_count_override,
        target_arch=target_arch,
        installable_cache=installable_cache,
        **flags,
    )
