"""
Compiler, cache and linker selection.

Picks the fastest helpers installed on the host and expresses the choice as
CMake options. Every helper can be vetoed with its NO_* environment variable.
"""

import logging
from typing import List

from ..models.config import EnvironmentOverrides
from ..models.runtime import ToolchainPlan
from .commands import which

logger = logging.getLogger(__name__)

MOLD_CXX_FLAGS = "-fuse-ld=mold -Qunused-arguments"
MOLD_LINKER_WRAPPER_FLAG = "--separate-debug-file"


def select_toolchain(overrides: EnvironmentOverrides) -> ToolchainPlan:
    """
    Detect sccache/ccache, clang and mold.

    sccache is preferred over ccache. clang is only used when clang++ is
    present as well.

    Args:
        overrides: Environment overrides carrying the NO_* vetoes

    Returns:
        ToolchainPlan with the corresponding CMake options
    """
    options: List[str] = []

    launcher = None
    if not overrides.no_sccache and which("sccache"):
        launcher = "sccache"
    elif not overrides.no_ccache and which("ccache"):
        launcher = "ccache"
        logger.info("ccache was found and will be used")
    if launcher:
        options += [
            f"-DCMAKE_C_COMPILER_LAUNCHER={launcher}",
            f"-DCMAKE_CXX_COMPILER_LAUNCHER={launcher}",
        ]

    c_compiler = cxx_compiler = None
    if not overrides.no_clang and which("clang++"):
        c_compiler = which("clang")
        cxx_compiler = which("clang++")
        if c_compiler:
            options.append(f"-DCMAKE_C_COMPILER={c_compiler}")
        options.append(f"-DCMAKE_CXX_COMPILER={cxx_compiler}")

    # TODO: -Qunused-arguments is a clang flag; check GCC accepts it before
    # enabling mold without clang.
    use_mold = not overrides.no_mold and which("mold") is not None
    if use_mold:
        options += [
            f"-DCMAKE_CXX_FLAGS={MOLD_CXX_FLAGS}",
            f"-DCMAKE_CXX_LINKER_WRAPPER_FLAG={MOLD_LINKER_WRAPPER_FLAG}",
        ]

    plan = ToolchainPlan(
        compiler_launcher=launcher,
        c_compiler=c_compiler,
        cxx_compiler=cxx_compiler,
        use_mold=use_mold,
        cmake_options=options,
    )
    logger.info(f"Toolchain: {plan.description}")
    return plan
