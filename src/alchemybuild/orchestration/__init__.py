"""
Build orchestration: ordered setup and build steps with a per-step result
chain, plus the build log.
"""

from .build_runner import BuildRunner
from .log_manager import LogManager, build_log_path

__all__ = [
    "BuildRunner",
    "LogManager",
    "build_log_path",
]
