"""
Build log management.

Every invocation writes the output of autobuild into its own log file,
`build.<arch>.<unix time>.log`, next to a short prologue describing the run.
"""

import logging
import time
from pathlib import Path
from typing import Optional

from ..models.config import BuildSettings
from ..models.memory import JobPlan

logger = logging.getLogger(__name__)


def build_log_path(log_dir: Path, arch: str, timestamp: Optional[float] = None) -> Path:
    """
    Path of the log file for one build.

    Examples:
        >>> build_log_path(Path("logs"), "x86_64", 1700000000.5)
        PosixPath('logs/build.x86_64.1700000000.log')
    """
    if timestamp is None:
        timestamp = time.time()
    return log_dir / f"build.{arch}.{int(timestamp)}.log"


class LogManager:
    """
    Creates the build log and records run metadata in it.
    """

    def __init__(self, settings: BuildSettings):
        self.settings = settings
        log_dir = settings.resolve_source_path(settings.config.build.log_dir)
        arch = settings.overrides.target_arch or "unknown"
        self.log_file = build_log_path(log_dir, arch)

    def open_log(self) -> Path:
        """
        Create the log directory and write the run prologue.

        Raises:
            OSError: If the log file cannot be created
        """
        self.log_file.parent.mkdir(parents=True, exist_ok=True)
        build = self.settings.config.build
        with open(self.log_file, "w", encoding="utf-8") as f:
            f.write(f"# started: {time.strftime('%Y-%m-%d %H:%M:%S')}\n")
            f.write(f"# target arch: {self.settings.overrides.target_arch}\n")
            f.write(f"# autobuild: -A {build.architecture} -c {build.configuration}\n")
        logger.info(f"Build output will be logged to: {self.log_file}")
        return self.log_file

    def log_job_plan(self, plan: JobPlan) -> None:
        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write(
                f"# jobs: {plan.resolved_jobs} (requested {plan.requested_jobs}, "
                f"source {plan.source})\n"
            )
