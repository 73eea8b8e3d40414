"""
Command-line interface for the Alchemy Viewer build helper.

Installs the distribution packages, prepares the build virtualenv, picks
the toolchain and a memory-safe job count, then configures and builds the
viewer with autobuild.
"""

import argparse
import logging
import sys
import tomllib
from pathlib import Path
from typing import List, Optional

from ..config import build_settings, set_config_path
from ..models.config import BuildSettings
from ..orchestration import BuildRunner
from ..system.jobs import plan_jobs
from ..system.memory import get_logical_cpu_count
from ..validation import ValidationError, handle_cli_error, validate_positive_integer

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s"


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )


def _jobs_argument(value: str) -> int:
    try:
        return validate_positive_integer(value, min_value=1, max_value=4096, field_name="--jobs")
    except ValidationError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="alchemy-build",
        description="Install dependencies, then configure and build the viewer with autobuild.",
    )
    parser.add_argument(
        "--no-deps",
        action="store_true",
        help="Skip installing distribution packages.",
    )
    parser.add_argument(
        "--no-build",
        action="store_true",
        help="Configure only, do not build.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config.toml (defaults to conf/config.toml).",
    )
    parser.add_argument(
        "--source-dir",
        type=Path,
        help="Viewer checkout to configure and build (defaults to the current directory).",
    )
    parser.add_argument(
        "-j",
        "--jobs",
        type=_jobs_argument,
        help="Requested parallelism before memory adjustment. Defaults to the CPU count.",
    )
    parser.add_argument(
        "--plan-jobs",
        action="store_true",
        help="Print the job count that would be used and exit.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser


def print_job_plan(settings: BuildSettings) -> int:
    """Plan jobs for this host and print the resolved count."""
    requested = settings.requested_jobs or get_logical_cpu_count()
    plan = plan_jobs(
        requested,
        settings.config.jobs.memory_per_job_kb,
        override=settings.overrides.cpu_count_override,
        smart=settings.smart_job_count,
    )
    print(plan.resolved_jobs)
    return 0


def main_cli(argv: Optional[List[str]] = None) -> int:
    """
    Main command-line interface.

    Args:
        argv: Arguments to parse, defaults to sys.argv[1:]

    Returns:
        Process exit code: 0 on success, 1 when a step failed

    Raises:
        SystemExit: On invalid configuration or arguments
    """
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    if args.config:
        set_config_path(args.config)

    try:
        settings = build_settings(
            skip_dependencies=args.no_deps,
            skip_build=args.no_build,
            requested_jobs=args.jobs,
            source_dir=args.source_dir,
        )
    except (OSError, tomllib.TOMLDecodeError, ValidationError) as e:
        handle_cli_error(error=e, context="configuration loading", exit_code=1, logger=logger)

    if args.plan_jobs:
        try:
            return print_job_plan(settings)
        except ValidationError as e:
            handle_cli_error(error=e, context="job planning", exit_code=1, logger=logger)

    summary = BuildRunner(settings).run()
    failed = summary.failed_step
    if failed is not None:
        logger.error(f"Build aborted at step '{failed.name}'. See {summary.log_file}")
        return 1
    logger.info("All steps completed successfully.")
    return 0


def main() -> None:
    sys.exit(main_cli())


if __name__ == "__main__":
    main()
