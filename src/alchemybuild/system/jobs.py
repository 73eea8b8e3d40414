"""
Adaptive build job count planning.

Linking the viewer needs on average about 1GiB per job. Running more jobs
than physical memory can hold leads to OOM kills or swap thrashing, both
slower than simply running fewer jobs.

Build memory is never planned into swap. Swap is only trusted to evict
memory that other processes already hold: when free swap can absorb
everything currently resident, all of physical RAM is considered usable
by the build. Otherwise the job count is sized against the memory that is
available right now.
"""

import logging
from typing import Optional

from ..models.memory import KIB_PER_GIB, JobPlan, MemorySnapshot
from ..validation import ConfigurationError
from .memory import read_memory_snapshot

logger = logging.getLogger(__name__)


def _gib(kb: int) -> int:
    return kb // KIB_PER_GIB


def _largest_fitting_job_count(cost_per_job_kb: int, budget_kb: int) -> int:
    """
    Count jobs up from one while their combined cost stays within budget.

    Returns the last count that fit, or 1 if even a single job does not.
    """
    jobs = 1
    logger.info(f"{jobs} job  would consume {_gib(jobs * cost_per_job_kb)}GB")
    while (jobs + 1) * cost_per_job_kb <= budget_kb:
        jobs += 1
        logger.info(f"{jobs} jobs would consume {_gib(jobs * cost_per_job_kb)}GB")
    return jobs


def resolve_jobs(requested: int, snapshot: MemorySnapshot, cost_per_job_kb: int) -> int:
    """
    Compute how many build jobs can safely run at once.

    Args:
        requested: Desired parallelism, normally the logical CPU count
        snapshot: Host memory at the start of the build
        cost_per_job_kb: Estimated memory needed by one job

    Returns:
        A job count between 1 and requested (inclusive)

    Raises:
        ConfigurationError: If requested or cost_per_job_kb is not positive

    Examples:
        >>> snap = MemorySnapshot(8388608, 1048576, 7340032, 16777216)
        >>> resolve_jobs(8, snap, 2097152)
        4
    """
    if isinstance(requested, bool) or not isinstance(requested, int) or requested <= 0:
        raise ConfigurationError(
            f"requested job count must be a positive integer, got {requested!r}",
            field_name="requested",
            value=requested,
        )
    if (
        isinstance(cost_per_job_kb, bool)
        or not isinstance(cost_per_job_kb, int)
        or cost_per_job_kb <= 0
    ):
        raise ConfigurationError(
            f"memory cost per job must be a positive integer, got {cost_per_job_kb!r}",
            field_name="cost_per_job_kb",
            value=cost_per_job_kb,
        )

    if requested <= 1:
        return requested

    required_kb = requested * cost_per_job_kb
    logger.info(f"Required memory at {requested} jobs:         {_gib(required_kb)}GB")
    logger.info(f"Available memory (counting swap):   {_gib(snapshot.total_combined_kb)}GB")
    logger.info(f"Total RAM:                          {_gib(snapshot.total_physical_kb)}GB")

    if required_kb <= snapshot.total_physical_kb:
        return requested

    logger.info("Not enough physical memory to use all cores")
    if snapshot.used_physical_kb < snapshot.available_swap_kb:
        logger.info("Using swap memory to store current processes memory")
        jobs = snapshot.total_physical_kb // cost_per_job_kb
    else:
        # Swap cannot hold what is resident now; size against free RAM.
        jobs = _largest_fitting_job_count(cost_per_job_kb, snapshot.available_physical_kb)

    return max(1, min(jobs, requested))


def plan_jobs(
    requested: int,
    cost_per_job_kb: int,
    snapshot: Optional[MemorySnapshot] = None,
    override: Optional[int] = None,
    smart: bool = True,
) -> JobPlan:
    """
    Decide the job count for one build invocation.

    An explicit override (AUTOBUILD_CPU_COUNT) is used verbatim. With smart
    planning disabled the requested count is used. Otherwise the memory
    advisor scales the request down to what the host can hold.

    Args:
        requested: Desired parallelism
        cost_per_job_kb: Estimated memory needed by one job
        snapshot: Memory snapshot; read from the host when omitted
        override: Explicit job count that bypasses planning
        smart: Whether to consult the memory advisor

    Returns:
        JobPlan describing the decision

    Raises:
        ConfigurationError: On non-positive requested, cost or override values
    """
    if override is not None:
        if override <= 0:
            raise ConfigurationError(
                f"job count override must be positive, got {override}",
                field_name="AUTOBUILD_CPU_COUNT",
                value=override,
            )
        logger.info(f"Using job count from AUTOBUILD_CPU_COUNT: {override}")
        return JobPlan(
            requested_jobs=override,
            cost_per_job_kb=cost_per_job_kb,
            resolved_jobs=override,
            source="environment",
        )

    if not smart:
        if requested <= 0:
            raise ConfigurationError(
                f"requested job count must be positive, got {requested}",
                field_name="requested",
                value=requested,
            )
        logger.info(f"Smart job count disabled, using {requested} jobs")
        return JobPlan(
            requested_jobs=requested,
            cost_per_job_kb=cost_per_job_kb,
            resolved_jobs=requested,
            source="cpu_count",
        )

    if snapshot is None:
        snapshot = read_memory_snapshot()

    resolved = resolve_jobs(requested, snapshot, cost_per_job_kb)
    logger.info(f"Adjusted job count: {resolved}")
    return JobPlan(
        requested_jobs=requested,
        cost_per_job_kb=cost_per_job_kb,
        resolved_jobs=resolved,
        source="memory_advisor",
    )
