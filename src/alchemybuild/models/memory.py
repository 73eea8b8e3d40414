"""
Memory and job planning data models.

All memory figures are kilobytes (KiB, 1024 bytes), matching what the
build tooling has always reported.
"""

from dataclasses import dataclass

from ..validation import ValidationError

KIB_PER_GIB = 1024 * 1024


@dataclass(frozen=True)
class MemorySnapshot:
    """
    Point-in-time view of host memory, taken once per invocation.
    """

    total_physical_kb: int
    used_physical_kb: int
    available_physical_kb: int
    available_swap_kb: int

    def __post_init__(self):
        for name in (
            "total_physical_kb",
            "used_physical_kb",
            "available_physical_kb",
            "available_swap_kb",
        ):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 0:
                raise ValidationError(
                    f"{name} must be a non-negative integer, got {value!r}",
                    field_name=name,
                    value=value,
                )
        if self.used_physical_kb > self.total_physical_kb:
            raise ValidationError(
                "used_physical_kb cannot exceed total_physical_kb",
                field_name="used_physical_kb",
                value=self.used_physical_kb,
            )
        if self.available_physical_kb > self.total_physical_kb:
            raise ValidationError(
                "available_physical_kb cannot exceed total_physical_kb",
                field_name="available_physical_kb",
                value=self.available_physical_kb,
            )

    @property
    def total_combined_kb(self) -> int:
        """Physical memory plus free swap."""
        return self.total_physical_kb + self.available_swap_kb


@dataclass(frozen=True)
class JobPlan:
    """
    The outcome of job count planning for one build invocation.
    """

    # Parallelism asked for, normally the logical CPU count.
    requested_jobs: int
    # Estimated memory needed by one compile/link job.
    cost_per_job_kb: int
    # Job count handed to the build tool.
    resolved_jobs: int
    # "environment", "cpu_count" or "memory_advisor".
    source: str = "memory_advisor"

    @property
    def was_reduced(self) -> bool:
        return self.resolved_jobs < self.requested_jobs
