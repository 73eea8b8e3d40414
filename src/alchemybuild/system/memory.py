"""
Host memory and CPU probing.

Thin wrappers around psutil that produce the kilobyte figures the job
count advisor works with.
"""

import logging

import psutil

from ..models.memory import MemorySnapshot

logger = logging.getLogger(__name__)


def _to_kb(num_bytes: int) -> int:
    return int(num_bytes) // 1024


def read_memory_snapshot() -> MemorySnapshot:
    """
    Take a point-in-time snapshot of physical memory and swap.

    Returns:
        MemorySnapshot with all values in KiB. "Available swap" is the
        free swap space reported by the kernel.
    """
    vm = psutil.virtual_memory()
    swap = psutil.swap_memory()

    total_kb = _to_kb(vm.total)
    snapshot = MemorySnapshot(
        total_physical_kb=total_kb,
        # psutil computes "used" per platform; keep it within the invariant
        used_physical_kb=min(_to_kb(vm.used), total_kb),
        available_physical_kb=min(_to_kb(vm.available), total_kb),
        available_swap_kb=_to_kb(swap.free),
    )
    logger.debug(f"Memory snapshot: {snapshot}")
    return snapshot


def get_logical_cpu_count() -> int:
    """Logical CPU count, as `nproc` would report it; never less than 1."""
    try:
        count = psutil.cpu_count(logical=True)
    except Exception as e:
        logger.warning(f"Failed to get CPU count: {e}")
        return 1
    return count or 1
