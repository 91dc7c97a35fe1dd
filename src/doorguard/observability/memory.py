"""Process memory metrics for the /memory command.

Values are reported in bytes. psutil exposes no heap counters for a
CPython process, so the closest process-level equivalents are used:

- rss: resident set size
- heap_total: virtual memory size
- heap_used: unique set size (falls back to rss when full info is denied)
- external: shared memory, 0 where the platform does not report it
"""

import os
from dataclasses import dataclass
from typing import Optional

import psutil
import structlog

logger = structlog.get_logger(__name__)

# Process handle cached at module level to avoid repeated PID lookups
_process: Optional[psutil.Process] = None


def _get_process() -> psutil.Process:
    """Return a cached psutil.Process handle for this process."""
    global _process
    if _process is None:
        _process = psutil.Process(os.getpid())
    return _process


@dataclass
class MemoryUsage:
    """Process memory snapshot in bytes."""
    rss: int
    heap_total: int
    heap_used: int
    external: int


def collect_memory_usage() -> MemoryUsage:
    """Collect the current process memory usage.

    Returns:
        MemoryUsage with all values in bytes.
    """
    proc = _get_process()
    info = proc.memory_info()

    try:
        heap_used = int(proc.memory_full_info().uss)
    except (psutil.AccessDenied, AttributeError) as exc:
        logger.debug("memory_full_info_unavailable", error=str(exc))
        heap_used = int(info.rss)

    return MemoryUsage(
        rss=int(info.rss),
        heap_total=int(info.vms),
        heap_used=heap_used,
        external=int(getattr(info, "shared", 0)),
    )
