"""
Memory Sampler Module

Reads current usage, high-water mark and memory ceiling of one process.
Used for both self-monitoring and child-command monitoring.
"""
import sys
import time
from typing import Optional

import psutil

from memmonitor.exceptions import SampleError
from memmonitor.models.sample import Sample

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class MemorySampler:
    """Sample memory usage of a process"""

    def __init__(self, pid: Optional[int] = None):
        """
        Initialize sampler.

        Args:
            pid: Process ID to observe (default: the current process)

        Raises:
            SampleError: If the process cannot be opened
        """
        try:
            self.process = psutil.Process(pid)
        except psutil.Error as e:
            raise SampleError(f"Cannot observe process {pid}: {e}") from e
        self.pid = self.process.pid
        self._peak_bytes = 0

    @property
    def peak_bytes(self) -> int:
        return self._peak_bytes

    def sample(self) -> Sample:
        """
        Take one reading.

        Returns:
            Sample whose peak is never below its current value nor below any
            peak previously returned by this sampler

        Raises:
            SampleError: If the platform query fails
        """
        try:
            current = self.process.memory_info().rss
            high_water = self._read_high_water_mark()
            limit = self._read_memory_limit()
        except (psutil.Error, OSError) as e:
            raise SampleError(f"Memory query failed for PID {self.pid}: {e}") from e

        self._peak_bytes = max(self._peak_bytes, high_water or 0, current)
        percentage = (current / limit) * 100 if limit > 0 else 0.0

        return Sample(
            timestamp=time.strftime(TIMESTAMP_FORMAT),
            current_bytes=current,
            peak_bytes=self._peak_bytes,
            limit_bytes=limit,
            percentage=percentage,
        )

    def _read_high_water_mark(self) -> Optional[int]:
        """
        True high-water RSS where the platform exposes it (VmHWM on Linux,
        peak working set on Windows); None elsewhere, in which case the
        sampled maximum is used.
        """
        if sys.platform.startswith("linux"):
            with open(f"/proc/{self.pid}/status", "r") as f:
                for line in f:
                    if line.startswith("VmHWM:"):
                        parts = line.split()
                        if len(parts) >= 2 and parts[1].isdigit():
                            return int(parts[1]) * 1024
                        break
            return None
        if sys.platform.startswith("win"):
            return getattr(self.process.memory_info(), "peak_wset", None)
        return None

    def _read_memory_limit(self) -> int:
        """Soft address-space rlimit of the process if set, else physical RAM."""
        if hasattr(psutil, "RLIMIT_AS") and hasattr(self.process, "rlimit"):
            soft, _hard = self.process.rlimit(psutil.RLIMIT_AS)
            if soft != psutil.RLIM_INFINITY and soft > 0:
                return soft
        return psutil.virtual_memory().total
