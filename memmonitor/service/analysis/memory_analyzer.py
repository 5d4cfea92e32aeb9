"""
Garbage-collection efficiency and leak detection for the current process.
"""
import gc
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from memmonitor.models.sample import Sample
from memmonitor.service.reporter.reporter import Reporter
from memmonitor.service.sampler.memory_sampler import MemorySampler
from memmonitor.util.format_utils import format_bytes

# Readings further apart than this between GC rounds suggest a leak
LEAK_THRESHOLD_BYTES = 1024 * 1024
DEFAULT_ROUNDS = 3
DEFAULT_PAUSE_SECONDS = 0.1


@dataclass
class GcEfficiency:
    before: Sample
    after: Sample
    collected_objects: int

    @property
    def memory_freed(self) -> int:
        return self.before.current_bytes - self.after.current_bytes

    @property
    def efficiency_percent(self) -> float:
        if self.before.current_bytes <= 0:
            return 0.0
        return self.memory_freed / self.before.current_bytes * 100


@dataclass
class LeakCheck:
    measurements: List[int]

    @property
    def max_difference(self) -> int:
        diffs = [abs(b - a) for a, b in zip(self.measurements, self.measurements[1:])]
        return max(diffs, default=0)

    @property
    def stable(self) -> bool:
        return self.max_difference <= LEAK_THRESHOLD_BYTES


class MemoryAnalyzer:

    def __init__(
        self,
        sampler: Optional[MemorySampler] = None,
        collect: Callable[[], int] = gc.collect,
        pause_seconds: float = DEFAULT_PAUSE_SECONDS,
    ):
        self.sampler = sampler or MemorySampler()
        self.collect = collect
        self.pause_seconds = pause_seconds

    def gc_efficiency(self) -> GcEfficiency:
        before = self.sampler.sample()
        collected = self.collect()
        after = self.sampler.sample()
        return GcEfficiency(before=before, after=after, collected_objects=collected)

    def detect_leaks(self, rounds: int = DEFAULT_ROUNDS) -> LeakCheck:
        if rounds < 2:
            raise ValueError(f"Leak detection needs at least 2 rounds, got {rounds}")

        measurements = []
        for i in range(rounds):
            self.collect()
            measurements.append(self.sampler.sample().current_bytes)
            if i < rounds - 1:
                time.sleep(self.pause_seconds)
        return LeakCheck(measurements=measurements)


def report_analysis(efficiency: GcEfficiency, leak_check: LeakCheck, reporter: Reporter) -> None:
    rows = [
        ["Memory Usage", format_bytes(efficiency.before.current_bytes),
         format_bytes(efficiency.after.current_bytes),
         f"{format_bytes(max(efficiency.memory_freed, 0))} freed"],
        ["Peak Usage", format_bytes(efficiency.before.peak_bytes),
         format_bytes(efficiency.after.peak_bytes), "N/A"],
        ["GC Efficiency", "N/A", "N/A", f"{efficiency.efficiency_percent:.2f}%"],
        ["Objects Collected", "N/A", "N/A", efficiency.collected_objects],
    ]
    reporter.table("Analysis Results", ["Metric", "Before GC", "After GC", "Change"], rows)

    if efficiency.efficiency_percent > 10:
        reporter.info("Good garbage collection efficiency")
    elif efficiency.efficiency_percent > 5:
        reporter.warning("Moderate garbage collection efficiency")
    else:
        reporter.warning("Low garbage collection efficiency - possible memory leaks")

    if leak_check.stable:
        reporter.info("No obvious memory leaks detected")
    else:
        reporter.warning("Potential memory leak detected")
        reporter.info(f"Maximum difference between GC runs: {format_bytes(leak_check.max_difference)}")
