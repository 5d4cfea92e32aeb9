"""
Point-in-time memory summary with optimization recommendations and the
interpreter's garbage-collection statistics.
"""
import gc
from typing import List

from memmonitor.models.sample import Sample
from memmonitor.service.reporter.reporter import CRITICAL_USAGE_PERCENT, Reporter
from memmonitor.util.format_utils import BYTES_PER_MB

ELEVATED_USAGE_PERCENT = 75
LIMIT_PRESSURE_RATIO = 0.8
# Peak this far above current usage hints at memory that was never returned
PEAK_GAP_BYTES = 50 * BYTES_PER_MB

HEALTHY = "Memory usage looks healthy"


def generate_recommendations(sample: Sample) -> List[str]:
    recommendations = []

    if sample.percentage > CRITICAL_USAGE_PERCENT:
        recommendations.append(
            f"Critical: Memory usage above {CRITICAL_USAGE_PERCENT}% - raise the memory limit or optimize code"
        )
    elif sample.percentage > ELEVATED_USAGE_PERCENT:
        recommendations.append(
            f"Warning: Memory usage above {ELEVATED_USAGE_PERCENT}% - monitor closely and consider optimization"
        )

    if sample.current_bytes > sample.limit_bytes * LIMIT_PRESSURE_RATIO:
        recommendations.append("Consider raising the address-space limit (ulimit -v) or adding memory")

    if sample.peak_bytes - sample.current_bytes > PEAK_GAP_BYTES:
        recommendations.append("Large difference between current and peak usage - possible memory leaks")

    return recommendations or [HEALTHY]


def gc_statistics() -> List[list]:
    """
    One row per collector generation: collections run, objects collected,
    uncollectable objects, objects pending and the generation's threshold.
    """
    stats = gc.get_stats()
    counts = gc.get_count()
    thresholds = gc.get_threshold()

    rows = []
    for generation, gen_stats in enumerate(stats):
        rows.append([
            generation,
            gen_stats.get("collections", 0),
            gen_stats.get("collected", 0),
            gen_stats.get("uncollectable", 0),
            counts[generation] if generation < len(counts) else 0,
            thresholds[generation] if generation < len(thresholds) else 0,
        ])
    return rows


def report_summary(sample: Sample, reporter: Reporter, include_gc: bool = True) -> None:
    reporter.status_table(sample)
    reporter.recommendations(generate_recommendations(sample))
    if include_gc:
        reporter.table(
            "Garbage Collection Statistics",
            ["Generation", "Collections", "Collected", "Uncollectable", "Pending", "Threshold"],
            gc_statistics(),
        )
