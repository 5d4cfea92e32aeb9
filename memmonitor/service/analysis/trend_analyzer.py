"""
Trend analysis over a recorded metrics log.

Reads the CSV written by MetricsSink and summarizes how memory usage moved
over the most recent samples.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Dict

import pandas as pd

from memmonitor.service.reporter.reporter import Reporter
from memmonitor.service.sink.metrics_sink import CSV_HEADER
from memmonitor.util.format_utils import format_bytes, format_duration

# A change beyond this many bytes counts as a trend
TREND_THRESHOLD_BYTES = 1024 * 1024
DEFAULT_WINDOW = 100

INCREASING = "increasing"
DECREASING = "decreasing"
STABLE = "stable"


@dataclass
class TrendReport:
    samples: int
    time_span_seconds: float
    memory_change_bytes: int
    rate_bytes_per_second: float
    peak_bytes: int
    low_bytes: int
    direction: str

    def to_dict(self) -> Dict:
        return {
            'samples': self.samples,
            'time_span_seconds': self.time_span_seconds,
            'memory_change_bytes': self.memory_change_bytes,
            'rate_bytes_per_second': self.rate_bytes_per_second,
            'peak_bytes': self.peak_bytes,
            'low_bytes': self.low_bytes,
            'direction': self.direction,
        }


def load_metrics(csv_path: Path) -> pd.DataFrame:
    """
    Load a metrics log into a DataFrame ordered by timestamp.

    Raises:
        FileNotFoundError: If the log does not exist
        ValueError: If the file is not a metrics log
    """
    df = pd.read_csv(csv_path)
    missing = [column for column in CSV_HEADER if column not in df.columns]
    if missing:
        raise ValueError(f"{csv_path} is not a metrics log (missing columns: {', '.join(missing)})")

    df['Timestamp'] = pd.to_datetime(df['Timestamp'], errors='coerce')
    df = df.dropna(subset=['Timestamp', 'Current (bytes)'])
    # Logs are appended across sessions; keep file order for equal timestamps
    return df.sort_values('Timestamp', kind='stable').reset_index(drop=True)


def analyze_trend(df: pd.DataFrame, window: int = DEFAULT_WINDOW) -> TrendReport:
    """
    Summarize the last `window` samples.

    Raises:
        ValueError: If fewer than two samples are available
    """
    recent = df.tail(window)
    if len(recent) < 2:
        raise ValueError("Insufficient data for trend analysis (need at least 2 samples)")

    first = recent.iloc[0]
    last = recent.iloc[-1]
    change = int(last['Current (bytes)']) - int(first['Current (bytes)'])
    time_span = (last['Timestamp'] - first['Timestamp']).total_seconds()

    if change > TREND_THRESHOLD_BYTES:
        direction = INCREASING
    elif change < -TREND_THRESHOLD_BYTES:
        direction = DECREASING
    else:
        direction = STABLE

    return TrendReport(
        samples=len(recent),
        time_span_seconds=time_span,
        memory_change_bytes=change,
        rate_bytes_per_second=abs(change) / max(time_span, 1),
        peak_bytes=int(recent['Current (bytes)'].max()),
        low_bytes=int(recent['Current (bytes)'].min()),
        direction=direction,
    )


def report_trend(report: TrendReport, reporter: Reporter) -> None:
    change_label = "increase" if report.memory_change_bytes >= 0 else "decrease"
    rows = [
        ["Samples", report.samples],
        ["Time Span", format_duration(report.time_span_seconds)],
        ["Memory Change", f"{format_bytes(abs(report.memory_change_bytes))} ({change_label})"],
        ["Rate of Change", f"{format_bytes(report.rate_bytes_per_second)}/second"],
        ["Peak in Period", format_bytes(report.peak_bytes)],
        ["Low in Period", format_bytes(report.low_bytes)],
    ]
    reporter.table("Trend Analysis Results", ["Metric", "Value"], rows)

    if report.direction == INCREASING:
        reporter.warning("Increasing memory trend detected - potential memory leak")
    elif report.direction == DECREASING:
        reporter.info("Decreasing memory trend - good memory management")
    else:
        reporter.info("Stable memory usage")
