import csv

import pytest

from memmonitor.service.analysis.trend_analyzer import (
    DECREASING,
    INCREASING,
    STABLE,
    analyze_trend,
    load_metrics,
    report_trend,
)
from memmonitor.service.sink.metrics_sink import CSV_HEADER

MB = 1024 * 1024


def write_log(path, readings, start_second=0):
    with open(path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(CSV_HEADER)
        for i, current in enumerate(readings):
            timestamp = f"2024-01-01 12:00:{start_second + i:02d}"
            writer.writerow([timestamp, i, current, current, 1024 * MB, current / (1024 * MB) * 100])
    return path


class TestTrendAnalyzer:

    def test_increasing_trend(self, tmp_path):
        df = load_metrics(write_log(tmp_path / "log.csv", [10 * MB, 12 * MB, 15 * MB]))

        report = analyze_trend(df)

        assert report.direction == INCREASING
        assert report.samples == 3
        assert report.memory_change_bytes == 5 * MB
        assert report.time_span_seconds == 2
        assert report.rate_bytes_per_second == pytest.approx(2.5 * MB)
        assert report.peak_bytes == 15 * MB
        assert report.low_bytes == 10 * MB

    def test_decreasing_trend(self, tmp_path):
        df = load_metrics(write_log(tmp_path / "log.csv", [20 * MB, 10 * MB]))
        assert analyze_trend(df).direction == DECREASING

    def test_small_changes_are_stable(self, tmp_path):
        df = load_metrics(write_log(tmp_path / "log.csv", [10 * MB, 10 * MB + 4096, 10 * MB - 4096]))
        assert analyze_trend(df).direction == STABLE

    def test_window_uses_most_recent_samples(self, tmp_path):
        df = load_metrics(write_log(tmp_path / "log.csv", [50 * MB, 10 * MB, 10 * MB, 10 * MB]))

        report = analyze_trend(df, window=3)

        assert report.samples == 3
        assert report.direction == STABLE

    def test_insufficient_data(self, tmp_path):
        df = load_metrics(write_log(tmp_path / "log.csv", [10 * MB]))
        with pytest.raises(ValueError):
            analyze_trend(df)

    def test_not_a_metrics_log(self, tmp_path):
        path = tmp_path / "other.csv"
        path.write_text("a,b\n1,2\n")
        with pytest.raises(ValueError):
            load_metrics(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_metrics(tmp_path / "missing.csv")

    def test_report_warns_on_increase(self, tmp_path, reporter, caplog):
        df = load_metrics(write_log(tmp_path / "log.csv", [10 * MB, 20 * MB]))

        report_trend(analyze_trend(df), reporter)

        assert "Trend Analysis Results" in caplog.text
        assert "10 MB (increase)" in caplog.text
        warnings = [r for r in caplog.records if r.levelname == "WARNING"]
        assert len(warnings) == 1
        assert "potential memory leak" in warnings[0].getMessage()
