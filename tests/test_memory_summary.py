import gc

import pytest

from memmonitor.service.analysis.memory_summary import (
    HEALTHY,
    gc_statistics,
    generate_recommendations,
    report_summary,
)

MB = 1024 * 1024
LIMIT = 1000 * MB


@pytest.mark.parametrize(
    "current, peak, expected_prefixes",
    [
        (100 * MB, 100 * MB, [HEALTHY]),
        (760 * MB, 760 * MB, ["Warning: Memory usage above 75%"]),
        (850 * MB, 850 * MB, ["Warning: Memory usage above 75%", "Consider raising"]),
        (950 * MB, 950 * MB, ["Critical: Memory usage above 90%", "Consider raising"]),
        (100 * MB, 151 * MB, ["Large difference between current and peak"]),
        (100 * MB, 150 * MB, [HEALTHY]),
    ],
)
def test_generate_recommendations(make_sample, current, peak, expected_prefixes):
    recommendations = generate_recommendations(make_sample(current=current, peak=peak, limit=LIMIT))

    assert len(recommendations) == len(expected_prefixes)
    for recommendation, prefix in zip(recommendations, expected_prefixes):
        assert recommendation.startswith(prefix)


def test_gc_statistics_has_one_row_per_generation():
    rows = gc_statistics()

    assert len(rows) == len(gc.get_stats())
    assert [row[0] for row in rows] == list(range(len(rows)))
    assert rows[0][5] == gc.get_threshold()[0]
    assert all(isinstance(value, int) for row in rows for value in row)


def test_report_summary(make_sample, reporter, caplog):
    report_summary(make_sample(current=950 * MB, limit=LIMIT), reporter)

    assert "Current Memory Status" in caplog.text
    assert "• Critical: Memory usage above 90%" in caplog.text
    assert "Garbage Collection Statistics" in caplog.text


def test_report_summary_without_gc(make_sample, reporter, caplog):
    report_summary(make_sample(current=100 * MB, limit=LIMIT), reporter, include_gc=False)

    assert f"• {HEALTHY}" in caplog.text
    assert "Garbage Collection Statistics" not in caplog.text
