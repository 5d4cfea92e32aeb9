# tests/conftest.py
"""
Pytest configuration and fixtures.
Adds the project root to sys.path so `import memmonitor` works without install.
"""

import logging
import sys
from pathlib import Path

import pytest

project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from memmonitor.models.sample import Sample  # noqa: E402
from memmonitor.service.reporter.reporter import Reporter  # noqa: E402


@pytest.fixture
def reporter(caplog):
    """Reporter whose output propagates to caplog."""
    caplog.set_level(logging.DEBUG)
    return Reporter(logger=logging.getLogger("tests.memmonitor.reporter"))


@pytest.fixture
def make_sample():
    def _make(current=1024, peak=None, limit=1024 ** 3, timestamp="2024-01-01 12:00:00"):
        peak = current if peak is None else peak
        return Sample(
            timestamp=timestamp,
            current_bytes=current,
            peak_bytes=peak,
            limit_bytes=limit,
            percentage=current / limit * 100,
        )
    return _make


class FakeSampler:
    """Replays a fixed list of current-usage readings."""

    def __init__(self, readings, pid=12345):
        self.readings = list(readings)
        self.pid = pid
        self.calls = 0
        self._peak = 0

    def sample(self):
        current = self.readings[min(self.calls, len(self.readings) - 1)]
        self.calls += 1
        self._peak = max(self._peak, current)
        return Sample("2024-01-01 12:00:00", current, self._peak, 1024 ** 3, current / 1024 ** 3 * 100)


@pytest.fixture
def fake_sampler_cls():
    return FakeSampler
