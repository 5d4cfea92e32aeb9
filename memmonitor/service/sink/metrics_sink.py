"""
Append-only CSV log of memory samples.

The header is written only when the file is created, so repeated sessions
keep appending to one log. Any I/O failure disables logging for the rest of
the session with a warning; it never interrupts monitoring.
"""
import csv
from pathlib import Path
from typing import Optional

from memmonitor.exceptions import SinkError
from memmonitor.models.sample import Sample
from memmonitor.service.reporter.reporter import Reporter

CSV_HEADER = [
    'Timestamp',
    'Iteration',
    'Current (bytes)',
    'Peak (bytes)',
    'Limit (bytes)',
    'Usage (%)',
]


class MetricsSink:

    def __init__(self, csv_path: Path, reporter: Reporter):
        self.csv_path = Path(csv_path)
        self.reporter = reporter
        self.rows_written = 0
        self._file = None
        self._writer = None
        self.last_error: Optional[SinkError] = None

    @property
    def enabled(self) -> bool:
        return self._writer is not None

    def open(self) -> bool:
        """
        Open the log for appending, writing the header if the file is new.

        Returns:
            True if logging is active
        """
        is_new_file = not self.csv_path.exists()
        try:
            self._file = open(self.csv_path, 'a', newline='', encoding='utf-8')
            self._writer = csv.writer(self._file)
            if is_new_file:
                self._writer.writerow(CSV_HEADER)
                self._file.flush()
        except OSError as e:
            self._disable(SinkError(f"Failed to open CSV file for logging: {self.csv_path} ({e})"))
            return False

        self.reporter.csv_logging(self.csv_path)
        return True

    def record(self, sample: Sample, iteration: int) -> bool:
        """Append one row; returns False when logging is (or just became) disabled."""
        if not self.enabled:
            return False
        try:
            self._writer.writerow(sample.to_row(iteration))
            self._file.flush()
        except OSError as e:
            self._disable(SinkError(f"Failed to write CSV file: {self.csv_path} ({e})"))
            return False

        self.rows_written += 1
        return True

    def close(self) -> None:
        if self._file is None:
            return
        file, self._file, self._writer = self._file, None, None
        try:
            file.close()
        except OSError as e:
            self.reporter.warning(f"Failed to close CSV file {self.csv_path}: {e}")

    def _disable(self, error: SinkError) -> None:
        self.last_error = error
        self.reporter.warning(f"{error}; CSV logging disabled for this session")
        self.close()

    def __enter__(self) -> "MetricsSink":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
