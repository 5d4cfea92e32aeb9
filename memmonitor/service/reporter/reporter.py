"""
Console reporting for monitoring sessions.

All user-visible output goes through one logger so the console stays in the
`[LEVEL] message` format and can optionally be mirrored to a log file.
"""
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from tabulate import tabulate

from memmonitor.consts.StopReason import StopReason
from memmonitor.models.sample import Sample
from memmonitor.util.format_utils import format_bytes
from memmonitor.util.log_config import setup_logger

REPORTER_LOGGER_NAME = "memmonitor.reporter"

HIGH_USAGE_PERCENT = 80
CRITICAL_USAGE_PERCENT = 90


def format_sample(sample: Sample) -> str:
    return "Memory: {} / {} ({:.2f}%) | Peak: {}".format(
        format_bytes(sample.current_bytes),
        format_bytes(sample.limit_bytes),
        sample.percentage,
        format_bytes(sample.peak_bytes),
    )


class Reporter:

    def __init__(self, logger: Optional[logging.Logger] = None, log_file: Optional[Path] = None):
        self.logger = logger or setup_logger(REPORTER_LOGGER_NAME, log_file=log_file)

    # ---- samples and alerts ----

    def sample(self, sample: Sample) -> None:
        self.logger.info(format_sample(sample))

    def status_table(self, sample: Sample) -> None:
        rows = [
            ["Current Usage", format_bytes(sample.current_bytes)],
            ["Peak Usage", format_bytes(sample.peak_bytes)],
            ["Memory Limit", format_bytes(sample.limit_bytes)],
            ["Usage Percentage", f"{sample.percentage:.2f}%"],
            ["Available Memory", format_bytes(max(sample.limit_bytes - sample.current_bytes, 0))],
        ]
        self.table("Current Memory Status", ["Metric", "Value"], rows)

        if sample.percentage > HIGH_USAGE_PERCENT:
            self.logger.warning("High memory usage detected!")
        if sample.percentage > CRITICAL_USAGE_PERCENT:
            self.logger.error("Critical memory usage - immediate attention required")

    def recommendations(self, recommendations: Sequence[str]) -> None:
        lines = "\n".join(f"• {item}" for item in recommendations)
        self.logger.info(f"Optimization Recommendations\n{lines}")

    def threshold_exceeded(self, sample: Sample) -> None:
        self.logger.warning(f"Memory usage exceeds threshold: {format_bytes(sample.current_bytes)}")

    def gc_triggered(self, collected: int) -> None:
        self.logger.info(f"Garbage collection triggered ({collected} objects collected)")

    def gc_summary(self, runs: int) -> None:
        self.logger.info(f"Garbage collections triggered: {runs}")

    def alert_script_started(self, script: str) -> None:
        self.logger.info(f"Running alert script: {script}")

    def alert_script_failed(self, script: str, reason: str) -> None:
        self.logger.error(f"Alert script failed ({script}): {reason}")

    # ---- lifecycle ----

    def monitoring_started(self, command: Optional[Sequence[str]], pid: int) -> None:
        if command:
            self.logger.info(f"Starting memory monitoring for command: {' '.join(command)} (PID {pid})")
        else:
            self.logger.info(f"Starting memory monitoring for current process (PID {pid})")
        self.logger.info("Press Ctrl+C to stop monitoring")

    def csv_logging(self, csv_path: Path) -> None:
        self.logger.info(f"Logging to CSV: {csv_path}")

    def stopped(self, reason: StopReason) -> None:
        self.logger.info(f"Monitoring stopped: {reason.value}")

    def command_stdout_line(self, line: str) -> None:
        self.logger.info(line)

    def command_stderr_line(self, line: str) -> None:
        self.logger.error(line)

    def command_output(self, stdout: str, stderr: str) -> None:
        if stdout:
            self.logger.info("Command output:\n" + stdout.rstrip("\n"))
        if stderr:
            self.logger.error("Command errors:\n" + stderr.rstrip("\n"))

    def command_exit(self, exit_code: int) -> None:
        self.logger.info(f"Command exited with code: {exit_code}")

    def peak_summary(self, peak_bytes: int, iterations: int) -> None:
        self.logger.info(f"Peak memory usage: {format_bytes(peak_bytes)} ({iterations} samples)")

    def csv_saved(self, csv_path: Path) -> None:
        self.logger.info(f"Memory usage log saved to: {csv_path}")

    # ---- generic ----

    def warning(self, message: str) -> None:
        self.logger.warning(message)

    def error(self, message: str) -> None:
        self.logger.error(message)

    def info(self, message: str) -> None:
        self.logger.info(message)

    def table(self, title: str, headers: List[str], rows: List[list]) -> None:
        body = tabulate(rows, headers=headers, tablefmt="github", stralign="left", numalign="left")
        self.logger.info(f"{title}\n{body}")
