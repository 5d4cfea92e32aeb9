import gc
import subprocess
from typing import Callable, Optional

from memmonitor.consts.AlertLevel import AlertLevel
from memmonitor.models.sample import Sample
from memmonitor.service.reporter.reporter import Reporter

DEFAULT_ALERT_SCRIPT_TIMEOUT = 30.0


def evaluate(sample: Sample, threshold_bytes: int) -> AlertLevel:
    """Strictly above the threshold is an alert; no hysteresis, no cooldown."""
    if sample.current_bytes > threshold_bytes:
        return AlertLevel.THRESHOLD_EXCEEDED
    return AlertLevel.NORMAL


class AlertEngine:
    """
    Evaluates each sample against the threshold and dispatches the follow-up
    actions for every qualifying sample.

    The corrective action (a forced garbage collection) only makes sense when
    the monitor observes its own interpreter, so it is enabled by the caller
    in self-monitoring mode only.
    """

    def __init__(
        self,
        threshold_bytes: int,
        reporter: Reporter,
        corrective_action: bool = False,
        alert_script: Optional[str] = None,
        alert_script_timeout: float = DEFAULT_ALERT_SCRIPT_TIMEOUT,
        collect: Callable[[], int] = gc.collect,
    ):
        self.threshold_bytes = threshold_bytes
        self.reporter = reporter
        self.corrective_action = corrective_action
        self.alert_script = alert_script
        self.alert_script_timeout = alert_script_timeout
        self.collect = collect
        self.dispatch_count = 0

    def handle(self, sample: Sample) -> AlertLevel:
        level = evaluate(sample, self.threshold_bytes)
        if level is AlertLevel.NORMAL:
            return level

        self.reporter.threshold_exceeded(sample)
        if self.alert_script:
            self._run_alert_script()
        if self.corrective_action:
            collected = self.collect()
            self.dispatch_count += 1
            self.reporter.gc_triggered(collected)
        return level

    def _run_alert_script(self) -> None:
        self.reporter.alert_script_started(self.alert_script)
        try:
            subprocess.run(
                self.alert_script,
                shell=True,
                check=True,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                timeout=self.alert_script_timeout,
            )
        except subprocess.CalledProcessError as e:
            stderr_output = e.stderr.decode(errors="replace").strip() if e.stderr else ""
            self.reporter.alert_script_failed(self.alert_script, f"exit code {e.returncode} {stderr_output}".strip())
        except subprocess.TimeoutExpired:
            self.reporter.alert_script_failed(self.alert_script, f"timed out after {self.alert_script_timeout}s")
        except OSError as e:
            self.reporter.alert_script_failed(self.alert_script, str(e))
