"""
Monitor Session Module

Drives the polling loop: sample -> report -> alert -> record -> drain child
output, until the child exits, the maximum duration elapses or the session
is cancelled. Finalization (reap the child, close the CSV log, print the
summary) runs on every exit path.
"""
import gc
import signal
import threading
import time
from collections import deque
from contextlib import ExitStack, contextmanager
from typing import Callable, Deque, Optional

from memmonitor.config.monitor_config import MonitorConfig
from memmonitor.consts.SessionState import SessionState
from memmonitor.consts.StopReason import StopReason
from memmonitor.exceptions import SampleError, SpawnError
from memmonitor.models.monitor_result import MonitorResult
from memmonitor.models.sample import Sample
from memmonitor.service.alert.alert_engine import AlertEngine
from memmonitor.service.reporter.reporter import Reporter
from memmonitor.service.sampler.memory_sampler import MemorySampler
from memmonitor.service.sink.metrics_sink import MetricsSink
from memmonitor.service.supervisor.process_handle import ProcessHandle
from memmonitor.service.supervisor.process_supervisor import ProcessSupervisor

# Samples kept in memory for the result / trend display
HISTORY_SIZE = 100


class MonitorSession:
    """One monitoring run; not reusable."""

    def __init__(
        self,
        config: MonitorConfig,
        reporter: Optional[Reporter] = None,
        supervisor: Optional[ProcessSupervisor] = None,
        sampler_factory: Callable[[Optional[int]], MemorySampler] = MemorySampler,
        collect: Callable[[], int] = gc.collect,
        handle_signals: bool = True,
    ):
        self.config = config
        self.reporter = reporter or Reporter()
        self.supervisor = supervisor or ProcessSupervisor(
            reporter=self.reporter,
            terminate_timeout=config.terminate_timeout_seconds,
            drain_timeout=config.drain_timeout_seconds,
        )
        self.sampler_factory = sampler_factory
        self.alert_engine = AlertEngine(
            threshold_bytes=config.threshold_bytes,
            reporter=self.reporter,
            corrective_action=config.monitors_self,
            alert_script=config.alert_script,
            collect=collect,
        )
        self.handle_signals = handle_signals

        self.state = SessionState.IDLE
        self.iteration = 0
        self.peak_bytes = 0
        self.history: Deque[Sample] = deque(maxlen=HISTORY_SIZE)
        self.handle: Optional[ProcessHandle] = None
        self.sink: Optional[MetricsSink] = None
        self._cancel_event = threading.Event()

    def cancel(self) -> None:
        """Request a stop; observed between ticks. Safe from other threads and signal handlers."""
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def run(self) -> MonitorResult:
        if self.state is not SessionState.IDLE:
            raise RuntimeError("A monitor session can only run once")

        start_time = time.monotonic()
        with ExitStack() as stack:
            if self.handle_signals:
                stack.enter_context(self._cancel_on_signals())

            if not self.config.monitors_self:
                try:
                    self.handle = stack.enter_context(self.supervisor.supervise(self.config.target_command))
                except SpawnError as e:
                    self.reporter.error(str(e))
                    self.state = SessionState.DONE
                    return MonitorResult(exit_code=1, stop_reason=StopReason.SPAWN_FAILED)

            if self.config.csv_logging_enabled:
                self.sink = stack.enter_context(MetricsSink(self.config.csv_path, self.reporter))

            self.state = SessionState.RUNNING
            stop_reason, exit_code = StopReason.ERROR, 1
            try:
                stop_reason = self._monitor(start_time)
                exit_code = 0
            except SampleError as e:
                if self.handle is not None and not self.supervisor.is_running(self.handle):
                    # The child exited between the liveness check and the query
                    stop_reason, exit_code = StopReason.CHILD_EXITED, 0
                else:
                    self.reporter.error(f"Monitoring failed: {e}")
                    stop_reason = StopReason.SAMPLE_FAILED
            except KeyboardInterrupt:
                stop_reason, exit_code = StopReason.CANCELLED, 0
            finally:
                result = self._finalize(stop_reason, exit_code, start_time)
        return result

    def _monitor(self, start_time: float) -> StopReason:
        pid = self.handle.pid if self.handle is not None else None
        sampler = self.sampler_factory(pid)
        self.reporter.monitoring_started(self.config.target_command, sampler.pid)
        self.reporter.status_table(sampler.sample())

        interval = self.config.interval_seconds
        deadline = start_time + self.config.max_duration_seconds if self.config.max_duration_seconds else None
        next_tick = start_time

        while not self.cancelled:
            self._tick(sampler)

            if self.handle is not None:
                self.supervisor.drain_available(self.handle)
                if not self.supervisor.is_running(self.handle):
                    return StopReason.CHILD_EXITED

            now = time.monotonic()
            if deadline is not None and now >= deadline:
                return StopReason.DURATION_REACHED

            # Fixed-rate schedule; after an overrun start a fresh interval instead of bursting
            next_tick += interval
            if next_tick <= now:
                next_tick = now + interval
            wake_at = min(next_tick, deadline) if deadline is not None else next_tick
            if self._wait_until(wake_at):
                break

        return StopReason.CANCELLED

    def _tick(self, sampler: MemorySampler) -> None:
        sample = sampler.sample()
        self.peak_bytes = max(self.peak_bytes, sample.peak_bytes)
        self.history.append(sample)

        self.reporter.sample(sample)
        self.alert_engine.handle(sample)
        if self.sink is not None:
            self.sink.record(sample, self.iteration)

        self.iteration += 1

    def _wait_until(self, wake_at: float) -> bool:
        """Sleep until the monotonic clock reaches wake_at; True if cancelled meanwhile."""
        while True:
            remaining = wake_at - time.monotonic()
            if remaining <= 0:
                return False
            if self._cancel_event.wait(remaining):
                return True

    def _finalize(self, stop_reason: StopReason, exit_code: int, start_time: float) -> MonitorResult:
        self.state = SessionState.FINALIZING
        result = MonitorResult(exit_code=exit_code, stop_reason=stop_reason)

        remaining_stdout = remaining_stderr = ""
        try:
            if self.handle is not None and not self.handle.finalized:
                result.child_exit_code = self.supervisor.finalize(self.handle)
                result.stdout = self.handle.stdout.text
                result.stderr = self.handle.stderr.text
                remaining_stdout = self.handle.stdout.remaining_text
                remaining_stderr = self.handle.stderr.remaining_text
        finally:
            if self.sink is not None:
                self.sink.close()

        self.reporter.stopped(stop_reason)
        if self.handle is not None:
            self.reporter.command_output(remaining_stdout, remaining_stderr)
            self.reporter.command_exit(result.child_exit_code)
        self.reporter.peak_summary(self.peak_bytes, self.iteration)
        if self.alert_engine.dispatch_count:
            self.reporter.gc_summary(self.alert_engine.dispatch_count)
        if self.sink is not None and self.sink.rows_written:
            self.reporter.csv_saved(self.config.csv_path)

        result.iterations = self.iteration
        result.peak_bytes = self.peak_bytes
        result.gc_collections = self.alert_engine.dispatch_count
        result.duration_seconds = time.monotonic() - start_time
        result.samples = list(self.history)
        self.state = SessionState.DONE
        return result

    @contextmanager
    def _cancel_on_signals(self):
        """Route SIGINT/SIGTERM to cooperative cancellation while the session runs."""
        if threading.current_thread() is not threading.main_thread():
            # signal.signal only works in the main thread
            yield
            return

        def signal_handler(signum, frame):
            self._cancel_event.set()

        old_handlers = {}
        for sig in (signal.SIGINT, signal.SIGTERM):
            old_handlers[sig] = signal.signal(sig, signal_handler)
        try:
            yield
        finally:
            for sig, handler in old_handlers.items():
                signal.signal(sig, handler)
