"""Error types raised by the monitor components."""


class MonitorError(Exception):
    """Base class for monitor failures."""


class SpawnError(MonitorError):
    """The child command could not be started."""

    def __init__(self, command, reason):
        self.command = list(command)
        self.reason = reason
        super().__init__(f"Failed to start command {' '.join(self.command)}: {reason}")


class SampleError(MonitorError):
    """Memory usage could not be queried for the observed process."""


class SinkError(MonitorError):
    """The metrics CSV could not be opened or written."""


class HandleFinalizedError(MonitorError):
    """A process handle was used after finalization."""
