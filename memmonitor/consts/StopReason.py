from enum import Enum


class StopReason(Enum):
    CHILD_EXITED = "child process exited"
    DURATION_REACHED = "maximum duration reached"
    CANCELLED = "stopped by user"
    SPAWN_FAILED = "command could not be started"
    SAMPLE_FAILED = "memory query failed"
    ERROR = "monitoring failed"
