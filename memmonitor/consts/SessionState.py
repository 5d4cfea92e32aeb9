from enum import Enum


class SessionState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    FINALIZING = "finalizing"
    DONE = "done"
