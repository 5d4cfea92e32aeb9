from enum import Enum


class AlertLevel(Enum):
    NORMAL = "normal"
    THRESHOLD_EXCEEDED = "threshold_exceeded"
