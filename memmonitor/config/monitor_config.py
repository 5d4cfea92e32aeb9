from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from memmonitor.util.format_utils import mb_to_bytes

DEFAULT_CSV_PATH = "memory-usage.csv"


@dataclass(frozen=True)
class MonitorConfig:
    interval_seconds: float = 1.0
    threshold_bytes: int = mb_to_bytes(20)
    max_duration_seconds: int = 0  # 0 = unlimited
    csv_logging_enabled: bool = False
    csv_path: Path = Path(DEFAULT_CSV_PATH)
    target_command: Optional[Sequence[str]] = None
    alert_script: Optional[str] = None
    terminate_timeout_seconds: float = 5.0
    drain_timeout_seconds: float = 5.0

    def __post_init__(self):
        object.__setattr__(self, "csv_path", Path(self.csv_path))
        if self.target_command is not None:
            object.__setattr__(self, "target_command", tuple(self.target_command))

        if not self.interval_seconds > 0:
            raise ValueError(f"interval must be > 0, got {self.interval_seconds}")
        if self.threshold_bytes < 0:
            raise ValueError(f"threshold must be >= 0, got {self.threshold_bytes}")
        if self.max_duration_seconds < 0:
            raise ValueError(f"duration must be >= 0, got {self.max_duration_seconds}")
        if self.target_command is not None and not self.target_command:
            raise ValueError("target command must not be empty")

    @property
    def monitors_self(self) -> bool:
        return self.target_command is None

    def __str__(self):
        return (f"MonitorConfig(\n"
                f"  interval_seconds={self.interval_seconds},\n"
                f"  threshold_bytes={self.threshold_bytes},\n"
                f"  max_duration_seconds={self.max_duration_seconds},\n"
                f"  csv_logging_enabled={self.csv_logging_enabled},\n"
                f"  csv_path={self.csv_path},\n"
                f"  target_command={self.target_command},\n"
                f"  alert_script={self.alert_script}\n"
                f")")
