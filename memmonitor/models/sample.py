from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class Sample:
    """Single point-in-time memory usage reading"""
    timestamp: str  # local time, "YYYY-mm-dd HH:MM:SS"
    current_bytes: int  # Resident Set Size (physical memory)
    peak_bytes: int  # high-water mark, never below current_bytes
    limit_bytes: int
    percentage: float

    def to_row(self, iteration: int) -> list:
        """CSV row in metrics-log column order"""
        return [
            self.timestamp,
            iteration,
            self.current_bytes,
            self.peak_bytes,
            self.limit_bytes,
            self.percentage,
        ]

    def to_dict(self) -> Dict:
        return {
            'timestamp': self.timestamp,
            'current_bytes': self.current_bytes,
            'peak_bytes': self.peak_bytes,
            'limit_bytes': self.limit_bytes,
            'percentage': self.percentage,
        }
