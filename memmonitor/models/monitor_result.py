from dataclasses import dataclass, field
from typing import Dict, List, Optional

from memmonitor.consts.StopReason import StopReason
from memmonitor.models.sample import Sample


@dataclass
class MonitorResult:
    """Outcome of one monitoring session"""
    # Process exit code for the monitor itself (0 = success)
    exit_code: int
    stop_reason: StopReason

    # Sampling statistics
    iterations: int = 0
    peak_bytes: int = 0
    duration_seconds: float = 0.0
    # Corrective garbage collections run by the alert engine (self mode)
    gc_collections: int = 0

    # Child process outcome (child mode only)
    child_exit_code: Optional[int] = None
    stdout: str = ""
    stderr: str = ""

    # Most recent samples for detailed analysis
    samples: List[Sample] = field(default_factory=list)

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization"""
        return {
            'exit_code': self.exit_code,
            'stop_reason': self.stop_reason.name,
            'iterations': self.iterations,
            'peak_bytes': self.peak_bytes,
            'duration_seconds': self.duration_seconds,
            'gc_collections': self.gc_collections,
            'child_exit_code': self.child_exit_code,
            'stdout': self.stdout,
            'stderr': self.stderr,
            'samples': [s.to_dict() for s in self.samples],
        }
