"""Models for monitor data structures."""

from .monitor_result import MonitorResult
from .sample import Sample

__all__ = ["MonitorResult", "Sample"]
