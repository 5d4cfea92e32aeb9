"""Configuration module for monitoring sessions."""

from .config_loader import ConfigLoader
from .monitor_config import MonitorConfig

__all__ = ["ConfigLoader", "MonitorConfig"]
