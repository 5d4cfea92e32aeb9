"""Memory usage monitor for the current process or a supervised command."""

__version__ = "0.1.0"
