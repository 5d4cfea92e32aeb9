"""
Logging setup for the memory monitor.

Every monitor component logs through a logger built here: plain
`[LEVEL] message` lines on stdout, optionally mirrored with timestamps into a
log file. Loggers are kept off the root logger so embedding applications
do not print monitor output twice.
"""
import logging
import sys
from pathlib import Path
from typing import Dict, Optional, TextIO

CONSOLE_FORMAT = '[%(levelname)s] %(message)s'
FILE_FORMAT = '%(asctime)s [%(levelname)s] %(name)s - %(message)s'
FILE_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

_loggers: Dict[str, logging.Logger] = {}
_console_level = logging.INFO


def setup_logger(
    name: str,
    level: Optional[int] = None,
    log_file: Optional[Path] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Configure and return a monitor logger.

    Calling it again for the same name replaces the handlers, so a later call
    can attach a log file to a logger created at import time.

    Args:
        name: Logger name (typically __name__)
        level: Console level (default: the level last passed to set_level)
        log_file: Optional file receiving a detailed copy of every record
        stream: Console stream (default: sys.stdout at call time)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.setLevel(_console_level if level is None else level)
    console_handler.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=FILE_DATE_FORMAT))
        logger.addHandler(file_handler)

    logger.propagate = False
    _loggers[name] = logger
    return logger


def set_level(level: int) -> None:
    """Change the console level of every monitor logger, present and future."""
    global _console_level
    _console_level = level
    for logger in _loggers.values():
        for handler in logger.handlers:
            if not isinstance(handler, logging.FileHandler):
                handler.setLevel(level)
