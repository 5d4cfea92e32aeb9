import io
import logging

from memmonitor.util.log_config import set_level, setup_logger


def test_console_format_and_level():
    stream = io.StringIO()
    logger = setup_logger("tests.memmonitor.console", stream=stream)

    logger.debug("hidden")
    logger.warning("Memory usage exceeds threshold: 25 MB")

    assert stream.getvalue() == "[WARNING] Memory usage exceeds threshold: 25 MB\n"
    assert logger.propagate is False


def test_repeated_setup_does_not_duplicate_output():
    stream = io.StringIO()
    setup_logger("tests.memmonitor.repeat", stream=stream)
    logger = setup_logger("tests.memmonitor.repeat", stream=stream)

    logger.info("once")

    assert stream.getvalue() == "[INFO] once\n"


def test_log_file_gets_debug_records(tmp_path):
    log_file = tmp_path / "logs" / "monitor.log"
    logger = setup_logger("tests.memmonitor.file", log_file=log_file, stream=io.StringIO())

    logger.debug("Started process with PID: 42")
    for handler in logger.handlers:
        handler.flush()

    text = log_file.read_text(encoding="utf-8")
    assert "[DEBUG] tests.memmonitor.file - Started process with PID: 42" in text


def test_set_level_applies_to_existing_loggers():
    stream = io.StringIO()
    logger = setup_logger("tests.memmonitor.verbose", stream=stream)
    try:
        set_level(logging.DEBUG)
        logger.debug("now visible")
    finally:
        set_level(logging.INFO)

    assert stream.getvalue() == "[DEBUG] now visible\n"
