import logging

import pytest

import peer.session
from utils import helpers
from utils.helpers import configure_logging, format_address, get_logger


@pytest.fixture
def restore_logging():
    original = helpers._handler
    level = original.level
    yield
    current = helpers._handler
    if current is not original:
        for logger in helpers._loggers:
            if current in logger.handlers:
                logger.removeHandler(current)
                logger.addHandler(original)
        current.close()
        helpers._handler = original
    original.setLevel(level)


def test_get_logger_registers_each_logger_once(restore_logging):
    first = get_logger("tests.helpers.once")
    second = get_logger("tests.helpers.once")
    assert first is second
    assert helpers._loggers.count(first) == 1
    assert first.handlers == [helpers._handler]


def test_configure_logging_applies_level(restore_logging):
    handler = configure_logging("debug")
    assert handler is helpers._handler
    assert handler.level == logging.DEBUG
    configure_logging(logging.ERROR)
    assert helpers._handler.level == logging.ERROR


def test_log_file_moves_existing_loggers_off_the_terminal(restore_logging, tmp_path):
    original = helpers._handler
    logger = get_logger("tests.helpers.file")
    path = tmp_path / "chat.log"

    handler = configure_logging("INFO", str(path))

    assert isinstance(handler, logging.FileHandler)
    session_logger = logging.getLogger(peer.session.__name__)
    for lg in (logger, session_logger):
        assert handler in lg.handlers
        assert original not in lg.handlers

    logger.info("written to file")
    logger.debug("below the configured level")
    handler.flush()
    content = path.read_text(encoding="utf-8")
    assert "tests.helpers.file - INFO - written to file" in content
    assert "below the configured level" not in content


def test_format_address():
    assert format_address(None) == "unknown"
    assert format_address(("127.0.0.1", 5000)) == "127.0.0.1:5000"
    assert format_address(("::1", 5000, 0, 0)) == "::1:5000"
    assert format_address("somewhere") == "somewhere"
