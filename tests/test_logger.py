# File: tests/test_logger.py
import logging

import pytest

from listing_scout.logger import LOGGER_NAME, configure, get_logger


@pytest.fixture(autouse=True)
def restore_logger():
    lg = logging.getLogger(LOGGER_NAME)
    handlers, level = list(lg.handlers), lg.level
    yield
    lg.handlers[:] = handlers
    lg.setLevel(level)


def test_component_loggers_are_children_of_project_logger():
    assert get_logger() is logging.getLogger(LOGGER_NAME)
    assert get_logger("listing_scout") is get_logger()
    assert get_logger("listing_scout.crawler.scheduler").name == f"{LOGGER_NAME}.crawler.scheduler"
    assert get_logger("report").name == f"{LOGGER_NAME}.report"


def test_configure_without_stream_or_file_installs_null_handler():
    lg = configure(stream=False)
    assert [type(h) for h in lg.handlers] == [logging.NullHandler]
    assert lg.propagate is False


def test_child_records_reach_the_log_file(tmp_path):
    log_file = tmp_path / "scout.log"
    lg = configure(level="DEBUG", log_file=log_file, stream=False, log_format="%(name)s %(message)s")

    get_logger("listing_scout.crawler.seeds").info("Added address: %s", "59 Whitsunday Drive")
    for handler in lg.handlers:
        handler.flush()

    assert f"{LOGGER_NAME}.crawler.seeds Added address: 59 Whitsunday Drive" in log_file.read_text(encoding="utf-8")


def test_replace_handlers_false_appends(tmp_path):
    configure(stream=False)
    lg = configure(log_file=tmp_path / "extra.log", stream=False, replace_handlers=False)
    kinds = [type(h).__name__ for h in lg.handlers]
    assert kinds == ["NullHandler", "RotatingFileHandler"]
