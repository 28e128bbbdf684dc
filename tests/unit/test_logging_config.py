"""Tests for logging setup."""

import logging

import pytest

from backend.logging_config import setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_console_and_file_handlers(tmp_path, restore_root_logger) -> None:
    log_file = tmp_path / "logs" / "app.log"

    setup_logging("DEBUG", str(log_file))
    logging.getLogger("backend.test").info("hello from the test")

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING
    for handler in logging.getLogger().handlers:
        handler.flush()
    assert "hello from the test" in log_file.read_text()


def test_unknown_level_falls_back_to_info(restore_root_logger) -> None:
    setup_logging("chatty")
    assert logging.getLogger().level == logging.INFO
