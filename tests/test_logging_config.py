"""Tests for logging setup."""

import json
import logging

import pytest

from plugdex.config import Settings
from plugdex.logging_config import JsonFormatter, setup_logging


@pytest.fixture(autouse=True)
def reset_plugdex_logger():
    """Restore the plugdex logger after each test."""
    logger = logging.getLogger("plugdex")
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
    logger.propagate = propagate


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_console_only(self):
        config = Settings(log_console_enabled=True, log_file_enabled=False)

        logger = setup_logging(config=config)

        assert logger.name == "plugdex"
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.StreamHandler)

    def test_level_override(self):
        logger = setup_logging(level="debug", config=Settings())

        assert logger.level == logging.DEBUG

    def test_file_logging(self, tmp_path):
        config = Settings(
            log_console_enabled=False,
            log_file_enabled=True,
            log_dir=str(tmp_path / "logs"),
        )

        logger = setup_logging(context="test", config=config)
        logging.getLogger("plugdex.plugins.loader").info("hello file")
        for handler in logger.handlers:
            handler.flush()

        assert "hello file" in (tmp_path / "logs" / "test.log").read_text()

    def test_repeated_setup_replaces_handlers(self):
        config = Settings(log_console_enabled=True, log_file_enabled=False)

        setup_logging(config=config)
        logger = setup_logging(config=config)

        assert len(logger.handlers) == 1

    def test_no_handlers_when_disabled(self):
        config = Settings(log_console_enabled=False, log_file_enabled=False)

        assert setup_logging(config=config).handlers == []


class TestJsonFormatter:
    """Tests for JSON log formatting."""

    def test_format(self):
        record = logging.LogRecord(
            "plugdex.test", logging.WARNING, __file__, 1, "bad %s", ("plugin",), None
        )

        payload = json.loads(JsonFormatter().format(record))

        assert payload["level"] == "WARNING"
        assert payload["logger"] == "plugdex.test"
        assert payload["message"] == "bad plugin"
