"""Tests for logging setup."""

import logging

import pytest
from bget.logging_config import setup_logging


@pytest.fixture(autouse=True)
def restore_loggers():
    """Undo logger changes made by a test."""
    names = ("bget", "urllib3")
    saved = {name: (logging.getLogger(name).level, list(logging.getLogger(name).handlers)) for name in names}
    yield
    for name, (level, handlers) in saved.items():
        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.handlers = handlers
        logger.propagate = True


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_configures_bget_logger(self):
        """Test level, handler and propagation of the package logger."""
        logger = setup_logging(level="DEBUG", force=True)
        assert logger.name == "bget"
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_unknown_level_defaults_to_info(self):
        """Test that an unknown level name falls back to INFO."""
        assert setup_logging(level="chatty", force=True).level == logging.INFO

    def test_log_file(self, tmp_path):
        """Test that records are also written to a log file."""
        log_file = tmp_path / "bget.log"
        logger = setup_logging(level="INFO", log_file=str(log_file), force=True)
        logging.getLogger("bget.core.client").info("hello from bget")
        for handler in logger.handlers:
            handler.flush()
        assert "hello from bget" in log_file.read_text()

    def test_keeps_existing_handlers(self):
        """Test that handlers are not duplicated without force."""
        setup_logging(force=True)
        logger = setup_logging()
        assert len(logger.handlers) == 1

    def test_include_transport(self):
        """Test that urllib3 logs share the bget handlers."""
        logger = setup_logging(level="DEBUG", force=True, include_transport=True)
        transport = logging.getLogger("urllib3")
        assert transport.handlers == logger.handlers
        assert transport.level == logging.DEBUG
