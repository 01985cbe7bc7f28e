"""Tests for logging configuration."""

import logging
import logging.handlers
from pathlib import Path

import pytest

from ecs_smoke.logging_config import (
    LoggerType,
    create_quiet_logger,
    logger_factory,
    setup_logger,
)


class TestSetupLogger:
    """Test suite for setup_logger function."""

    def test_setup_logger__creates_log_file_at_specified_path(self, tmp_path):
        log_file = tmp_path / 'logs' / 'ecs_smoke.log'

        logger = setup_logger(log_file)

        assert logger.name == 'ecs_smoke'
        assert logger.level == logging.DEBUG
        assert log_file.parent.exists()

        file_handlers = [h for h in logger.handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
        assert len(file_handlers) == 1
        assert Path(file_handlers[0].baseFilename) == log_file

    def test_setup_logger__clears_existing_handlers(self, tmp_path):
        log_file = tmp_path / 'ecs_smoke.log'

        setup_logger(log_file)
        logger = setup_logger(log_file)

        # One console handler and one file handler, not duplicates
        assert len(logger.handlers) == 2

    def test_setup_logger__console_level_does_not_limit_file(self, tmp_path):
        log_file = tmp_path / 'ecs_smoke.log'

        logger = setup_logger(log_file, console_level=logging.WARNING)
        logging.getLogger('ecs_smoke.terraform').debug("terraform init started")
        for handler in logger.handlers:
            handler.flush()

        console_handler = next(h for h in logger.handlers if not isinstance(h, logging.FileHandler))
        assert console_handler.level == logging.WARNING
        assert "terraform init started" in log_file.read_text()


class TestLoggerFactory:
    """Test suite for logger_factory."""

    def test_logger_factory__quiet_logger_discards_package_records(self):
        logger = logger_factory(LoggerType.QUIET)

        assert logger is create_quiet_logger()
        assert logger.name == 'ecs_smoke'
        assert logger.propagate is False
        assert all(isinstance(h, logging.NullHandler) for h in logger.handlers)

    def test_logger_factory__console_after_quiet_propagates_again(self):
        logger_factory(LoggerType.QUIET)

        logger = logger_factory(LoggerType.CONSOLE)

        assert logger.propagate is True
        assert not any(isinstance(h, logging.NullHandler) for h in logger.handlers)

    def test_logger_factory__console_logger_uses_requested_level(self):
        logger = logger_factory(LoggerType.CONSOLE, level=logging.DEBUG)

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert logger.handlers[0].level == logging.DEBUG

    def test_logger_factory__default_requires_log_file(self):
        with pytest.raises(ValueError, match="log_file is required"):
            logger_factory(LoggerType.DEFAULT)

    def test_logger_factory__default_writes_to_log_file(self, tmp_path):
        log_file = tmp_path / 'ecs_smoke.log'

        logger = logger_factory(LoggerType.DEFAULT, log_file=log_file)
        logger.debug("terraform apply started")
        for handler in logger.handlers:
            handler.flush()

        assert "terraform apply started" in log_file.read_text()
