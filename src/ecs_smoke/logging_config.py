"""Logging configuration for the ECS smoke tests.

Every module logs under the ``ecs_smoke`` package logger. The CLI picks one
of the configurations below before running a command; pytest runs leave the
package logger alone and rely on pytest's own log capture.
"""

import logging
import logging.handlers
from enum import Enum
from pathlib import Path


PACKAGE_LOGGER = 'ecs_smoke'
CONSOLE_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class LoggerType(Enum):
    """Enum for the package logger configurations."""
    DEFAULT = "default"  # console plus rotating log file
    CONSOLE = "console"
    QUIET = "quiet"


def _reset_package_logger() -> logging.Logger:
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
    return logger


def setup_logger(log_file: Path, console_level: int = logging.INFO) -> logging.Logger:
    """Log to the console and to a rotating file.

    Terraform runs are long; the file keeps DEBUG detail (every command
    and retry) while the console shows ``console_level`` and above.

    Args:
        log_file: Path to log file, parent directories are created
        console_level: Level for the console handler

    Returns:
        The configured package logger
    """
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logger = _reset_package_logger()
    logger.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter('%(message)s'))

    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=10*1024*1024,  # 10MB
        backupCount=5
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))

    logger.addHandler(console_handler)
    logger.addHandler(file_handler)

    return logger


def create_console_logger(level: int = logging.INFO) -> logging.Logger:
    """Log progress messages at ``level`` and above to the console."""
    logger = _reset_package_logger()
    logger.setLevel(level)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))

    logger.addHandler(console_handler)
    return logger


def create_quiet_logger() -> logging.Logger:
    """Discard package log records; only command output reaches the terminal."""
    logger = _reset_package_logger()
    logger.addHandler(logging.NullHandler())
    logger.propagate = False
    return logger


def logger_factory(
    logger_type: LoggerType = LoggerType.DEFAULT,
    log_file: Path | None = None,
    level: int = logging.INFO,
) -> logging.Logger:
    """Configure the package logger.

    Args:
        logger_type: Configuration to apply
        log_file: Path to log file (required for DEFAULT)
        level: Console level for DEFAULT and CONSOLE

    Returns:
        The configured package logger
    """
    if logger_type == LoggerType.QUIET:
        return create_quiet_logger()
    elif logger_type == LoggerType.CONSOLE:
        return create_console_logger(level)
    elif logger_type == LoggerType.DEFAULT:
        if log_file is None:
            raise ValueError("log_file is required for DEFAULT logger")
        return setup_logger(log_file, console_level=level)
    else:
        raise ValueError(f"Unknown logger type: {logger_type}")
