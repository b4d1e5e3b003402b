"""
durationguard - Detects test execution-time regressions across CI builds.

This module owns the Loguru logger configuration for the package. Every other
module logs through ``from durationguard import logger`` so that hosts and
tests can reconfigure sinks in one place.
"""

__version__ = "0.1.0"

import os
import sys
from pathlib import Path
from typing import Dict, Optional, TextIO, Union

from loguru import logger


LOG_DIR_ENV_VAR = "DURATIONGUARD_LOG_DIR"


# --- Logger Configuration Classes and Types ---

class LoggingConfigError(Exception):
    """Exception raised when logging configuration fails validation or setup."""
    pass


class LoggerState:
    """Remembers whether logging was set up, so import-time setup runs once."""

    def __init__(self):
        self._initialized = False

    def is_initialized(self) -> bool:
        return self._initialized

    def mark_initialized(self):
        self._initialized = True

    def reset(self):
        self._initialized = False


_logger_state = LoggerState()


# --- Configuration Validation Functions ---

def validate_log_level(level: str) -> str:
    """
    Validate a log level name.

    Args:
        level: Log level string to validate

    Returns:
        Upper-cased log level

    Raises:
        LoggingConfigError: If log level is invalid
    """
    valid_levels = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}
    level_upper = str(level).upper()

    if level_upper not in valid_levels:
        raise LoggingConfigError(
            f"Invalid log level '{level}'. Must be one of: {', '.join(sorted(valid_levels))}"
        )

    return level_upper


# --- Core Logging Configuration Functions ---

def configure_console_logging(
    level: str = "INFO",
    format_template: Optional[str] = None,
    colorize: bool = True,
    destination: TextIO = sys.stderr
) -> int:
    """
    Add a console sink.

    Args:
        level: Log level for console output
        format_template: Custom format template (uses default if None)
        colorize: Enable colored console output
        destination: Console destination (default: sys.stderr)

    Returns:
        Sink ID for tracking and cleanup

    Raises:
        LoggingConfigError: If configuration fails
    """
    try:
        validated_level = validate_log_level(level)

        if format_template is None:
            format_template = (
                "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{module}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
            )

        sink_id = logger.add(
            destination,
            level=validated_level,
            format=format_template,
            colorize=colorize
        )

        return sink_id

    except Exception as e:
        raise LoggingConfigError(f"Failed to configure console logging: {e}") from e


def configure_file_logging(
    log_file_path: Union[str, Path],
    level: str = "DEBUG",
    rotation: str = "10 MB",
    retention: str = "7 days",
    compression: str = "zip",
    format_template: Optional[str] = None,
    encoding: str = "utf-8",
) -> int:
    """
    Add a rotating file sink.

    Args:
        log_file_path: Path to log file; parent directories are created
        level: Log level for file output
        rotation: Log rotation setting
        retention: Log retention setting
        compression: Compression method for rotated logs
        format_template: Custom format template (uses default if None)
        encoding: File encoding

    Returns:
        Sink ID for tracking and cleanup

    Raises:
        LoggingConfigError: If configuration fails
    """
    try:
        validated_level = validate_log_level(level)
        path = Path(log_file_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        if format_template is None:
            format_template = (
                "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
                "{level: <8} | "
                "{name}:{function}:{line} - {message}"
            )

        sink_id = logger.add(
            str(path),
            rotation=rotation,
            retention=retention,
            compression=compression,
            level=validated_level,
            format=format_template,
            encoding=encoding
        )

        return sink_id

    except Exception as e:
        raise LoggingConfigError(f"Failed to configure file logging: {e}") from e


def configure_test_logging(
    console_level: str = "DEBUG",
    console_destination: Optional[TextIO] = None,
) -> Dict[str, int]:
    """
    Configure logging for test runs: plain console output, no file sink.

    Returns:
        Dictionary mapping sink types to sink IDs
    """
    reset_logging()

    sink_ids = {
        'console': configure_console_logging(
            level=console_level,
            destination=console_destination if console_destination is not None else sys.stderr,
            colorize=False,
        )
    }

    _logger_state.mark_initialized()
    return sink_ids


def reset_logging():
    """
    Remove all Loguru handlers and forget tracked sinks.

    Raises:
        LoggingConfigError: If reset fails
    """
    try:
        logger.remove()
        _logger_state.reset()
    except Exception as e:
        raise LoggingConfigError(f"Failed to reset logging configuration: {e}") from e


def initialize_logging(
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    log_dir: Optional[Union[str, Path]] = None,
) -> Dict[str, int]:
    """
    Initialize logging for use inside a CI host.

    A console sink is always installed. A daily file sink is added when
    ``log_dir`` is given or the ``DURATIONGUARD_LOG_DIR`` environment variable
    is set.

    Returns:
        Dictionary mapping sink types to sink IDs

    Raises:
        LoggingConfigError: If initialization fails
    """
    try:
        logger.remove()
        _logger_state.reset()

        sink_ids = {'console': configure_console_logging(level=console_level)}

        if log_dir is None:
            log_dir = os.environ.get(LOG_DIR_ENV_VAR)

        if log_dir:
            sink_ids['file'] = configure_file_logging(
                log_file_path=Path(log_dir) / "durationguard_{time:YYYYMMDD}.log",
                level=file_level,
            )

        _logger_state.mark_initialized()
        logger.debug("durationguard logging initialized")
        return sink_ids

    except LoggingConfigError:
        raise
    except Exception as e:
        raise LoggingConfigError(f"Failed to initialize logging: {e}") from e


def _is_pytest_running() -> bool:
    return "pytest" in sys.modules or "PYTEST_CURRENT_TEST" in os.environ


def _auto_initialize_logging():
    if not _logger_state.is_initialized() and not _is_pytest_running():
        try:
            initialize_logging()
        except LoggingConfigError as e:
            # Fall back to Loguru's plain stderr sink
            logger.add(sys.stderr, level="INFO")
            logger.warning(f"Failed to initialize logging: {e}. Using basic stderr logging.")
            _logger_state.mark_initialized()


_auto_initialize_logging()
