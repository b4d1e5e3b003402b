"""
durationguard Exception Hierarchy

Domain-specific exceptions with error codes and context dictionaries:
- DurationGuardError: Base exception for all durationguard errors
- ConfigError: Feature parameter loading and validation failures
- HistoryError: Build history queries that could not be answered
- StatisticsError: Per-build test statistics that could not be fetched

Provider implementations raise HistoryError and StatisticsError; the
regression detector logs them and skips the affected build instead of
aborting the detection run.

Usage Examples:
    >>> try:
    ...     params = load_feature_parameters("durationguard.yaml")
    ... except ConfigError as e:
    ...     if e.error_code == "CONFIG_002":
    ...         logger.error(f"Broken YAML: {e}")

    >>> raise StatisticsError("Statistics unavailable").with_context({
    ...     "build_id": 1042,
    ... })
"""

import sys
from pathlib import Path
from typing import Any, Dict, Optional


class DurationGuardError(Exception):
    """
    Base exception class for all durationguard errors.

    Attributes:
        error_code (str): Unique identifier for programmatic error handling
        context (Dict[str, Any]): Additional context information for debugging

    Error Codes:
        DURATION_001: Generic durationguard error
    """

    def __init__(
        self,
        message: str,
        error_code: str = "DURATION_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Initialize the error with message, error code, and context.

        Args:
            message: Human-readable error description
            error_code: Unique identifier for programmatic error handling
            context: Additional context information for debugging
        """
        super().__init__(message)
        self.error_code = error_code
        self.context = dict(context) if context else {}

        if hasattr(sys, '_getframe'):
            frame = sys._getframe(1)
            if frame:
                self.context.setdefault('source_function', frame.f_code.co_name)

    def with_context(self, context: Dict[str, Any]) -> 'DurationGuardError':
        """
        Add additional context to the exception and return self for chaining.

        Example:
            >>> raise HistoryError("History query failed").with_context({
            ...     "pipeline_id": "Project_Tests",
            ...     "build_id": 17,
            ... })
        """
        self.context.update(context)
        return self

    def __str__(self) -> str:
        message = super().__str__()
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{message} [Error Code: {self.error_code}, Context: {context_str}]"
        return f"{message} [Error Code: {self.error_code}]"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={super().__str__()!r}, "
            f"error_code={self.error_code!r}, "
            f"context={self.context!r})"
        )


class ConfigError(DurationGuardError):
    """
    Feature parameter loading and validation errors.

    Malformed *values* never raise: the settings resolver degrades to an
    inert policy instead. This error covers parameter sources that cannot be
    read at all.

    Error Codes:
        CONFIG_001: Parameter file not found
        CONFIG_002: YAML parsing error
        CONFIG_003: Pydantic validation failure
        CONFIG_004: Unsupported parameter source type
    """

    def __init__(
        self,
        message: str,
        error_code: str = "CONFIG_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)

        if context:
            if 'config_path' in context and isinstance(context['config_path'], (str, Path)):
                self.context['config_path'] = str(context['config_path'])


class HistoryError(DurationGuardError):
    """
    Build history lookup errors.

    Error Codes:
        HISTORY_001: History query failed or build not recorded
    """

    def __init__(
        self,
        message: str,
        error_code: str = "HISTORY_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)


class StatisticsError(DurationGuardError):
    """
    Test statistics retrieval errors.

    Error Codes:
        STATS_001: Statistics for a build are unavailable
    """

    def __init__(
        self,
        message: str,
        error_code: str = "STATS_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)


def log_and_raise(
    exception: DurationGuardError,
    logger: Optional[Any] = None,
    level: str = "error"
) -> None:
    """
    Log an exception with its context and then raise it.

    Args:
        exception: The exception to log and raise
        logger: Logger instance to use (optional)
        level: Log level ("error", "warning", "critical")

    Raises:
        The provided exception after logging
    """
    if logger is not None:
        log_method = getattr(logger, level, logger.error)
        log_method(f"{exception.__class__.__name__}: {exception}")

    raise exception


__all__ = [
    'DurationGuardError',
    'ConfigError',
    'HistoryError',
    'StatisticsError',
    'log_and_raise',
]
