"""Error reporter protocol for surfacing control failures."""

import logging
from typing import Optional, Protocol

from pyqt_searchselect.exceptions import SearchSelectError

ERRORS_LOGGER_NAME = "pyqt_searchselect.errors"


class ErrorReporter(Protocol):
    """Protocol for the observability sink that receives control failures."""

    def report(self, error: SearchSelectError) -> None:
        """Record a failure. Must not raise."""
        ...


class LoggingErrorReporter:
    """Default reporter: writes failures to the errors logger."""

    def __init__(self, logger_name: str = ERRORS_LOGGER_NAME):
        self._logger = logging.getLogger(logger_name)

    def report(self, error: SearchSelectError) -> None:
        self._logger.error(f"{type(error).__name__}: {error}")


_error_reporter: Optional[ErrorReporter] = None


def register_error_reporter(reporter: Optional[ErrorReporter]) -> None:
    """Register a global error reporter. None restores the logging default."""
    global _error_reporter
    _error_reporter = reporter


def get_error_reporter() -> ErrorReporter:
    """Get the registered error reporter, or the logging default."""
    if _error_reporter is None:
        return LoggingErrorReporter()
    return _error_reporter
