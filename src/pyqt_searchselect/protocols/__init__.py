"""
Host protocols, error reporting and configuration.

ABC contracts for the timer and background-execution services a host
provides, the pluggable error reporter, and mount-time configuration.
"""

from .host_protocols import Debouncer, DebouncerFactory, PointerSubscription, TaskRunner
from .error_reporter import (
    ErrorReporter,
    LoggingErrorReporter,
    register_error_reporter,
    get_error_reporter,
)
from .select_config import (
    SelectConfig,
    SearchSelectSettings,
    parse_initial_selection,
    set_search_select_settings,
    get_search_select_settings,
)

__all__ = [
    "Debouncer",
    "DebouncerFactory",
    "PointerSubscription",
    "TaskRunner",
    "ErrorReporter",
    "LoggingErrorReporter",
    "register_error_reporter",
    "get_error_reporter",
    "SelectConfig",
    "SearchSelectSettings",
    "parse_initial_selection",
    "set_search_select_settings",
    "get_search_select_settings",
]
