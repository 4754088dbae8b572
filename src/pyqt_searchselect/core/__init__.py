"""
Core PyQt6 utilities.

Qt implementations of the host services the searchable select core needs:
a trailing debounce timer and a background task runner.
"""

from .debounce_timer import DebounceTimer
from .background_task import BackgroundTask, BackgroundTaskRunner

__all__ = [
    "DebounceTimer",
    "BackgroundTask",
    "BackgroundTaskRunner",
]
