"""
Host services the searchable select core depends on.

The core never touches a GUI toolkit directly. Timers and background
execution reach it through these ABCs, so the same state machine runs under
PyQt6 (DebounceTimer, BackgroundTaskRunner) or under the manual fakes used
in tests.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable

DebouncerFactory = Callable[[int, Callable[[], None]], "Debouncer"]

# Registers a pointer-press handler and returns the matching unsubscribe.
# The handler receives True when the press landed inside the control.
PointerSubscription = Callable[[Callable[[bool], None]], Callable[[], None]]


class Debouncer(ABC):
    """
    ABC for trailing debounce timers.

    trigger() restarts the quiet window; the handler fires once the window
    elapses with no further trigger.
    """

    @abstractmethod
    def trigger(self) -> None:
        """Restart the quiet window."""
        pass

    @abstractmethod
    def cancel(self) -> None:
        """Drop the pending firing, if any."""
        pass

    @abstractmethod
    def force(self) -> None:
        """Cancel the pending firing and run the handler now."""
        pass

    @property
    @abstractmethod
    def is_pending(self) -> bool:
        """Whether a firing is scheduled."""
        pass


class TaskRunner(ABC):
    """
    ABC for running blocking work off the event loop.

    Callbacks must be delivered on the event-loop thread, one at a time.
    """

    @abstractmethod
    def submit(
        self,
        target: Callable[[], Any],
        on_success: Callable[[Any], None],
        on_error: Callable[[Exception], None],
    ) -> None:
        """Run target in the background and deliver its outcome."""
        pass

    @abstractmethod
    def shutdown(self) -> None:
        """Stop delivering callbacks and release background resources."""
        pass
