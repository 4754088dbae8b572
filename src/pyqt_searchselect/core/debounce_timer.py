"""Reusable trailing debounce timer."""

from typing import Callable, Optional
from PyQt6.QtCore import QObject, QTimer

from pyqt_searchselect.protocols.host_protocols import Debouncer


class DebounceTimer(Debouncer):
    """
    Reusable trailing debounce timer backed by a single-shot QTimer.

    Restarts timer on each call. Handler fires only after delay_ms of inactivity.

    Usage:
        self._debounce = DebounceTimer(delay_ms=300, handler=self._do_fetch)

        def on_text_changed(self):
            self._debounce.trigger()  # Restarts timer
    """

    def __init__(self, delay_ms: int, handler: Callable[[], None], parent: Optional[QObject] = None):
        self._delay_ms = delay_ms
        self._handler = handler
        self._timer = QTimer(parent)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self._handler)

    @property
    def delay_ms(self) -> int:
        return self._delay_ms

    @property
    def is_pending(self) -> bool:
        return self._timer.isActive()

    def trigger(self):
        """Trigger debounce: restarts timer."""
        self._timer.start(self._delay_ms)

    def cancel(self):
        """Cancel pending trigger."""
        self._timer.stop()

    def force(self):
        """Cancel timer and fire handler immediately."""
        self.cancel()
        self._handler()
