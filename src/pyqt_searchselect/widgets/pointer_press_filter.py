"""Application-wide pointer press listener for outside-click dismissal."""

from typing import Callable
from PyQt6 import sip
from PyQt6.QtCore import QEvent, QObject
from PyQt6.QtWidgets import QApplication, QWidget


class PointerPressFilter(QObject):
    """
    Event filter that reports every mouse press in the application and
    whether it landed inside `target`. Never consumes the event.

    A press is inside when the widget that received it is `target` or one
    of its descendants, so a separate window stacked over the control
    still counts as outside.
    """

    def __init__(self, target: QWidget, handler: Callable[[bool], None], parent=None):
        super().__init__(parent)
        self._target = target
        self._handler = handler

    def eventFilter(self, obj, event):
        if event.type() == QEvent.Type.MouseButtonPress and isinstance(obj, QWidget):
            inside = obj is self._target or self._target.isAncestorOf(obj)
            self._handler(inside)
        return False


def subscribe_pointer_presses(target: QWidget) -> Callable[[Callable[[bool], None]], Callable[[], None]]:
    """
    Build a PointerSubscription for target.

    The returned callable installs a PointerPressFilter on the running
    QApplication and returns the function that removes it again.
    """
    def subscribe(handler: Callable[[bool], None]) -> Callable[[], None]:
        app = QApplication.instance()
        if app is None:
            raise RuntimeError("A QApplication must exist before mounting a searchable select")

        # Parented to target so Qt drops the filter if target is destroyed first
        press_filter = PointerPressFilter(target, handler, parent=target)
        app.installEventFilter(press_filter)

        def unsubscribe() -> None:
            if sip.isdeleted(press_filter):
                return
            app.removeEventFilter(press_filter)
            press_filter.deleteLater()

        return unsubscribe

    return subscribe
