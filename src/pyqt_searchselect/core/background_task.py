"""Background tasks for blocking item fetches, with cancellation and cleanup."""

import logging
from typing import Callable, Any, Dict, Tuple
from PyQt6.QtCore import QObject, QThread, pyqtSignal, pyqtSlot

from pyqt_searchselect.protocols.host_protocols import TaskRunner

logger = logging.getLogger(__name__)

# --- Module-level constants ---
CLEANUP_WAIT_MS = 200     # Wait time per task during widget close cleanup


class BackgroundTask(QThread):
    """
    Runs a blocking callable on a worker thread.

    Usage:
        task = BackgroundTask(target=source.fetch, args=(url,))
        task.result_ready.connect(on_success)
        task.error_occurred.connect(on_error)  # Receives Exception, not str
        task.start()

        # Later:
        task.cancel()  # Signals won't emit after this
    """

    result_ready = pyqtSignal(object)
    error_occurred = pyqtSignal(Exception)  # Full exception, caller decides

    def __init__(
        self,
        target: Callable[..., Any],
        args: Tuple = (),
        kwargs: dict = None,
        parent=None
    ):
        super().__init__(parent)
        self._target = target
        self._args = args
        self._kwargs = kwargs or {}
        self.cancelled = False

    def run(self):
        """Execute target in background, respecting cancellation."""
        try:
            result = self._target(*self._args, **self._kwargs)
            if not self.cancelled:
                self.result_ready.emit(result)
        except Exception as e:
            if not self.cancelled:
                self.error_occurred.emit(e)

    def cancel(self):
        """Cancel task: signals won't emit after this."""
        self.cancelled = True


class _CallbackRelay(QObject):
    """
    Receives a task's signals on the thread that created it.

    Slots of a QObject run in that object's thread, so connecting the
    worker's signals here turns them into queued calls on the event loop.
    """

    def __init__(self, runner: "BackgroundTaskRunner", task: BackgroundTask,
                 on_success: Callable[[Any], None], on_error: Callable[[Exception], None]):
        super().__init__()
        self._runner = runner
        self._task = task
        self._on_success = on_success
        self._on_error = on_error

    @pyqtSlot(object)
    def deliver_result(self, result):
        if not self._runner.is_shut_down:
            self._on_success(result)

    @pyqtSlot(Exception)
    def deliver_error(self, error):
        if not self._runner.is_shut_down:
            self._on_error(error)

    @pyqtSlot()
    def release(self):
        self._runner._forget(self._task)


class BackgroundTaskRunner(TaskRunner):
    """
    TaskRunner that starts one BackgroundTask per submission.

    Earlier tasks are left running when a new one is submitted; the caller
    decides which results still matter. Outcomes arrive through queued
    signals, so callbacks run on the thread that called submit().

    Usage in widget:
        self._runner = BackgroundTaskRunner()
        self._runner.submit(
            target=lambda: source.fetch(url),
            on_success=self._on_items,
            on_error=self._on_error,
        )

        def closeEvent(self, event):
            self._runner.shutdown()
            super().closeEvent(event)
    """

    def __init__(self):
        self._tasks: Dict[BackgroundTask, _CallbackRelay] = {}
        self._shut_down = False

    @property
    def active_count(self) -> int:
        return len(self._tasks)

    @property
    def is_shut_down(self) -> bool:
        return self._shut_down

    def submit(
        self,
        target: Callable[[], Any],
        on_success: Callable[[Any], None],
        on_error: Callable[[Exception], None],
    ) -> None:
        if self._shut_down:
            logger.warning("BackgroundTaskRunner.submit called after shutdown; ignoring")
            return

        task = BackgroundTask(target=target)
        relay = _CallbackRelay(self, task, on_success, on_error)
        task.result_ready.connect(relay.deliver_result)
        task.error_occurred.connect(relay.deliver_error)
        task.finished.connect(relay.release)

        self._tasks[task] = relay
        task.start()

    def shutdown(self) -> None:
        """Cancel and wait for running tasks. Call from closeEvent."""
        self._shut_down = True
        for task in list(self._tasks):
            task.cancel()
            if task.isRunning():
                task.wait(CLEANUP_WAIT_MS)
        # Threads still blocked in I/O stay referenced until `finished`
        self._tasks = {task: relay for task, relay in self._tasks.items() if task.isRunning()}

    def _forget(self, task: BackgroundTask) -> None:
        relay = self._tasks.pop(task, None)
        task.wait()  # `finished` is emitted just before the thread exits
        task.deleteLater()
        if relay is not None:
            relay.deleteLater()
