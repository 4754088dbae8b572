"""Tests for the PyQt6 timer and background task helpers."""

import threading

import pytest
from PyQt6.QtTest import QTest


def _wait_until(condition, timeout_ms=2000):
    """Process events until condition holds or the timeout elapses."""
    for _ in range(timeout_ms // 10):
        if condition():
            return
        QTest.qWait(10)


def test_debounce_timer_fires_once_after_quiet_window(qapp):
    """Repeated triggers collapse into a single trailing call."""
    from pyqt_searchselect.core import DebounceTimer

    called = []
    timer = DebounceTimer(delay_ms=100, handler=lambda: called.append(1))
    for _ in range(3):
        timer.trigger()
        QTest.qWait(10)
    assert called == []
    assert timer.is_pending

    QTest.qWait(300)
    assert called == [1]
    assert not timer.is_pending


def test_debounce_timer_cancel_and_force(qapp):
    from pyqt_searchselect.core import DebounceTimer

    called = []
    timer = DebounceTimer(delay_ms=30, handler=lambda: called.append(1))
    timer.trigger()
    timer.cancel()
    QTest.qWait(80)
    assert called == []

    timer.trigger()
    timer.force()
    assert called == [1]
    QTest.qWait(80)
    assert called == [1]


def test_background_runner_delivers_on_main_thread(qapp):
    """Results computed on a worker thread arrive on the calling thread."""
    from pyqt_searchselect.core import BackgroundTaskRunner

    main_thread = threading.get_ident()
    worker_threads = []
    delivered = []

    def work():
        worker_threads.append(threading.get_ident())
        return [{"id": 1}]

    runner = BackgroundTaskRunner()
    runner.submit(
        target=work,
        on_success=lambda result: delivered.append((threading.get_ident(), result)),
        on_error=lambda e: pytest.fail(f"unexpected error {e}"),
    )
    _wait_until(lambda: bool(delivered))

    assert worker_threads and worker_threads[0] != main_thread
    assert delivered == [(main_thread, [{"id": 1}])]
    runner.shutdown()


def test_background_runner_reports_errors(qapp):
    from pyqt_searchselect.core import BackgroundTaskRunner

    errors = []

    def work():
        raise ValueError("bad body")

    runner = BackgroundTaskRunner()
    runner.submit(target=work, on_success=lambda result: None, on_error=errors.append)
    _wait_until(lambda: bool(errors))

    assert isinstance(errors[0], ValueError)
    runner.shutdown()


def test_background_runner_ignores_submissions_after_shutdown(qapp):
    from pyqt_searchselect.core import BackgroundTaskRunner

    ran = []
    runner = BackgroundTaskRunner()
    runner.shutdown()
    runner.submit(target=lambda: ran.append(1), on_success=lambda r: None, on_error=lambda e: None)
    QTest.qWait(50)

    assert ran == []
    assert runner.active_count == 0
