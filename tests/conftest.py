"""pytest configuration and fixtures for pyqt-searchselect tests."""

import os
from urllib.parse import parse_qs, urlsplit

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from pyqt_searchselect.protocols import Debouncer, SelectConfig, TaskRunner  # noqa: E402

FRUITS = [{"id": 1, "name": "apple"}, {"id": 2, "name": "banana"}]


@pytest.fixture(scope="session")
def qapp():
    """Create QApplication instance for tests."""
    from PyQt6.QtWidgets import QApplication
    app = QApplication.instance() or QApplication([])
    yield app
    # Don't quit - may cause issues with other tests


class FakeClock:
    """Virtual time source; debouncers created from it fire on advance()."""

    def __init__(self):
        self.now = 0
        self._debouncers = []

    def debouncer(self, delay_ms, handler):
        debouncer = ClockDebouncer(self, delay_ms, handler)
        self._debouncers.append(debouncer)
        return debouncer

    def advance(self, ms):
        self.now += ms
        for debouncer in list(self._debouncers):
            if debouncer.deadline is not None and debouncer.deadline <= self.now:
                debouncer.deadline = None
                debouncer.handler()


class ClockDebouncer(Debouncer):
    def __init__(self, clock, delay_ms, handler):
        self.clock = clock
        self.delay_ms = delay_ms
        self.handler = handler
        self.deadline = None

    def trigger(self):
        self.deadline = self.clock.now + self.delay_ms

    def cancel(self):
        self.deadline = None

    def force(self):
        self.cancel()
        self.handler()

    @property
    def is_pending(self):
        return self.deadline is not None


class DeferredTaskRunner(TaskRunner):
    """Holds submitted work until the test resolves it, in any order."""

    def __init__(self, immediate=False):
        self.immediate = immediate
        self.pending = []
        self.shut_down = False

    def submit(self, target, on_success, on_error):
        job = (target, on_success, on_error)
        if self.immediate:
            self._run(job)
        else:
            self.pending.append(job)

    def resolve(self, index=0):
        self._run(self.pending.pop(index))

    def resolve_all(self):
        while self.pending:
            self.resolve(0)

    def shutdown(self):
        self.shut_down = True
        self.pending.clear()

    @staticmethod
    def _run(job):
        target, on_success, on_error = job
        try:
            result = target()
        except Exception as e:
            on_error(e)
        else:
            on_success(result)


class FakeItemSource:
    """Records requested URLs and answers from a query -> items table."""

    def __init__(self, responses=None, default=None, error=None):
        self.responses = responses or {}
        self.default = list(FRUITS) if default is None else default
        self.error = error
        self.urls = []

    @property
    def queries(self):
        return [parse_qs(urlsplit(url).query, keep_blank_values=True)["q"][0] for url in self.urls]

    def fetch(self, url):
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        query = parse_qs(urlsplit(url).query, keep_blank_values=True)["q"][0]
        return self.responses.get(query, self.default)


class RecordingReporter:
    def __init__(self):
        self.errors = []

    def report(self, error):
        self.errors.append(error)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def runner():
    return DeferredTaskRunner(immediate=True)


@pytest.fixture
def deferred_runner():
    return DeferredTaskRunner()


@pytest.fixture
def source():
    return FakeItemSource()


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest.fixture
def fruit_config():
    return SelectConfig(
        endpoint="http://localhost:3000/items",
        key_property="id",
        display_template="name (id)",
    )


@pytest.fixture
def make_select(clock, runner, source, reporter, fruit_config):
    """Factory for a SearchableSelect wired to the fake clock, runner and source."""
    from pyqt_searchselect.select import SearchableSelect

    def factory(config=None, task_runner=None, item_source=None):
        return SearchableSelect(
            config or fruit_config,
            fetch_items=(item_source or source).fetch,
            debouncer_factory=clock.debouncer,
            task_runner=task_runner or runner,
            reporter=reporter,
        )

    return factory
