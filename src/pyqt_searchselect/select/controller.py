"""
Searchable select state machine.

SearchableSelect owns the control state and is its only mutator. Host
adapters translate their input events into the operations below and
re-render from current_state() whenever a state listener fires:

    open() / toggle()        header click
    set_query(text)          typing in the search box
    move_highlight(+1 | -1)  arrow keys
    highlight(index)         pointer hovering a row
    confirm()                Enter / Space
    select(item)             pointer click on a row
    dismiss()                Escape, or a press outside the control

The controller holds no reference to any rendering toolkit. Timers and
background work come in through Debouncer and TaskRunner implementations.
"""

import logging
from typing import Any, Callable, List, Mapping, Optional

from pyqt_searchselect.exceptions import ConfigurationError, SearchSelectError, SelectionParseError
from pyqt_searchselect.protocols.error_reporter import ErrorReporter, get_error_reporter
from pyqt_searchselect.protocols.host_protocols import (
    DebouncerFactory,
    PointerSubscription,
    TaskRunner,
)
from pyqt_searchselect.protocols.select_config import (
    SearchSelectSettings,
    SelectConfig,
    get_search_select_settings,
    parse_initial_selection,
)
from pyqt_searchselect.select.fetch_pipeline import FetchPipeline
from pyqt_searchselect.select.state import NO_HIGHLIGHT, Item, SelectPhase, SelectSnapshot, SelectState
from pyqt_searchselect.select.template_renderer import render

logger = logging.getLogger(__name__)

SelectionListener = Callable[[Item], None]
StateListener = Callable[[SelectSnapshot], None]


class SearchableSelect:
    """
    Core of a searchable select control.

    An invalid configuration is reported once and leaves the control inert:
    `disabled` is True and every operation is a no-op.

    Usage:
        select = SearchableSelect(
            config,
            fetch_items=HttpItemSource(config.key_property).fetch,
            debouncer_factory=DebounceTimer,
            task_runner=BackgroundTaskRunner(),
        )
        select.subscribe_selection(on_item_selected)
        with select.mount(subscribe_pointer):
            ...
    """

    def __init__(
        self,
        config: SelectConfig,
        fetch_items: Callable[[str], List[Mapping[str, Any]]],
        debouncer_factory: DebouncerFactory,
        task_runner: TaskRunner,
        reporter: Optional[ErrorReporter] = None,
        settings: Optional[SearchSelectSettings] = None,
    ):
        self._config = config
        self._reporter = reporter or get_error_reporter()
        self._settings = settings or get_search_select_settings()
        self._state = SelectState()
        self._selection_listeners: List[SelectionListener] = []
        self._state_listeners: List[StateListener] = []
        self._unsubscribe_pointer: Optional[Callable[[], None]] = None
        self._pipeline: Optional[FetchPipeline] = None
        self._mounted = False
        self.disabled = False

        try:
            config.validate()
        except ConfigurationError as e:
            self._report(e)
            self.disabled = True
            task_runner.shutdown()
            return

        self._pipeline = FetchPipeline(
            endpoint=config.endpoint,
            fetch_items=fetch_items,
            debouncer_factory=debouncer_factory,
            task_runner=task_runner,
            on_items=self._apply_items,
            on_error=self._report,
            debounce_ms=self._settings.debounce_ms,
            query_param=self._settings.query_param,
        )

        try:
            self._state.selected_item = parse_initial_selection(config.initial_selection)
        except SelectionParseError as e:
            self._report(e)

    @property
    def config(self) -> SelectConfig:
        return self._config

    @property
    def is_mounted(self) -> bool:
        return self._mounted

    # ========== LIFECYCLE ==========

    def mount(self, subscribe_pointer: Optional[PointerSubscription] = None) -> "SearchableSelect":
        """
        Register the document-level pointer listener.

        subscribe_pointer receives handle_pointer_press and returns the
        matching unsubscribe, which unmount() calls. If registration fails
        everything acquired so far is released before the error propagates.
        """
        if self.disabled or self._mounted:
            return self
        try:
            if subscribe_pointer is not None:
                self._unsubscribe_pointer = subscribe_pointer(self.handle_pointer_press)
            self._mounted = True
        except Exception:
            self.unmount()
            raise
        logger.debug(f"Mounted searchable select for {self._config.endpoint}")
        return self

    def unmount(self) -> None:
        """Cancel timers, drop in-flight results and release listeners. Idempotent.

        The core is inert afterwards: `disabled` is True and operations are no-ops.
        """
        unsubscribe, self._unsubscribe_pointer = self._unsubscribe_pointer, None
        try:
            if self._pipeline is not None:
                self._pipeline.shutdown()
        finally:
            if unsubscribe is not None:
                unsubscribe()
            self._state.clear_transient()
            self._selection_listeners.clear()
            self._state_listeners.clear()
            self._mounted = False
            self.disabled = True

    def __enter__(self) -> "SearchableSelect":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unmount()

    # ========== LISTENERS ==========

    def subscribe_selection(self, listener: SelectionListener) -> Callable[[], None]:
        """Call listener with each user-confirmed selection. Returns unsubscribe."""
        self._selection_listeners.append(listener)
        return lambda: self._remove_listener(self._selection_listeners, listener)

    def subscribe_state(self, listener: StateListener) -> Callable[[], None]:
        """Call listener with a snapshot after every state change. Returns unsubscribe."""
        self._state_listeners.append(listener)
        return lambda: self._remove_listener(self._state_listeners, listener)

    @staticmethod
    def _remove_listener(listeners: list, listener) -> None:
        if listener in listeners:
            listeners.remove(listener)

    # ========== TRANSITIONS ==========

    def open(self) -> None:
        """CLOSED -> OPEN. Fetches with the current query when there are no candidates."""
        if self.disabled or self._state.is_open:
            return
        self._state.phase = SelectPhase.OPEN
        logger.debug("Opened")
        self._notify_state()
        if not self._state.candidates:
            self._pipeline.fetch_now(self._state.query)

    activate = open

    def toggle(self) -> None:
        """Open when closed, dismiss when open."""
        if self._state.is_open:
            self.dismiss()
        else:
            self.open()

    def dismiss(self) -> None:
        """OPEN -> CLOSED without touching the selection or emitting."""
        if self.disabled or not self._state.is_open:
            return
        self._pipeline.invalidate()
        self._state.clear_transient()
        logger.debug("Dismissed")
        self._notify_state()

    close = dismiss

    def set_query(self, text: str) -> None:
        """Update the query and schedule a debounced fetch for it."""
        if self.disabled or not self._state.is_open:
            return
        self._state.query = text
        self._state.highlighted_index = NO_HIGHLIGHT
        self._pipeline.schedule_fetch(text)
        self._notify_state()

    def move_highlight(self, delta: int) -> None:
        """Move the highlight by delta. Moving past either end does nothing."""
        if self.disabled or not self._state.is_open:
            return
        if self._state.set_highlight(self._state.highlighted_index + delta):
            self._notify_state()

    def highlight(self, index: int) -> None:
        """Highlight the row at index; out-of-range indices are ignored."""
        if self.disabled or not self._state.is_open:
            return
        if self._state.set_highlight(index):
            self._notify_state()

    def confirm(self) -> bool:
        """Select the highlighted candidate. Returns False when nothing is highlighted."""
        if self.disabled or not self._state.is_open:
            return False
        if self._state.highlighted_index == NO_HIGHLIGHT:
            return False
        self.select(self._state.candidates[self._state.highlighted_index])
        return True

    def select(self, item: Item) -> None:
        """OPEN -> CLOSED with item as the new selection; emits selection-changed."""
        if self.disabled or not self._state.is_open:
            return
        self._pipeline.invalidate()
        self._state.selected_item = item
        self._state.clear_transient()
        logger.debug(f"Selected {self._config.key_property}={item.get(self._config.key_property)!r}")
        for listener in list(self._selection_listeners):
            listener(item)
        self._notify_state()

    def set_selection(self, item: Optional[Item]) -> None:
        """Replace the selection from the host side. Emits no selection event."""
        if self.disabled:
            return
        self._state.selected_item = item
        self._notify_state()

    def handle_pointer_press(self, inside: bool) -> None:
        """Document-level pointer handler: a press outside dismisses."""
        if not inside:
            self.dismiss()

    # ========== QUERIES ==========

    def current_state(self) -> SelectSnapshot:
        return self._state.snapshot(disabled=self.disabled)

    def label_for(self, item: Mapping[str, Any]) -> str:
        """Rendered display label for item."""
        return render(self._config.display_template, item)

    def candidate_labels(self) -> List[str]:
        return [self.label_for(item) for item in self._state.candidates]

    def display_text(self) -> str:
        """Label of the current selection, or '' when nothing is selected."""
        if self._state.selected_item is None:
            return ""
        return self.label_for(self._state.selected_item)

    def is_selected(self, item: Mapping[str, Any]) -> bool:
        """Whether item is the current selection, compared by key property."""
        selected = self._state.selected_item
        if selected is None:
            return False
        key = self._config.key_property
        return key in item and selected.get(key) == item[key]

    # ========== INTERNALS ==========

    def _apply_items(self, items: List[Mapping[str, Any]]) -> None:
        if not self._state.is_open:
            logger.debug("Ignoring items delivered while closed")
            return
        self._state.replace_candidates([dict(item) for item in items])
        self._notify_state()

    def _report(self, error: SearchSelectError) -> None:
        self._reporter.report(error)

    def _notify_state(self) -> None:
        if not self._state_listeners:
            return
        snapshot = self.current_state()
        for listener in list(self._state_listeners):
            listener(snapshot)
