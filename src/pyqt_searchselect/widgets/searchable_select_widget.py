"""PyQt6 host adapter for the searchable select core."""

import logging
from typing import Any, Callable, List, Optional
from PyQt6.QtCore import Qt, QEvent, pyqtSignal
from PyQt6.QtWidgets import (
    QFrame, QHBoxLayout, QLabel, QLineEdit, QListWidget, QListWidgetItem,
    QVBoxLayout, QWidget,
)

from pyqt_searchselect.core import BackgroundTaskRunner, DebounceTimer
from pyqt_searchselect.protocols import (
    DebouncerFactory,
    ErrorReporter,
    SearchSelectSettings,
    SelectConfig,
    TaskRunner,
    get_search_select_settings,
)
from pyqt_searchselect.protocols.select_config import DEFAULT_MAX_VISIBLE_COUNT
from pyqt_searchselect.select import SearchableSelect, SelectSnapshot
from pyqt_searchselect.services import HttpItemSource
from pyqt_searchselect.widgets.pointer_press_filter import subscribe_pointer_presses

logger = logging.getLogger(__name__)

# --- Module-level constants ---
ARROW_CLOSED = "▾"
ARROW_OPEN = "▴"

# QKeyEvent.key() returns a plain int
KEY_DOWN = Qt.Key.Key_Down.value
KEY_UP = Qt.Key.Key_Up.value
KEY_SPACE = Qt.Key.Key_Space.value
KEY_ESCAPE = Qt.Key.Key_Escape.value
KEYS_CONFIRM = (Qt.Key.Key_Return.value, Qt.Key.Key_Enter.value)


def _release(select: SearchableSelect, unsubscribers: List[Callable[[], None]]):
    """Drop widget listeners and unmount the core. Safe to call repeatedly."""
    pending = list(unsubscribers)
    unsubscribers.clear()
    for unsubscribe in pending:
        unsubscribe()
    select.unmount()


class _Header(QFrame):
    """Clickable header showing the current selection."""

    clicked = pyqtSignal()

    def mousePressEvent(self, event):
        if event.button() == Qt.MouseButton.LeftButton:
            self.clicked.emit()
            event.accept()
            return
        super().mousePressEvent(event)


class SearchableSelectWidget(QWidget):
    """
    Dropdown that loads its options from a remote endpoint as the user types.

    All behavior lives in SearchableSelect; this widget only forwards input
    events to it and redraws from its state snapshots.

    Usage:
        select = SearchableSelectWidget(SelectConfig(
            endpoint="http://localhost:3000/items",
            key_property="id",
            display_template="text (id)",
        ))
        select.selection_changed.connect(on_item_selected)
        layout.addWidget(select)

    Labels are shown as rich text without escaping. Sanitize item data that
    comes from untrusted sources before it reaches the endpoint's response.
    """

    selection_changed = pyqtSignal(object)

    def __init__(
        self,
        config: SelectConfig,
        item_source: Optional[Any] = None,
        debouncer_factory: Optional[DebouncerFactory] = None,
        task_runner: Optional[TaskRunner] = None,
        reporter: Optional[ErrorReporter] = None,
        settings: Optional[SearchSelectSettings] = None,
        parent=None
    ):
        super().__init__(parent)
        self._settings = settings or get_search_select_settings()
        self._unsubscribers: List[Callable[[], None]] = []
        self._rendered_candidates = ()

        source = item_source or HttpItemSource(config.key_property, timeout_s=self._settings.request_timeout_s)
        self._select = SearchableSelect(
            config,
            fetch_items=source.fetch,
            debouncer_factory=debouncer_factory or DebounceTimer,
            task_runner=task_runner or BackgroundTaskRunner(),
            reporter=reporter,
            settings=self._settings,
        )

        try:
            self._setup_ui(config)
            if not self._select.disabled:
                self._unsubscribers.append(self._select.subscribe_state(self._render_state))
                self._unsubscribers.append(self._select.subscribe_selection(self.selection_changed.emit))
                self._select.mount(subscribe_pointer_presses(self))
        except Exception:
            self.unmount()
            raise

        # Children are already deleted when destroyed fires; the slot must not touch self
        select, unsubscribers = self._select, self._unsubscribers
        self.destroyed.connect(lambda *_: _release(select, unsubscribers))

        self.setEnabled(not self._select.disabled)
        self._render_state(self._select.current_state())

    def _setup_ui(self, config: SelectConfig):
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(2)

        # Header: selection text or placeholder, plus arrow
        self._header = _Header()
        self._header.setFrameShape(QFrame.Shape.StyledPanel)
        self._header.clicked.connect(self._on_header_clicked)
        header_layout = QHBoxLayout(self._header)
        header_layout.setContentsMargins(8, 4, 8, 4)

        self._display_label = QLabel()
        self._display_label.setTextFormat(Qt.TextFormat.RichText)
        header_layout.addWidget(self._display_label, 1)

        self._placeholder_label = QLabel(self._settings.placeholder_text)
        self._placeholder_label.setEnabled(False)
        header_layout.addWidget(self._placeholder_label, 1)

        self._arrow_label = QLabel(ARROW_CLOSED)
        header_layout.addWidget(self._arrow_label)
        layout.addWidget(self._header)

        # Dropdown panel: search box and candidate list
        self._panel = QFrame()
        self._panel.setFrameShape(QFrame.Shape.StyledPanel)
        panel_layout = QVBoxLayout(self._panel)
        panel_layout.setContentsMargins(0, 0, 0, 0)
        panel_layout.setSpacing(0)

        self._search_box = QLineEdit()
        self._search_box.setPlaceholderText(self._settings.search_placeholder_text)
        self._search_box.textEdited.connect(self._select.set_query)
        self._search_box.installEventFilter(self)
        panel_layout.addWidget(self._search_box)

        self._list = QListWidget()
        self._list.setMouseTracking(True)
        visible_rows = DEFAULT_MAX_VISIBLE_COUNT if self._select.disabled else config.max_visible_count
        self._list.setMaximumHeight(visible_rows * self._settings.row_height_px)
        self._list.itemEntered.connect(lambda item: self._select.highlight(self._list.row(item)))
        self._list.itemClicked.connect(self._on_row_clicked)
        panel_layout.addWidget(self._list)

        self._panel.hide()
        layout.addWidget(self._panel)

    # ========== PUBLIC API ==========

    @property
    def controller(self) -> SearchableSelect:
        return self._select

    def current_state(self) -> SelectSnapshot:
        return self._select.current_state()

    def set_selection(self, item: Optional[dict]):
        """Replace the selection without emitting selection_changed."""
        self._select.set_selection(item)
        if not self._unsubscribers:
            self._render_state(self._select.current_state())

    def unmount(self):
        """Release listeners, timers and background work. Idempotent."""
        logger.debug(f"Unmounting {type(self).__name__} with {len(self._unsubscribers)} listeners")
        _release(self._select, self._unsubscribers)

    # ========== INPUT ==========

    def _on_header_clicked(self):
        self._select.toggle()
        if self._select.current_state().is_open:
            self._search_box.setFocus()

    def _on_row_clicked(self, item: QListWidgetItem):
        row = self._list.row(item)
        candidates = self._select.current_state().candidates
        if 0 <= row < len(candidates):
            self._select.select(candidates[row])

    def _handle_key(self, key: int) -> bool:
        """Route a key press to the state machine. Returns True when consumed."""
        if not self._select.current_state().is_open:
            return False
        if key == KEY_DOWN:
            self._select.move_highlight(1)
            return True
        if key == KEY_UP:
            self._select.move_highlight(-1)
            return True
        if key in KEYS_CONFIRM:
            self._select.confirm()
            return True
        if key == KEY_SPACE:
            # Space types into the search box unless a row is highlighted
            return self._select.confirm()
        if key == KEY_ESCAPE:
            self._select.dismiss()
            return True
        return False

    def eventFilter(self, obj, event):
        if obj is self._search_box and event.type() == QEvent.Type.KeyPress:
            if self._handle_key(event.key()):
                return True
        return super().eventFilter(obj, event)

    def keyPressEvent(self, event):
        if self._handle_key(event.key()):
            event.accept()
            return
        super().keyPressEvent(event)

    def closeEvent(self, event):
        """Cleanup on close."""
        self.unmount()
        super().closeEvent(event)

    # ========== RENDERING ==========

    def _render_state(self, snapshot: SelectSnapshot):
        display_text = self._select.display_text()
        self._display_label.setText(display_text)
        self._display_label.setVisible(bool(display_text))
        self._placeholder_label.setVisible(not display_text)
        self._arrow_label.setText(ARROW_OPEN if snapshot.is_open else ARROW_CLOSED)
        self._panel.setVisible(snapshot.is_open)

        if self._search_box.text() != snapshot.query:
            self._search_box.blockSignals(True)
            try:
                self._search_box.setText(snapshot.query)
            finally:
                self._search_box.blockSignals(False)

        if snapshot.candidates is not self._rendered_candidates:
            self._rebuild_rows(snapshot)
        self._list.blockSignals(True)
        try:
            self._list.setCurrentRow(snapshot.highlighted_index)
        finally:
            self._list.blockSignals(False)

    def _rebuild_rows(self, snapshot: SelectSnapshot):
        self._list.clear()
        for candidate in snapshot.candidates:
            row = QListWidgetItem()
            label = QLabel(self._select.label_for(candidate))
            label.setTextFormat(Qt.TextFormat.RichText)
            label.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents)
            label.setContentsMargins(8, 4, 8, 4)
            if self._select.is_selected(candidate):
                font = label.font()
                font.setBold(True)
                label.setFont(font)
            row.setSizeHint(label.sizeHint())
            self._list.addItem(row)
            self._list.setItemWidget(row, label)
        self._rendered_candidates = snapshot.candidates
