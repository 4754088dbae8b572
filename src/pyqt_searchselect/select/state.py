"""Control state owned by the searchable select state machine."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

Item = Dict[str, Any]

NO_HIGHLIGHT = -1


class SelectPhase(Enum):
    """Open/closed phase of the control."""
    CLOSED = "closed"
    OPEN = "open"


@dataclass(frozen=True)
class SelectSnapshot:
    """Immutable view of the control state handed to host adapters."""
    phase: SelectPhase
    query: str
    candidates: Tuple[Item, ...]
    highlighted_index: int
    selected_item: Optional[Item]
    disabled: bool = False

    @property
    def is_open(self) -> bool:
        return self.phase is SelectPhase.OPEN

    @property
    def highlighted_item(self) -> Optional[Item]:
        if self.highlighted_index == NO_HIGHLIGHT:
            return None
        return self.candidates[self.highlighted_index]


@dataclass
class SelectState:
    """
    Mutable control state.

    Invariants kept by the mutators below:
    - highlighted_index is NO_HIGHLIGHT or a valid index into candidates
    - closing clears query, candidates and highlight but keeps selected_item
    """
    phase: SelectPhase = SelectPhase.CLOSED
    query: str = ""
    candidates: Tuple[Item, ...] = field(default_factory=tuple)
    highlighted_index: int = NO_HIGHLIGHT
    selected_item: Optional[Item] = None

    @property
    def is_open(self) -> bool:
        return self.phase is SelectPhase.OPEN

    def replace_candidates(self, items: Sequence[Item]) -> None:
        """Swap in a new candidate list and drop the highlight."""
        self.candidates = tuple(items)
        self.highlighted_index = NO_HIGHLIGHT

    def set_highlight(self, index: int) -> bool:
        """Highlight index if valid. Returns whether the highlight changed."""
        if not 0 <= index < len(self.candidates) or index == self.highlighted_index:
            return False
        self.highlighted_index = index
        return True

    def clear_transient(self) -> None:
        """Return to CLOSED, dropping everything but the selection."""
        self.phase = SelectPhase.CLOSED
        self.query = ""
        self.candidates = ()
        self.highlighted_index = NO_HIGHLIGHT

    def snapshot(self, disabled: bool = False) -> SelectSnapshot:
        return SelectSnapshot(
            phase=self.phase,
            query=self.query,
            candidates=self.candidates,
            highlighted_index=self.highlighted_index,
            selected_item=self.selected_item,
            disabled=disabled,
        )
