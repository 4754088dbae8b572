"""
Widget implementations.

PyQt6 host adapter for the searchable select core.
"""

from .pointer_press_filter import PointerPressFilter, subscribe_pointer_presses
from .searchable_select_widget import SearchableSelectWidget

__all__ = [
    "PointerPressFilter",
    "subscribe_pointer_presses",
    "SearchableSelectWidget",
]
