"""
Framework-agnostic searchable select core.

State machine, debounced fetch pipeline and display template renderer.
Nothing in this package imports a GUI toolkit.
"""

from .state import NO_HIGHLIGHT, Item, SelectPhase, SelectSnapshot, SelectState
from .template_renderer import TemplateToken, render, stringify_value, tokenize
from .fetch_pipeline import FetchPipeline, build_query_url
from .controller import SearchableSelect

__all__ = [
    "NO_HIGHLIGHT",
    "Item",
    "SelectPhase",
    "SelectSnapshot",
    "SelectState",
    "TemplateToken",
    "render",
    "stringify_value",
    "tokenize",
    "FetchPipeline",
    "build_query_url",
    "SearchableSelect",
]
