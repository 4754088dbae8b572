"""
Display template expansion.

A display template is plain text in which every identifier-shaped token
(a maximal run of ASCII letters, digits and underscores) names a field of
the item being displayed:

    render("name (id)", {"id": 1, "name": "apple"})  ->  "apple (1)"

Tokens that do not name a field of the item pass through unchanged, and so
does everything between tokens (punctuation, whitespace, markup).

The rendered string is shown as rich text by the widget layer. No escaping
is applied here: callers displaying untrusted item data must sanitize it.
"""

import math
from functools import lru_cache
from typing import Any, Mapping, NamedTuple, Tuple

_WORD_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyz"
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "0123456789_"
)


class TemplateToken(NamedTuple):
    """One piece of a tokenized template."""
    text: str
    is_identifier: bool


@lru_cache(maxsize=128)
def tokenize(template: str) -> Tuple[TemplateToken, ...]:
    """Split template into alternating identifier and literal tokens."""
    tokens = []
    start = 0
    for pos in range(1, len(template) + 1):
        at_end = pos == len(template)
        if at_end or (template[pos] in _WORD_CHARS) != (template[start] in _WORD_CHARS):
            chunk = template[start:pos]
            tokens.append(TemplateToken(chunk, chunk[0] in _WORD_CHARS))
            start = pos
    return tuple(tokens)


def stringify_value(value: Any) -> str:
    """Convert a field value to display text the way a browser's String() would."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
    if isinstance(value, (list, tuple)):
        # Array join: null elements become empty strings
        return ",".join("" if element is None else stringify_value(element) for element in value)
    if isinstance(value, Mapping):
        return "[object Object]"
    return str(value)


def render(template: str, item: Mapping[str, Any]) -> str:
    """Expand template against item. Pure; unknown fields pass through."""
    parts = []
    for token in tokenize(template):
        if token.is_identifier and token.text in item:
            parts.append(stringify_value(item[token.text]))
        else:
            parts.append(token.text)
    return "".join(parts)
