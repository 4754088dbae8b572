"""
Service layer.

Item sources the fetch pipeline pulls candidates from.
"""

from .item_source import HttpItemSource, decode_items

__all__ = [
    "HttpItemSource",
    "decode_items",
]
