"""Mount-time configuration and library-wide defaults for searchable selects.

SelectConfig carries the per-instance fields a host supplies when mounting
a control. SearchSelectSettings carries defaults shared by every instance;
applications may replace them with set_search_select_settings().
"""

import json
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional, Union

from pyqt_searchselect.exceptions import ConfigurationError, SelectionParseError

DEFAULT_MAX_VISIBLE_COUNT = 10

# Attribute spellings accepted by SelectConfig.from_mapping()
_FIELD_ALIASES = {
    "url": "endpoint",
    "key-property": "key_property",
    "keyProperty": "key_property",
    "item-display-template": "display_template",
    "itemDisplayTemplate": "display_template",
    "max-item-count": "max_visible_count",
    "maxItemCount": "max_visible_count",
    "selected-item": "initial_selection",
    "selectedItem": "initial_selection",
}

_REQUIRED_TEXT_FIELDS = ("endpoint", "key_property", "display_template")


@dataclass(frozen=True)
class SelectConfig:
    """Per-mount configuration. Immutable once the control is mounted.

    Attributes:
        endpoint: URL the item list is fetched from; the query is appended as a parameter
        key_property: Item field used as stable identity
        display_template: Template expanded against items for labels
        max_visible_count: Rows shown before the list scrolls (sizing only)
        initial_selection: Serialized item (JSON text) or mapping, or None
    """

    endpoint: str = ""
    key_property: str = ""
    display_template: str = ""
    max_visible_count: int = DEFAULT_MAX_VISIBLE_COUNT
    initial_selection: Union[str, Mapping[str, Any], None] = None

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "SelectConfig":
        """Build a config from snake_case keys or host attribute names."""
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in values.items():
            name = _FIELD_ALIASES.get(key, key)
            if name in known and value is not None:
                kwargs[name] = value

        # Attribute values arrive as text; anything non-numeric is left for validate() to reject
        count = kwargs.get("max_visible_count")
        if isinstance(count, str) and count.strip().lstrip("-").isdecimal():
            kwargs["max_visible_count"] = int(count)
        return cls(**kwargs)

    def validate(self) -> None:
        """Raise ConfigurationError on the first missing or invalid field."""
        missing = [
            name for name in _REQUIRED_TEXT_FIELDS
            if not isinstance(getattr(self, name), str) or not getattr(self, name).strip()
        ]
        if missing:
            raise ConfigurationError(f"Missing required attributes: {', '.join(missing)}")

        count = self.max_visible_count
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise ConfigurationError(f"max_visible_count must be a positive integer, got {count!r}")


def parse_initial_selection(raw: Union[str, Mapping[str, Any], None]) -> Optional[Dict[str, Any]]:
    """Parse an initial selection into an item record.

    Returns None for an absent value. Raises SelectionParseError when the
    value is not a JSON object (or mapping).
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, Mapping):
        return dict(raw)
    if not isinstance(raw, str):
        raise SelectionParseError(f"Unsupported selected-item type: {type(raw).__name__}")

    try:
        parsed = json.loads(raw)
    except ValueError as e:
        raise SelectionParseError(f"Invalid selected-item JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise SelectionParseError(f"selected-item must be a JSON object, got {type(parsed).__name__}")
    return parsed


@dataclass
class SearchSelectSettings:
    """Library-wide defaults shared by every searchable select.

    Attributes:
        debounce_ms: Quiet window before a typed query is fetched
        request_timeout_s: Timeout for item source requests
        query_param: Name of the query parameter appended to the endpoint
        placeholder_text: Header text shown while nothing is selected
        search_placeholder_text: Placeholder of the search box
        row_height_px: Row height used with max_visible_count to size the list
    """

    debounce_ms: int = 300
    request_timeout_s: float = 10.0
    query_param: str = "q"
    placeholder_text: str = "Select an item..."
    search_placeholder_text: str = "Search..."
    row_height_px: int = 28


_settings: Optional[SearchSelectSettings] = None


def set_search_select_settings(settings: Optional[SearchSelectSettings]) -> None:
    """Set the global searchable select defaults. None restores the built-in ones."""
    global _settings
    _settings = settings


def get_search_select_settings() -> SearchSelectSettings:
    """Get the global defaults, or a default instance if none were set."""
    if _settings is None:
        return SearchSelectSettings()
    return _settings
