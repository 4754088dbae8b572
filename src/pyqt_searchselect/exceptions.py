"""Error kinds raised and reported by the searchable select control."""


class SearchSelectError(Exception):
    """Base class for every failure the control reports instead of raising."""


class ConfigurationError(SearchSelectError):
    """Raised when a required mount-time field is missing or invalid."""


class FetchError(SearchSelectError):
    """Raised when the item source cannot be reached or answers non-2xx."""

    def __init__(self, message: str, url: str = None, status_code: int = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class DecodeError(SearchSelectError):
    """Raised when a response body is not a valid array of item records."""


class SelectionParseError(SearchSelectError):
    """Raised when the initial selection cannot be parsed into an item."""
