"""
HTTP item source for searchable selects.

Fetches a JSON array of item records from a fully built query URL. Runs on
a worker thread (see BackgroundTaskRunner); every failure is raised as a
FetchError or DecodeError for the fetch pipeline to report.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from pyqt_searchselect.exceptions import DecodeError, FetchError
from pyqt_searchselect.protocols.select_config import get_search_select_settings

logger = logging.getLogger(__name__)


def decode_items(payload: Any, key_property: str) -> List[Dict[str, Any]]:
    """Validate a decoded JSON body as a list of records carrying key_property."""
    if not isinstance(payload, list):
        raise DecodeError(f"Expected a JSON array of items, got {type(payload).__name__}")

    items = []
    for index, record in enumerate(payload):
        if not isinstance(record, dict):
            raise DecodeError(f"Item {index} is not an object: {record!r}")
        if key_property not in record:
            raise DecodeError(f"Item {index} has no '{key_property}' field")
        items.append(record)
    return items


class HttpItemSource:
    """
    Blocking item fetcher built on requests.

    Usage:
        source = HttpItemSource(key_property="id")
        items = source.fetch("https://example.org/items?q=ap")
    """

    def __init__(
        self,
        key_property: str,
        timeout_s: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.key_property = key_property
        self.timeout_s = timeout_s if timeout_s is not None else get_search_select_settings().request_timeout_s
        self._session = session

    def fetch(self, url: str) -> List[Dict[str, Any]]:
        """GET url and return its decoded items."""
        getter = self._session.get if self._session is not None else requests.get
        try:
            response = getter(url, timeout=self.timeout_s)
        except requests.RequestException as e:
            raise FetchError(f"Request failed: {e}", url=url) from e

        if not 200 <= response.status_code < 300:
            raise FetchError(
                f"Item source answered HTTP {response.status_code}",
                url=url,
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise DecodeError(f"Response body is not valid JSON: {e}") from e

        items = decode_items(payload, self.key_property)
        logger.debug(f"Fetched {len(items)} items from {url}")
        return items
