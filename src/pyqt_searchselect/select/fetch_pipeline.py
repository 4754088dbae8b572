"""
Debounced remote fetch pipeline.

Keystrokes call schedule_fetch(); only the last call of a burst reaches the
item source once the quiet window elapses. Every issued request carries a
sequence number and only the response to the newest request is applied, so
a slow response to a superseded query can never overwrite newer results.
"""

import logging
from typing import Any, Callable, List, Mapping
from urllib.parse import quote

from pyqt_searchselect.exceptions import FetchError, SearchSelectError
from pyqt_searchselect.protocols.host_protocols import DebouncerFactory, TaskRunner

logger = logging.getLogger(__name__)

# Characters encodeURIComponent leaves untouched
_URI_COMPONENT_SAFE = "-_.!~*'()"

DEFAULT_DEBOUNCE_MS = 300


def build_query_url(endpoint: str, query: str, param: str = "q") -> str:
    """Append the URL-encoded query to endpoint as `param`."""
    if endpoint.endswith(("?", "&")):
        separator = ""
    elif "?" in endpoint:
        separator = "&"
    else:
        separator = "?"
    return f"{endpoint}{separator}{param}={quote(query, safe=_URI_COMPONENT_SAFE)}"


class FetchPipeline:
    """
    Debounces queries, issues requests, and applies only the newest response.

    Usage:
        pipeline = FetchPipeline(
            endpoint="https://example.org/items",
            fetch_items=source.fetch,
            debouncer_factory=DebounceTimer,
            task_runner=BackgroundTaskRunner(),
            on_items=self._apply_items,
            on_error=reporter.report,
        )
        pipeline.schedule_fetch("ap")   # restarts the quiet window
        pipeline.fetch_now("")          # skips the quiet window
    """

    def __init__(
        self,
        endpoint: str,
        fetch_items: Callable[[str], List[Mapping[str, Any]]],
        debouncer_factory: DebouncerFactory,
        task_runner: TaskRunner,
        on_items: Callable[[List[Mapping[str, Any]]], None],
        on_error: Callable[[SearchSelectError], None],
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        query_param: str = "q",
    ):
        self._endpoint = endpoint
        self._fetch_items = fetch_items
        self._task_runner = task_runner
        self._on_items = on_items
        self._on_error = on_error
        self._query_param = query_param
        self._pending_query = ""
        self._latest_sequence = 0
        self._debouncer = debouncer_factory(debounce_ms, self._on_quiet_window_elapsed)

    @property
    def latest_sequence(self) -> int:
        """Sequence number of the newest issued request (0 before any)."""
        return self._latest_sequence

    @property
    def is_pending(self) -> bool:
        """Whether a debounced fetch is waiting for its quiet window."""
        return self._debouncer.is_pending

    def schedule_fetch(self, query: str) -> None:
        """Fetch query once no further call arrives within the quiet window."""
        self._pending_query = query
        self._debouncer.trigger()

    def fetch_now(self, query: str) -> None:
        """Cancel any pending timer and fetch query immediately."""
        self._pending_query = query
        self._debouncer.force()

    def invalidate(self) -> None:
        """Cancel the pending timer and discard responses still in flight."""
        self._debouncer.cancel()
        self._latest_sequence += 1

    def shutdown(self) -> None:
        """Invalidate and release the task runner. Call on unmount."""
        self.invalidate()
        self._task_runner.shutdown()

    def _on_quiet_window_elapsed(self) -> None:
        self._issue(self._pending_query)

    def _issue(self, query: str) -> None:
        self._latest_sequence += 1
        sequence = self._latest_sequence
        url = build_query_url(self._endpoint, query, self._query_param)
        logger.debug(f"Issuing fetch #{sequence}: {url}")

        self._task_runner.submit(
            target=lambda: self._fetch_items(url),
            on_success=lambda items: self._on_response(sequence, items),
            on_error=lambda error: self._on_failure(sequence, url, error),
        )

    def _on_response(self, sequence: int, items: List[Mapping[str, Any]]) -> None:
        if sequence != self._latest_sequence:
            logger.debug(f"Discarding stale response #{sequence} (latest #{self._latest_sequence})")
            return
        logger.debug(f"Applying response #{sequence} with {len(items)} items")
        self._on_items(items)

    def _on_failure(self, sequence: int, url: str, error: Exception) -> None:
        if not isinstance(error, SearchSelectError):
            error = FetchError(f"Error fetching items: {error}", url=url)
        if sequence != self._latest_sequence:
            logger.debug(f"Stale request #{sequence} failed: {error}")
        self._on_error(error)
