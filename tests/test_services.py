"""Tests for the HTTP item source."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from pyqt_searchselect.exceptions import DecodeError, FetchError
from pyqt_searchselect.services import HttpItemSource, decode_items


def _response(status_code=200, payload=None, json_error=None):
    response = MagicMock()
    response.status_code = status_code
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


def test_fetch_returns_items():
    items = [{"id": 1, "text": "apple"}, {"id": 2, "text": "fig"}]
    with patch("pyqt_searchselect.services.item_source.requests.get", return_value=_response(payload=items)) as get:
        source = HttpItemSource(key_property="id", timeout_s=2.5)
        assert source.fetch("http://h/items?q=") == items
    get.assert_called_once_with("http://h/items?q=", timeout=2.5)


def test_fetch_uses_session_when_given():
    session = MagicMock()
    session.get.return_value = _response(payload=[])
    source = HttpItemSource(key_property="id", session=session)
    assert source.fetch("http://h/items?q=x") == []
    session.get.assert_called_once()


def test_transport_error_raises_fetch_error():
    with patch(
        "pyqt_searchselect.services.item_source.requests.get",
        side_effect=requests.ConnectionError("refused"),
    ):
        with pytest.raises(FetchError, match="refused") as excinfo:
            HttpItemSource(key_property="id").fetch("http://h/items?q=")
    assert excinfo.value.url == "http://h/items?q="


def test_non_2xx_raises_fetch_error():
    with patch("pyqt_searchselect.services.item_source.requests.get", return_value=_response(status_code=503)):
        with pytest.raises(FetchError) as excinfo:
            HttpItemSource(key_property="id").fetch("http://h/items?q=")
    assert excinfo.value.status_code == 503


def test_invalid_json_raises_decode_error():
    with patch(
        "pyqt_searchselect.services.item_source.requests.get",
        return_value=_response(json_error=ValueError("Expecting value")),
    ):
        with pytest.raises(DecodeError):
            HttpItemSource(key_property="id").fetch("http://h/items?q=")


@pytest.mark.parametrize("payload", [
    {"items": []},
    [1, 2],
    [{"id": 1}, {"text": "no key"}],
])
def test_decode_items_rejects_bad_payloads(payload):
    with pytest.raises(DecodeError):
        decode_items(payload, "id")


def test_decode_items_keeps_extra_fields():
    payload = [{"id": 1, "text": "apple", "extra": [1]}]
    assert decode_items(payload, "id") == payload
