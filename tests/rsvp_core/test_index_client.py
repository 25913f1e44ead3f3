import pytest
import requests

from eventsky.core.rsvp_core.index_client import RECENT_EVENTS, UPCOMING_EVENTS, IndexClient
from eventsky.core.rsvp_core.rsvp_errors import IndexQueryError


class DummyResp:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code
        self.text = str(payload)

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


def _client(monkeypatch, payload, status_code=200, seen=None):
    client = IndexClient("https://index.example/graphql")

    def fake_post(url, json=None, timeout=None):
        if seen is not None:
            seen.append({"url": url, "json": json, "timeout": timeout})
        return DummyResp(payload, status_code)

    monkeypatch.setattr(client.session, "post", fake_post)
    return client


def test_upcoming_query_returns_rows(monkeypatch):
    seen = []
    payload = {"data": {"events": [{"id": "0x01", "name": "Yoga Flow"}]}}
    client = _client(monkeypatch, payload, seen=seen)

    rows = client.fetch_events()
    assert rows == [{"id": "0x01", "name": "Yoga Flow"}]
    assert seen[0]["json"]["query"] == UPCOMING_EVENTS
    assert "isDisabled: false" in seen[0]["json"]["query"]
    assert seen[0]["timeout"] == 25.0


def test_recent_query_sends_current_timestamp(monkeypatch):
    seen = []
    client = _client(monkeypatch, {"data": {"events": []}}, seen=seen)

    assert client.fetch_events("recent", now_ms=1663762560000) == []
    assert seen[0]["json"]["query"] == RECENT_EVENTS
    assert seen[0]["json"]["variables"] == {"currentTimestamp": "1663762560000"}


def test_graphql_errors_raise(monkeypatch):
    client = _client(monkeypatch, {"errors": [{"message": "bad query"}]})
    with pytest.raises(IndexQueryError):
        client.fetch_events()


def test_non_json_reply_raises(monkeypatch):
    client = _client(monkeypatch, ValueError("not json"), status_code=502)
    with pytest.raises(IndexQueryError):
        client.fetch_events()


def test_transport_error_raises(monkeypatch):
    client = IndexClient("https://index.example/graphql")

    def boom(*a, **k):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(client.session, "post", boom)
    with pytest.raises(IndexQueryError, match="refused"):
        client.fetch_events()
