from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from requests import Response
from requests.exceptions import Timeout

from app.feed.http_client import HTTPClient, HTTPClientConfig, HTTPClientError

URL = "https://example.com/eurofxref-hist.xml"


def make_response(status_code: int, content: bytes = b"") -> Response:
    resp = MagicMock(spec=Response)
    resp.status_code = status_code
    resp.text = "error"
    resp.content = content
    return resp


def test_http_client_success():
    session = MagicMock()
    config = HTTPClientConfig(max_retries=1)
    client = HTTPClient(config=config, session=session)
    session.get.return_value = make_response(200, b"<Envelope/>")

    payload = client.get_bytes(URL)

    assert payload == b"<Envelope/>"
    session.get.assert_called_once_with(URL, params=None, timeout=config.timeout)


def test_http_client_retries_then_succeeds(monkeypatch):
    session = MagicMock()
    config = HTTPClientConfig(max_retries=2, backoff_seconds=0)
    client = HTTPClient(config=config, session=session)

    session.get.side_effect = [make_response(500), make_response(200, b"ok")]

    monkeypatch.setattr("time.sleep", lambda *_: None)
    monkeypatch.setattr("random.uniform", lambda *_: 0)

    assert client.get_bytes(URL) == b"ok"
    assert session.get.call_count == 2


def test_http_client_retries_timeouts(monkeypatch):
    session = MagicMock()
    config = HTTPClientConfig(max_retries=2, backoff_seconds=0)
    client = HTTPClient(config=config, session=session)
    session.get.side_effect = Timeout("read timed out")

    monkeypatch.setattr("time.sleep", lambda *_: None)

    with pytest.raises(HTTPClientError) as exc_info:
        client.get_bytes(URL)

    assert "read timed out" in str(exc_info.value)
    assert session.get.call_count == 2


def test_http_client_rejects_empty_body():
    session = MagicMock()
    client = HTTPClient(config=HTTPClientConfig(max_retries=1), session=session)
    session.get.return_value = make_response(200, b"")

    with pytest.raises(HTTPClientError):
        client.get_bytes(URL)


def test_http_client_raises_after_retries_exhausted(monkeypatch):
    session = MagicMock()
    config = HTTPClientConfig(max_retries=2, backoff_seconds=0)
    client = HTTPClient(config=config, session=session)
    session.get.return_value = make_response(503)

    monkeypatch.setattr("time.sleep", lambda *_: None)

    with pytest.raises(HTTPClientError) as exc_info:
        client.get_bytes(URL)

    assert "Failed to fetch" in str(exc_info.value)
    assert exc_info.value.status_code is None
    assert session.get.call_count == 2


def test_http_client_fails_fast_on_client_error(monkeypatch):
    session = MagicMock()
    config = HTTPClientConfig(max_retries=3, backoff_seconds=0)
    client = HTTPClient(config=config, session=session)
    session.get.return_value = make_response(404)

    sleeps = []
    monkeypatch.setattr("time.sleep", sleeps.append)

    with pytest.raises(HTTPClientError) as exc_info:
        client.get_bytes(URL)

    assert exc_info.value.status_code == 404
    assert "Client error 404" in str(exc_info.value)
    assert session.get.call_count == 1
    assert sleeps == []


def test_http_client_retries_rate_limited_requests(monkeypatch):
    session = MagicMock()
    config = HTTPClientConfig(max_retries=2, backoff_seconds=0)
    client = HTTPClient(config=config, session=session)
    session.get.side_effect = [make_response(429), make_response(200, b"ok")]

    monkeypatch.setattr("time.sleep", lambda *_: None)
    monkeypatch.setattr("random.uniform", lambda *_: 0)

    assert client.get_bytes(URL) == b"ok"
    assert session.get.call_count == 2
