"""Tests for tautulli_status.client

Covers:
- build_api_url(): port placement, path prefixes
- TautulliClient: configuration checks, query parameters, timeout
- transport failures and HTTP errors all surface as ConnectivityError
"""

from __future__ import annotations

import pytest
import requests

import tautulli_status.client as client_mod
from tautulli_status.client import (
    APIError,
    ConfigurationError,
    ConnectivityError,
    TautulliClient,
    build_api_url,
)
from tautulli_status.config import Config


class _Resp:
    def __init__(self, status_code: int = 200, content: bytes = b"{}", text: str = ""):
        self.status_code = status_code
        self.content = content
        self.text = text or content.decode("utf-8", errors="replace")

    @property
    def ok(self) -> bool:
        return self.status_code < 400


def _client(**overrides) -> TautulliClient:
    kwargs = dict(base_url="http://tautulli.local", port=8181, api_key="secret", timeout_s=3)
    kwargs.update(overrides)
    return TautulliClient(**kwargs)


# ---------------------------------------------------------------------------
# build_api_url
# ---------------------------------------------------------------------------

def test_build_api_url_adds_port():
    assert build_api_url("http://127.0.0.1", 8181) == "http://127.0.0.1:8181/api/v2"


def test_build_api_url_replaces_embedded_port():
    assert build_api_url("https://media.example.com:9000", 443) == "https://media.example.com:443/api/v2"


def test_build_api_url_keeps_path_prefix():
    assert build_api_url("http://host/tautulli/", 80) == "http://host:80/tautulli/api/v2"


# ---------------------------------------------------------------------------
# construction
# ---------------------------------------------------------------------------

def test_client_requires_api_key():
    with pytest.raises(ConfigurationError):
        _client(api_key="")


def test_client_rejects_non_positive_timeout():
    with pytest.raises(ConfigurationError):
        _client(timeout_s=0)


def test_client_from_config():
    config = Config(base_url="http://h", port=1234, api_key="k", timeout_s=7)
    client = TautulliClient.from_config(config)
    assert client.api_url == "http://h:1234/api/v2"
    assert client.timeout_s == 7


# ---------------------------------------------------------------------------
# fetch_activity
# ---------------------------------------------------------------------------

def test_fetch_activity_sends_command_and_key(monkeypatch):
    captured = {}

    def _fake_get(url, params=None, timeout=None):
        captured["url"] = url
        captured["params"] = params
        captured["timeout"] = timeout
        return _Resp(200, b'{"response": {}}')

    monkeypatch.setattr(client_mod.requests, "get", _fake_get)

    body = _client().fetch_activity()

    assert body == b'{"response": {}}'
    assert captured["url"] == "http://tautulli.local:8181/api/v2"
    assert captured["params"] == {"apikey": "secret", "cmd": "get_activity"}
    assert captured["timeout"] == 3


@pytest.mark.parametrize(
    "exc",
    [
        requests.exceptions.Timeout("slow"),
        requests.exceptions.ConnectionError("refused"),
        requests.exceptions.InvalidURL("bad"),
    ],
)
def test_transport_failures_raise_connectivity_error(monkeypatch, exc):
    def _fake_get(url, params=None, timeout=None):
        raise exc

    monkeypatch.setattr(client_mod.requests, "get", _fake_get)

    with pytest.raises(ConnectivityError):
        _client().fetch_activity()


@pytest.mark.parametrize("status", [401, 403, 404, 418, 500, 503])
def test_http_errors_raise_api_error(monkeypatch, status):
    monkeypatch.setattr(
        client_mod.requests, "get", lambda url, params=None, timeout=None: _Resp(status, b"nope")
    )

    with pytest.raises(APIError) as info:
        _client().fetch_activity()

    assert info.value.status_code == status
    assert info.value.response_text == "nope"
    assert isinstance(info.value, ConnectivityError)

