import json
from typing import Any

import pytest
from jwt import PyJWKClient
from jwt.exceptions import PyJWKClientConnectionError

import public_bucket as m

JWKS_URL = "https://issuer.example.com/.well-known/jwks.json"


class FakeClient(PyJWKClient):
    """PyJWKClient stand-in returning a canned response or raising."""

    def __init__(self, result: Any = None, error: Exception | None = None):
        self._result = result
        self._error = error
        self.calls = 0

    def fetch_data(self) -> Any:
        self.calls += 1
        if self._error is not None:
            raise self._error
        return self._result


def _fetcher_with(client: FakeClient) -> m.RemoteJWKSFetcher:
    fetcher = m.RemoteJWKSFetcher(JWKS_URL)
    object.__setattr__(fetcher, "_client", client)  # inject fake
    return fetcher


def test_fetch_returns_document():
    document = {"keys": [{"kid": "k1", "kty": "RSA", "n": "AQAB", "e": "AQAB"}]}
    fetcher = _fetcher_with(FakeClient(result=document))

    assert fetcher.fetch() == document


def test_every_fetch_hits_the_endpoint():
    client = FakeClient(result={"keys": []})
    fetcher = _fetcher_with(client)

    fetcher.fetch()
    fetcher.fetch()
    assert client.calls == 2


def test_real_client_has_caching_disabled():
    fetcher = m.RemoteJWKSFetcher(JWKS_URL)

    assert fetcher.url == JWKS_URL
    assert fetcher._client.uri == JWKS_URL  # pyright: ignore[reportPrivateUsage]
    assert fetcher._client.jwk_set_cache is None  # pyright: ignore[reportPrivateUsage]


def test_unconfigured_url_is_unavailable():
    with pytest.raises(m.JwksUnavailable, match="not configured"):
        m.RemoteJWKSFetcher(None).fetch()


@pytest.mark.parametrize(
    "error",
    [
        PyJWKClientConnectionError("connection refused"),
        json.JSONDecodeError("Expecting value", "<html>", 0),
        TimeoutError("timed out"),
    ],
)
def test_transport_and_parse_failures_are_unavailable(error: Exception):
    fetcher = _fetcher_with(FakeClient(error=error))

    with pytest.raises(m.JwksUnavailable):
        fetcher.fetch()


@pytest.mark.parametrize("document", [[], {"keys": "nope"}, {"no_keys": []}, None])
def test_wrong_shape_is_unavailable(document: Any):
    fetcher = _fetcher_with(FakeClient(result=document))

    with pytest.raises(m.JwksUnavailable):
        fetcher.fetch()
