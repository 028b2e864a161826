"""
Remote JWKS fetcher.

Retrieves the signing-key set from a configured URL on every call. Nothing is
cached: admin mutations are rare, and a fresh fetch means a rotated key is
honoured immediately.
"""

from __future__ import annotations

import logging

from jwt import PyJWKClient
from jwt.exceptions import PyJWKClientError

from ..errors import JwksUnavailable
from ..protocols import Jwks, JwksSource

logger = logging.getLogger(__name__)


class RemoteJWKSFetcher(JwksSource):
    """
    Fetches a JWKS document over HTTP.

    Responsibilities
    ----------------
    1. GET the configured URL (through PyJWKClient, caching disabled).
    2. Parse the body as JSON.
    3. Check the shape: an object holding a ``keys`` array.
    4. Normalize every failure to ``JwksUnavailable``.

    Parameters
    ----------
    url : str | None
        JWKS endpoint. ``None`` means auth is not configured; every fetch fails.

    timeout : int
        Socket timeout handed to PyJWKClient.

    Example
    -------
    fetcher = RemoteJWKSFetcher("https://tenant.example.com/.well-known/jwks.json")
    jwks = fetcher.fetch()
    jwks["keys"][0]["kid"]
    """

    def __init__(self, url: str | None, timeout: int = 30) -> None:
        self._url = url
        self._client = (
            PyJWKClient(url, cache_keys=False, cache_jwk_set=False, timeout=timeout)
            if url
            else None
        )

    @property
    def url(self) -> str | None:
        return self._url

    def fetch(self) -> Jwks:
        if self._client is None:
            raise JwksUnavailable("JWKS URL is not configured")

        try:
            data = self._client.fetch_data()
        except (PyJWKClientError, OSError, ValueError) as e:
            logger.warning("Failed to fetch JWKS from %s: %s", self._url, e)
            raise JwksUnavailable("Failed to fetch JWKS") from e

        if not isinstance(data, dict) or not isinstance(data.get("keys"), list):
            raise JwksUnavailable("JWKS response has no 'keys' array")

        return data
