"""Protocol definitions for the edge service.

This module defines structural interfaces using Protocol (PEP 544) for:
- JWKS retrieval
- Token verification
- Token extraction
- The key-value store behind short links
- The blob store behind public reads

Using protocols allows for duck-typing and easier testing/mocking without
requiring explicit inheritance. Any class that implements the required methods
satisfies the protocol.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

# ============================================================================
# Type Aliases
# ============================================================================

type Claims = Mapping[str, Any]
"""Represents the decoded JWT payload as an immutable mapping."""

type Jwks = Mapping[str, Any]
"""A parsed JWKS document: an object whose ``keys`` entry is a list of JWKs."""


# ============================================================================
# Value types
# ============================================================================


@dataclass(frozen=True, slots=True)
class BlobObject:
    """A blob fetched from the blob store.

    Attributes:
        body: Iterable of byte chunks, consumed once while streaming the response.
        etag: HTTP ETag, already quoted (``"abc123"``).
        http_metadata: Response headers stored alongside the blob
            (Content-Type, Cache-Control, ...).
    """

    body: Iterable[bytes]
    etag: str
    http_metadata: Mapping[str, str] = field(default_factory=dict)


# ============================================================================
# Core Protocols
# ============================================================================


class JwksSource(Protocol):
    """Protocol for retrieving the current signing-key set."""

    def fetch(self) -> Jwks:
        """Fetch and parse the JWKS document.

        Raises:
            JwksUnavailable: The endpoint could not be reached or returned
                something other than a JSON object with a ``keys`` array.
        """
        ...


class TokenVerifier(Protocol):
    """Protocol for JWT verification implementations."""

    def verify(self, token: str) -> Claims:
        """Verify a JWT and return its decoded claims.

        Raises:
            InvalidToken: Any verification step failed.
            JwksUnavailable: The signing keys could not be fetched.
        """
        ...


class Extractor(Protocol):
    """Protocol for extracting JWT tokens from the current Flask request."""

    def extract(self) -> str:
        """Extract the raw JWT string from the Flask request.

        Raises:
            MissingToken: Token not found or improperly formatted.
        """
        ...


class KeyValueStore(Protocol):
    """Protocol for the string key-value store that holds short links.

    The conditional writes let the link store close the create/create and
    replace/delete races when the backend supports them.
    """

    def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is unused."""
        ...

    def put_if_absent(self, key: str, value: str) -> bool:
        """Store ``value`` only if ``key`` is unused. Returns True if written."""
        ...

    def put_if_present(self, key: str, value: str) -> bool:
        """Overwrite ``value`` only if ``key`` exists. Returns True if written."""
        ...

    def delete(self, key: str) -> bool:
        """Delete ``key``. Returns True if it existed."""
        ...


class BlobStore(Protocol):
    """Protocol for the read-only public blob store."""

    def get(self, key: str) -> BlobObject | None:
        """Return the blob stored under ``key``, or None if there is none."""
        ...
