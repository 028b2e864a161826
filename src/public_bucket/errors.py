"""Authentication and link store errors.

This module defines the two exception hierarchies used by the service:

- ``AuthError`` and its subclasses describe why a bearer token was refused.
  Every one of them becomes an HTTP 401; the subclasses exist so that logs
  and tests can tell the failures apart.
- ``LinkStoreError`` and its subclasses describe why a short link mutation
  could not be applied (409 / 404), or why the backing store failed.

Security Note:
    Error messages for token failures are logged server-side. Clients only
    ever see a generic 401 body, never the internal failure class.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base exception for all authentication failures.

    Attributes:
        status_code: HTTP status the auth gate answers with. Always 401.
    """

    status_code: int = 401

    @property
    def description(self) -> str:
        """Human readable reason, safe to log."""
        return str(self) or self.__class__.__name__


class MissingToken(AuthError):  # noqa: N818
    """Raised when no usable bearer token is present in the request.

    This occurs when:
    - The Authorization header is missing
    - The header is not exactly ``Bearer <token>`` (wrong scheme, extra
      segments, empty token)
    """


class JwksUnavailable(AuthError):  # noqa: N818
    """Raised when the JWKS endpoint cannot be used.

    This occurs when:
    - No JWKS URL is configured
    - The HTTP call fails (connection error, non-2xx status)
    - The body is not JSON, or is not an object with a ``keys`` array
    """


class InvalidToken(AuthError):  # noqa: N818
    """Raised when a token is present but cannot be verified.

    Parent of every verification-step failure below.
    """


class MalformedToken(InvalidToken):
    """Token is not three base64url segments with a JSON header and payload,
    the header has no usable ``kid``, or a time claim is not numeric."""


class KeyNotFound(InvalidToken):
    """No key in the JWKS matches the token's ``kid``, or the matching key
    cannot be imported as an RSA public key."""


class InvalidSignature(InvalidToken):
    """RSASSA-PKCS1-v1_5 / SHA-256 verification of ``header.payload`` failed."""


class InvalidIssuer(InvalidToken):
    """The ``iss`` claim does not equal the configured issuer."""


class InvalidAudience(InvalidToken):
    """The ``aud`` claim does not equal the configured audience."""


class TokenExpired(InvalidToken):
    """The ``exp`` claim lies in the past."""


class TokenNotYetValid(InvalidToken):
    """The ``nbf`` claim lies in the future."""


class LinkStoreError(Exception):
    """Generic base class for short link store failures."""

    pass


class LinkConflict(LinkStoreError):  # noqa: N818
    """Raised when creating a short link whose key is already taken."""

    pass


class LinkNotFound(LinkStoreError):  # noqa: N818
    """Raised when replacing or removing a short link that does not exist."""

    pass


class DataStoreError(LinkStoreError):
    """Raised when the key-value backing store itself fails.

    e.g. connection issues, timeouts, OOM, etc.
    """

    pass
