"""Flask glue for bearer-token authentication.

``AuthExtension`` is the auth gate in front of every short link mutation:

1. Extract the token from ``Authorization: Bearer <token>``
2. Verify it (JWKS fetch, signature, issuer, audience, exp/nbf)
3. Hand the verified claims back to the view
4. Convert every auth failure into an HTTP 401 via ``flask.abort``

The 401 body names the failure only coarsely ("No token provided",
"Invalid token"); the precise reason goes to the log.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

from flask import Flask, abort

from .errors import AuthError, MissingToken
from .extractors import BearerExtractor

if TYPE_CHECKING:
    from .protocols import Claims, Extractor, TokenVerifier

logger = logging.getLogger(__name__)

_EXT_KEY: Final[str] = "auth_extension"
"""Flask extensions registry key for AuthExtension."""


class AuthExtension:
    """
    Flask glue for JWT authentication.

    Responsibilities:
    - Extract token from request
    - Verify token (TokenVerifier)
    - Convert domain errors to HTTP responses (abort)

    Pattern:
        auth = AuthExtension(verifier)
        auth.init_app(app)

    Usage (inside a view, after any cheaper precondition checks):
        claims = auth.authenticate()
        subject = claims.get("sub", "unknown")
    """

    def __init__(
        self,
        verifier: TokenVerifier,
        extractor: Extractor | None = None,
    ) -> None:
        self._verifier: TokenVerifier = verifier
        self._extractor: Extractor = extractor or BearerExtractor()

    def init_app(self, app: Flask) -> None:
        """Register the extension on a Flask app."""
        app.extensions[_EXT_KEY] = self

    def authenticate(self) -> Claims:
        """Authenticate the current request and return its verified claims.

        Error mapping:
        - ``MissingToken``     -> HTTP 401 ("Unauthorized: No token provided" or format reason)
        - any other AuthError  -> HTTP 401 ("Unauthorized: Invalid token")

        Side Effects:
            May terminate request handling early via ``flask.abort``.
        """
        try:
            token = self._extractor.extract()
            return self._verifier.verify(token)
        except MissingToken as e:
            logger.info("Rejected request without bearer token: %s", e.description)
            abort(e.status_code, description=f"Unauthorized: {e.description}")
        except AuthError as e:
            logger.info(
                "Rejected bearer token: %s",
                e.description,
                extra={"reason": type(e).__name__},
            )
            abort(e.status_code, description="Unauthorized: Invalid token")
