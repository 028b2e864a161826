"""Token extraction from HTTP requests.

Only one credential shape is accepted:

    Authorization: Bearer <token>

Anything else is refused before any cryptography runs.
"""

from __future__ import annotations

from flask import request

from .errors import MissingToken


class BearerExtractor:
    """Extracts JWT from Authorization header using Bearer scheme.

    The header must split on single spaces into exactly two parts, the first
    being ``Bearer`` (case-sensitive) and the second a non-empty token.

    Example:
        ```python
        extractor = BearerExtractor()
        auth = AuthExtension(verifier=verifier, extractor=extractor)
        ```
    """

    def extract(self) -> str:
        """Extract JWT from Authorization: Bearer header.

        Returns:
            Raw JWT string (without "Bearer " prefix).

        Raises:
            MissingToken: If the header is missing or not exactly
                ``Bearer <token>``.
        """
        auth_header = request.headers.get("Authorization")

        if not auth_header:
            raise MissingToken("No token provided")

        parts = auth_header.split(" ")

        if len(parts) != 2:
            raise MissingToken("Invalid Authorization header format (expected 'Bearer <token>')")

        scheme, token = parts

        if scheme != "Bearer":
            raise MissingToken("Invalid authorization scheme (expected 'Bearer')")

        if not token:
            raise MissingToken("Bearer token is empty")

        return token
