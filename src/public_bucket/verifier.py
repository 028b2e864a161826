"""JWT verification against a remotely fetched JWKS.

This module verifies compact RS256 tokens step by step, using PyJWT only for
its primitives (base64url decoding, JWK import, RSASSA-PKCS1-v1_5 / SHA-256
verification). Each step has its own failure type so that logs and tests can
tell exactly where a token was refused:

    1. three segments                      -> MalformedToken
    2. JSON header with a ``kid``          -> MalformedToken
    3. ``kid`` present in the JWKS         -> KeyNotFound
    4. key importable as RSA public key    -> KeyNotFound
    5. signature over ``header.payload``   -> InvalidSignature
    6. JSON payload                        -> MalformedToken
    7. ``iss`` equals configured issuer    -> InvalidIssuer
    8. ``aud`` equals configured audience  -> InvalidAudience
    9. ``exp`` not in the past             -> TokenExpired
   10. ``nbf`` not in the future           -> TokenNotYetValid

The token's own ``alg`` header is never consulted: RS256 is the only
algorithm accepted.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey
from jwt import PyJWK, PyJWTError
from jwt.algorithms import RSAAlgorithm
from jwt.utils import base64url_decode

from .errors import (
    InvalidAudience,
    InvalidIssuer,
    InvalidSignature,
    KeyNotFound,
    MalformedToken,
    TokenExpired,
    TokenNotYetValid,
)
from .protocols import Claims, Jwks, TokenVerifier

if TYPE_CHECKING:
    from .protocols import JwksSource

_SIGNING_ALGORITHM = "RS256"
_RSA_SHA256 = RSAAlgorithm(RSAAlgorithm.SHA256)


@dataclass(frozen=True, slots=True)
class JWTVerifyOptions:
    """Configuration for JWT validation rules.

    Attributes:
        issuer: Expected ``iss`` claim, compared by exact string equality.
            If None, no token can pass (fails closed).

        audience: Expected ``aud`` claim, compared by exact string equality.
            A list-valued ``aud`` never matches. If None, no token can pass.
    """

    issuer: str | None
    audience: str | None


class JWTVerifier(TokenVerifier):
    """RS256 JWT verification against a JWKS fetched per call.

    Thread Safety:
        Stateless apart from the frozen options; safe to share between
        requests as long as the JwksSource is.

    Example:
        ```python
        verifier = JWTVerifier(
            jwks=RemoteJWKSFetcher("https://issuer.example.com/jwks.json"),
            options=JWTVerifyOptions(
                issuer="https://issuer.example.com/",
                audience="links-admin",
            ),
        )

        try:
            claims = verifier.verify(raw_token)
        except InvalidToken:
            ...
        ```
    """

    def __init__(self, jwks: JwksSource, options: JWTVerifyOptions) -> None:
        self._jwks = jwks
        self._opt = options

    def verify(self, token: str) -> Claims:
        """Verify a JWT and return its decoded claims.

        The JWKS is fetched after the header has been parsed, so malformed
        tokens are refused without any network traffic.

        Raises:
            MalformedToken, KeyNotFound, InvalidSignature, InvalidIssuer,
            InvalidAudience, TokenExpired, TokenNotYetValid: see module docs.
            JwksUnavailable: if the key set cannot be fetched.
        """
        segments = token.split(".")
        if len(segments) != 3:
            raise MalformedToken(f"Expected 3 token segments, got {len(segments)}")
        header_segment, payload_segment, signature_segment = segments

        header = _decode_json_segment(header_segment, "header")
        kid = header.get("kid")
        if not kid or not isinstance(kid, str):
            raise MalformedToken("Token header missing required 'kid' or 'kid' is not a string")

        key = _import_key(self._jwks.fetch(), kid)

        try:
            signature = base64url_decode(signature_segment)
        except (ValueError, TypeError) as e:
            raise InvalidSignature("Signature segment is not valid base64url") from e

        signing_input = f"{header_segment}.{payload_segment}".encode("utf-8")
        if not _RSA_SHA256.verify(signing_input, key, signature):
            raise InvalidSignature("Signature verification failed")

        claims = _decode_json_segment(payload_segment, "payload")
        self._validate_claims(claims)
        return claims

    def _validate_claims(self, claims: dict[str, Any]) -> None:
        issuer = claims.get("iss")
        if self._opt.issuer is None or issuer != self._opt.issuer:
            raise InvalidIssuer(f"Unexpected issuer {issuer!r}")

        audience = claims.get("aud")
        if self._opt.audience is None or audience != self._opt.audience:
            raise InvalidAudience(f"Unexpected audience {audience!r}")

        now = time.time()

        exp = _numeric_claim(claims, "exp")
        if exp is not None and exp < now:
            raise TokenExpired("Token has expired")

        nbf = _numeric_claim(claims, "nbf")
        if nbf is not None and nbf > now:
            raise TokenNotYetValid("Token is not yet valid")


def _decode_json_segment(segment: str, name: str) -> dict[str, Any]:
    try:
        decoded = json.loads(base64url_decode(segment))
    except (ValueError, TypeError) as e:
        raise MalformedToken(f"Token {name} is not base64url-encoded JSON") from e

    if not isinstance(decoded, dict):
        raise MalformedToken(f"Token {name} is not a JSON object")
    return decoded


def _import_key(jwks: Jwks, kid: str) -> RSAPublicKey:
    jwk_data = next(
        (k for k in jwks["keys"] if isinstance(k, dict) and k.get("kid") == kid),
        None,
    )
    if jwk_data is None:
        raise KeyNotFound(f"Key {kid!r} not found in JWKS")

    try:
        key = PyJWK.from_dict(jwk_data, algorithm=_SIGNING_ALGORITHM).key
    except (PyJWTError, ValueError) as e:
        raise KeyNotFound(f"Key {kid!r} is not a usable RSA key") from e

    if not isinstance(key, RSAPublicKey):
        raise KeyNotFound(f"Key {kid!r} is not an RSA public key")
    return key


def _numeric_claim(claims: Claims, name: str) -> float | None:
    value = claims.get(name)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise MalformedToken(f"Claim {name!r} must be a number")
    return value
