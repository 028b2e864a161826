"""
Tests for the AuthExtension auth gate.

Tests token extraction, verification and the 401 mapping inside a Flask view.
"""

from typing import Any

from flask import Flask

import public_bucket as m


class OkVerifier(m.TokenVerifier):
    """Mock TokenVerifier that accepts 'GOOD' tokens."""

    def __init__(self, error: m.AuthError | None = None):
        self.error = error or m.InvalidToken("Invalid token")
        self.tokens: list[str] = []

    def verify(self, token: str) -> dict[str, Any]:
        self.tokens.append(token)
        if token != "GOOD":
            raise self.error
        return {"sub": "u1", "iss": "iss", "aud": "aud"}


def _protected(app: Flask, auth: m.AuthExtension) -> None:
    auth.init_app(app)

    @app.post("/x")
    def x():  # type: ignore
        claims = auth.authenticate()
        return {"sub": claims["sub"]}


class TestAuthExtensionBasics:
    """Test basic AuthExtension functionality."""

    def test_missing_token_returns_401(self, app: Flask):
        """Missing token should return 401 without calling the verifier."""
        verifier = OkVerifier()
        _protected(app, m.AuthExtension(verifier=verifier))

        r = app.test_client().post("/x")
        assert r.status_code == 401
        assert b"No token provided" in r.data
        assert verifier.tokens == []

    def test_wrong_scheme_returns_401(self, app: Flask):
        _protected(app, m.AuthExtension(verifier=OkVerifier()))

        r = app.test_client().post("/x", headers={"Authorization": "Token GOOD"})
        assert r.status_code == 401

    def test_invalid_token_returns_401(self, app: Flask):
        """Invalid token should return 401."""
        _protected(app, m.AuthExtension(verifier=OkVerifier()))

        r = app.test_client().post("/x", headers={"Authorization": "Bearer BAD"})
        assert r.status_code == 401
        assert b"Invalid token" in r.data

    def test_verification_detail_is_not_leaked(self, app: Flask):
        verifier = OkVerifier(error=m.InvalidAudience("Unexpected audience 'secret-aud'"))
        _protected(app, m.AuthExtension(verifier=verifier))

        r = app.test_client().post("/x", headers={"Authorization": "Bearer BAD"})
        assert r.status_code == 401
        assert b"secret-aud" not in r.data

    def test_jwks_outage_returns_401(self, app: Flask):
        verifier = OkVerifier(error=m.JwksUnavailable("Failed to fetch JWKS"))
        _protected(app, m.AuthExtension(verifier=verifier))

        r = app.test_client().post("/x", headers={"Authorization": "Bearer BAD"})
        assert r.status_code == 401


class TestAuthExtensionClaimsAccess:
    """Test accessing verified claims."""

    def test_valid_token_returns_claims(self, app: Flask):
        verifier = OkVerifier()
        _protected(app, m.AuthExtension(verifier=verifier))

        r = app.test_client().post("/x", headers={"Authorization": "Bearer GOOD"})
        assert r.status_code == 200
        assert r.get_json() == {"sub": "u1"}
        assert verifier.tokens == ["GOOD"]

    def test_init_app_registers_extension(self, app: Flask):
        auth = m.AuthExtension(verifier=OkVerifier())
        auth.init_app(app)

        assert app.extensions["auth_extension"] is auth

    def test_custom_extractor_is_used(self, app: Flask):
        class HeaderExtractor:
            def extract(self) -> str:
                return "GOOD"

        verifier = OkVerifier()
        _protected(app, m.AuthExtension(verifier=verifier, extractor=HeaderExtractor()))

        r = app.test_client().post("/x")
        assert r.status_code == 200
        assert verifier.tokens == ["GOOD"]
