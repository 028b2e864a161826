import json
import time
from collections.abc import Callable
from typing import Any

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from flask import Flask
from jwt.algorithms import RSAAlgorithm

from public_bucket import (
    AuthExtension,
    EdgeContext,
    InMemoryBlobStore,
    InMemoryKeyValueStore,
    JWTVerifier,
    JWTVerifyOptions,
    LinkStore,
    create_app,
)

ISSUER = "https://issuer.example.com/"
AUDIENCE = "links-admin"
KID = "kid1"


@pytest.fixture()
def app():
    app = Flask(__name__)
    app.config["TESTING"] = True
    return app


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_private_key() -> rsa.RSAPrivateKey:
    """A key that is not published in the JWKS."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def public_jwk(private_key: rsa.RSAPrivateKey, kid: str) -> dict[str, Any]:
    jwk = json.loads(RSAAlgorithm.to_jwk(private_key.public_key()))
    jwk.update({"kid": kid, "alg": "RS256", "use": "sig"})
    return jwk


@pytest.fixture(scope="session")
def jwks_document(rsa_private_key: rsa.RSAPrivateKey) -> dict[str, Any]:
    return {"keys": [public_jwk(rsa_private_key, KID)]}


@pytest.fixture
def make_token(rsa_private_key: rsa.RSAPrivateKey) -> Callable[..., str]:
    """
    Factory fixture that returns a function.

    Usage in tests:
        token = make_token(sub="u1")
        token = make_token(aud="someone-else", kid="kid1")
    """

    def _make(*, kid: str = KID, key: Any = None, **overrides: Any) -> str:
        now = int(time.time())
        claims: dict[str, Any] = {
            "iss": ISSUER,
            "aud": AUDIENCE,
            "sub": "user-1",
            "iat": now,
            "exp": now + 300,
        }
        claims.update(overrides)
        claims = {name: value for name, value in claims.items() if value is not None}
        return jwt.encode(
            claims,
            key or rsa_private_key,
            algorithm="RS256",
            headers={"kid": kid},
        )

    return _make


class StaticJwks:
    """JwksSource returning a fixed document and counting fetches."""

    def __init__(self, document: dict[str, Any]):
        self.document = document
        self.calls = 0

    def fetch(self) -> dict[str, Any]:
        self.calls += 1
        return self.document


@pytest.fixture
def static_jwks(jwks_document: dict[str, Any]) -> StaticJwks:
    return StaticJwks(jwks_document)


@pytest.fixture
def verifier(static_jwks: StaticJwks) -> JWTVerifier:
    return JWTVerifier(static_jwks, JWTVerifyOptions(issuer=ISSUER, audience=AUDIENCE))


@pytest.fixture
def kv() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def edge_app(verifier: JWTVerifier, kv: InMemoryKeyValueStore, blob_store: InMemoryBlobStore) -> Flask:
    context = EdgeContext(
        blob_store=blob_store,
        links=LinkStore(kv),
        auth=AuthExtension(verifier),
    )
    app = create_app(context)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(edge_app: Flask):
    return edge_app.test_client()


@pytest.fixture
def auth_headers(make_token: Callable[..., str]) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token()}"}


class FakeRedis:
    """
    Minimal redis stub for RedisKeyValueStore tests.
    Stores bytes under keys and supports set(nx/xx), get and delete.
    """

    def __init__(self):
        self._store: dict[str, bytes] = {}

    def get(self, key: str):
        return self._store.get(key)

    def set(self, key: str, value: str | bytes, nx: bool = False, xx: bool = False):
        if nx and key in self._store:
            return None
        if xx and key not in self._store:
            return None
        if isinstance(value, str):
            value = value.encode("utf-8")
        self._store[key] = value
        return True

    def delete(self, *keys: str) -> int:
        return sum(1 for key in keys if self._store.pop(key, None) is not None)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()
