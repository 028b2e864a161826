"""Runtime configuration.

Settings are read once at startup from the environment (and a ``.env`` file,
through python-dotenv) into a frozen ``Settings`` object, then turned into the
``EdgeContext`` the Flask app is built around. Nothing reads the environment
after that.

Recognised variables:

    JWKS_URL       JWKS endpoint used to verify bearer tokens
    JWT_ISSUER     expected ``iss`` claim (exact match)
    JWT_AUDIENCE   expected ``aud`` claim (exact match)
    PUBLIC_BUCKET  S3 bucket serving public objects
    SHORT_LINKS    redis URL holding short links; unset disables mutations (503)
    LOG_LEVEL      root log level (default INFO)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from dotenv import load_dotenv

from .flask_extension import AuthExtension
from .key_providers import RemoteJWKSFetcher
from .links import LinkStore
from .stores import InMemoryBlobStore, RedisKeyValueStore, S3BlobStore
from .verifier import JWTVerifier, JWTVerifyOptions

if TYPE_CHECKING:
    from .protocols import BlobStore

DOCS_URL: Final[str] = "https://github.com/pkoch/pkoch-public-bucket"
"""Where ``GET /`` redirects to."""


@dataclass(frozen=True, slots=True)
class Settings:
    """Process-wide configuration values, fixed at startup."""

    jwks_url: str | None = None
    jwt_issuer: str | None = None
    jwt_audience: str | None = None
    public_bucket: str | None = None
    short_links_url: str | None = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``environ`` (default: ``os.environ`` plus ``.env``).

        Blank values count as unset.
        """
        if environ is None:
            load_dotenv()
            environ = os.environ

        def _get(name: str) -> str | None:
            value = environ.get(name, "").strip()
            return value or None

        return cls(
            jwks_url=_get("JWKS_URL"),
            jwt_issuer=_get("JWT_ISSUER"),
            jwt_audience=_get("JWT_AUDIENCE"),
            public_bucket=_get("PUBLIC_BUCKET"),
            short_links_url=_get("SHORT_LINKS"),
            log_level=(_get("LOG_LEVEL") or "INFO").upper(),
        )


@dataclass(frozen=True, slots=True)
class EdgeContext:
    """Everything a request needs, passed explicitly instead of read from globals.

    Attributes:
        blob_store: Public object store used on the GET fallback path.
        links: Short link store, or None when no key-value binding exists.
        auth: Auth gate guarding POST/PUT/DELETE.
        docs_url: Redirect target of ``GET /``.
    """

    blob_store: BlobStore
    links: LinkStore | None
    auth: AuthExtension
    docs_url: str = DOCS_URL


def build_context(settings: Settings) -> EdgeContext:
    """Wire the real bindings (S3, redis, remote JWKS) from settings."""
    verifier = JWTVerifier(
        RemoteJWKSFetcher(settings.jwks_url),
        JWTVerifyOptions(issuer=settings.jwt_issuer, audience=settings.jwt_audience),
    )

    if settings.public_bucket:
        blob_store: BlobStore = S3BlobStore(settings.public_bucket)
    else:
        blob_store = InMemoryBlobStore()

    links = (
        LinkStore(RedisKeyValueStore.from_url(settings.short_links_url))
        if settings.short_links_url
        else None
    )

    return EdgeContext(blob_store=blob_store, links=links, auth=AuthExtension(verifier))
