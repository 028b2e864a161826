"""
Public blob reads and JWT-protected short links behind one Flask endpoint.

High-level flow (per request)
-----------------------------
1. `dispatch` derives the key from the path and branches on the method.
2. GET: `LinkStore.lookup(key)`; a hit redirects (302), a miss falls through
   to the blob store (200 with body, metadata headers and ETag, or 404).
3. POST/PUT/DELETE: 503 without a link store, then `AuthExtension.authenticate()`:
   - `BearerExtractor` pulls the raw JWT from `Authorization: Bearer <token>`
   - `JWTVerifier.verify(token)` parses the header, fetches the JWKS through
     `RemoteJWKSFetcher`, checks the RS256 signature, `iss`, `aud`, `exp`, `nbf`
4. The verified `sub` claim stamps `createdBy` / `updatedBy` on the record.

Security notes
--------------
- Never trust claims until signature verification succeeds.
- Only RS256 is accepted; the token's `alg` header is ignored.
- `iss` and `aud` are compared by exact string equality.

Example usage
-------------

.. code-block:: python

    from public_bucket import (
        AuthExtension,
        EdgeContext,
        InMemoryBlobStore,
        InMemoryKeyValueStore,
        JWTVerifier,
        JWTVerifyOptions,
        LinkStore,
        RemoteJWKSFetcher,
        create_app,
    )

    verifier = JWTVerifier(
        RemoteJWKSFetcher("https://tenant.example.com/.well-known/jwks.json"),
        JWTVerifyOptions(issuer="https://tenant.example.com/", audience="links"),
    )
    app = create_app(
        EdgeContext(
            blob_store=InMemoryBlobStore(),
            links=LinkStore(InMemoryKeyValueStore()),
            auth=AuthExtension(verifier),
        )
    )
"""

# App factory
from .app import create_app

# Configuration
from .config import DOCS_URL, EdgeContext, Settings, build_context

# Errors
from .errors import (
    AuthError,
    DataStoreError,
    InvalidAudience,
    InvalidIssuer,
    InvalidSignature,
    InvalidToken,
    JwksUnavailable,
    KeyNotFound,
    LinkConflict,
    LinkNotFound,
    LinkStoreError,
    MalformedToken,
    MissingToken,
    TokenExpired,
    TokenNotYetValid,
)

# Extractors
from .extractors import BearerExtractor

# Flask extension
from .flask_extension import AuthExtension

# Key providers
from .key_providers import RemoteJWKSFetcher

# Link store
from .links import LinkStore, ShortLinkRecord

# Protocols
from .protocols import (
    BlobObject,
    BlobStore,
    Claims,
    Extractor,
    Jwks,
    JwksSource,
    KeyValueStore,
    TokenVerifier,
)

# Store bindings
from .stores import InMemoryBlobStore, InMemoryKeyValueStore, RedisKeyValueStore, S3BlobStore

# Verifier
from .verifier import JWTVerifier, JWTVerifyOptions

__all__ = [
    # App factory
    "create_app",
    # Configuration
    "DOCS_URL",
    "EdgeContext",
    "Settings",
    "build_context",
    # Errors
    "AuthError",
    "DataStoreError",
    "InvalidAudience",
    "InvalidIssuer",
    "InvalidSignature",
    "InvalidToken",
    "JwksUnavailable",
    "KeyNotFound",
    "LinkConflict",
    "LinkNotFound",
    "LinkStoreError",
    "MalformedToken",
    "MissingToken",
    "TokenExpired",
    "TokenNotYetValid",
    # Extractors
    "BearerExtractor",
    # Flask extension
    "AuthExtension",
    # Key providers
    "RemoteJWKSFetcher",
    # Link store
    "LinkStore",
    "ShortLinkRecord",
    # Protocols
    "BlobObject",
    "BlobStore",
    "Claims",
    "Extractor",
    "Jwks",
    "JwksSource",
    "KeyValueStore",
    "TokenVerifier",
    # Store bindings
    "InMemoryBlobStore",
    "InMemoryKeyValueStore",
    "RedisKeyValueStore",
    "S3BlobStore",
    # Verifier
    "JWTVerifier",
    "JWTVerifyOptions",
]
