"""Request routing for the single ``/<key>`` endpoint family.

The key is the request path without its leading ``/``; nothing else is
stripped, so ``/docs/v1`` addresses the key ``docs/v1``.

    GET    /        302 to the documentation URL
    GET    /<key>   302 to a short link target, else the blob, else 404
    POST   /        create a short link from {"key", "url"}      (auth)
    PUT    /        replace a short link from {"key", "url"}     (auth)
    DELETE /<key>   remove a short link                          (auth)
    *               405, Allow: GET, POST, PUT, DELETE

Mutations check, in order: link store configured (503), bearer token (401),
request shape (400), store state (409 / 404).
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Final

from flask import Blueprint, Response, abort, current_app, jsonify, request

from .config import EdgeContext
from .errors import LinkConflict, LinkNotFound
from .links import LinkStore

logger = logging.getLogger(__name__)

CONTEXT_KEY: Final[str] = "public_bucket"
"""Flask extensions registry key for the EdgeContext."""

ALLOWED_METHODS: Final[tuple[str, ...]] = ("GET", "POST", "PUT", "DELETE")

# Methods routed to `dispatch` so that every refusal goes through the same 405.
_ROUTED_METHODS: Final[list[str]] = [*ALLOWED_METHODS, "HEAD", "OPTIONS", "PATCH"]

DEFAULT_CONTENT_TYPE: Final[str] = "application/octet-stream"

edge = Blueprint("edge", __name__)


def get_context() -> EdgeContext:
    return current_app.extensions[CONTEXT_KEY]


def method_not_allowed() -> Response:
    return Response(
        "Method Not Allowed",
        status=405,
        headers={"Allow": ", ".join(ALLOWED_METHODS)},
        mimetype="text/plain",
    )


@edge.route(
    "/",
    defaults={"key": ""},
    methods=_ROUTED_METHODS,
    provide_automatic_options=False,
    merge_slashes=False,
)
@edge.route(
    "/<path:key>",
    methods=_ROUTED_METHODS,
    provide_automatic_options=False,
    merge_slashes=False,
)
def dispatch(key: str) -> Any:
    handler = _HANDLERS.get(request.method)
    if handler is None:
        logger.info("Unsupported method %s. Responding with 405.", request.method)
        return method_not_allowed()
    return handler(get_context(), request_key())


def request_key() -> str:
    """The request path minus exactly one leading ``/``.

    Werkzeug's routing strips every leading slash, so the key is read from
    ``PATH_INFO`` directly: ``//x`` addresses ``/x``.
    """
    path = request.environ.get("PATH_INFO", "")
    path = path.encode("latin-1").decode("utf-8", "replace")
    return path[1:] if path.startswith("/") else path


def _get(ctx: EdgeContext, key: str) -> Any:
    if not key:
        return Response(
            f"I need a key. Check the source at {ctx.docs_url}\n",
            status=302,
            headers={"Location": ctx.docs_url},
            mimetype="text/plain",
        )

    if ctx.links is not None:
        record = ctx.links.lookup(key)
        if record is not None:
            logger.info(
                "Redirecting to short link target. Responding with 302.",
                extra={"key": key, "event": "SHORT_LINK_REDIRECT"},
            )
            return Response(status=302, headers={"Location": record.url})

    blob = ctx.blob_store.get(key)
    if blob is None:
        logger.info(
            "Object not found. Responding with 404.",
            extra={"key": key, "event": "OBJECT_NOT_FOUND"},
        )
        abort(404, description=f"Object Not Found: {key}")

    headers = dict(blob.http_metadata)
    headers.setdefault("Content-Type", DEFAULT_CONTENT_TYPE)
    headers["ETag"] = blob.etag
    return Response(blob.body, status=200, headers=headers)


def _create(ctx: EdgeContext, key: str) -> Any:
    links = _require_links(ctx)
    claims = ctx.auth.authenticate()
    link_key, url = _link_payload()

    try:
        links.create(link_key, url, _subject(claims))
    except LinkConflict:
        logger.info(
            "Short link already exists. Responding with 409.",
            extra={"key": link_key, "event": "SHORT_LINK_CONFLICT"},
        )
        abort(409, description="Short link already exists")

    logger.info(
        "Short link created. Responding with 201.",
        extra={"key": link_key, "event": "SHORT_LINK_CREATED"},
    )
    return jsonify(success=True, key=link_key, url=url), 201


def _replace(ctx: EdgeContext, key: str) -> Any:
    links = _require_links(ctx)
    claims = ctx.auth.authenticate()
    link_key, url = _link_payload()

    try:
        links.replace(link_key, url, _subject(claims))
    except LinkNotFound:
        logger.info(
            "Short link not found for update. Responding with 404.",
            extra={"key": link_key, "event": "SHORT_LINK_NOT_FOUND"},
        )
        abort(404, description="Short link not found")

    logger.info(
        "Short link updated. Responding with 200.",
        extra={"key": link_key, "event": "SHORT_LINK_UPDATED"},
    )
    return jsonify(success=True, key=link_key, url=url), 200


def _delete(ctx: EdgeContext, key: str) -> Any:
    links = _require_links(ctx)
    ctx.auth.authenticate()

    if not key:
        abort(400, description="Missing key")

    try:
        links.remove(key)
    except LinkNotFound:
        logger.info(
            "Short link not found for delete. Responding with 404.",
            extra={"key": key, "event": "SHORT_LINK_NOT_FOUND"},
        )
        abort(404, description="Short link not found")

    logger.info(
        "Short link deleted. Responding with 200.",
        extra={"key": key, "event": "SHORT_LINK_DELETED"},
    )
    return jsonify(success=True, key=key), 200


_HANDLERS: Final[dict[str, Callable[[EdgeContext, str], Any]]] = {
    "GET": _get,
    "POST": _create,
    "PUT": _replace,
    "DELETE": _delete,
}


def _require_links(ctx: EdgeContext) -> LinkStore:
    if ctx.links is None:
        abort(503, description="Short links not configured")
    return ctx.links


def _link_payload() -> tuple[str, str]:
    """Return ``(key, url)`` from the JSON body, or abort with 400."""
    body = request.get_json(force=True, silent=True)
    if not isinstance(body, dict):
        abort(400, description="Invalid request body")

    key = body.get("key")
    url = body.get("url")
    if not key or not url or not isinstance(key, str) or not isinstance(url, str):
        abort(400, description="Missing required fields: key and url")
    return key, url


def _subject(claims: Any) -> str | None:
    sub = claims.get("sub")
    return sub if isinstance(sub, str) else None
