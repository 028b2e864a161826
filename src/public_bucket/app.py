from __future__ import annotations

import logging

from flask import Flask, Response
from werkzeug.exceptions import HTTPException

from .config import EdgeContext, Settings, build_context
from .dispatcher import CONTEXT_KEY, edge, method_not_allowed
from .errors import DataStoreError

logger = logging.getLogger(__name__)


def create_app(context: EdgeContext | None = None, settings: Settings | None = None) -> Flask:
    """
    Create the Flask application around an EdgeContext.

    Args:
        context: Prebuilt context (tests pass in-memory stores and fake
            verifiers here). Built from ``settings`` when omitted.
        settings: Used only when ``context`` is None; defaults to
            ``Settings.from_env()``.

    Returns:
        Flask: Configured Flask application instance
    """
    if context is None:
        context = build_context(settings or Settings.from_env())

    app = Flask(__name__)
    app.extensions[CONTEXT_KEY] = context
    context.auth.init_app(app)
    app.register_blueprint(edge)

    @app.errorhandler(405)
    def not_allowed(error: HTTPException) -> Response:
        return method_not_allowed()

    @app.errorhandler(DataStoreError)
    def store_unavailable(error: DataStoreError) -> Response:
        logger.exception("Short link store failure. Responding with 500.")
        return Response("Short link store unavailable", status=500, mimetype="text/plain")

    @app.errorhandler(HTTPException)
    def plain_text_error(error: HTTPException) -> Response:
        """Render every aborted request as a plain-text body."""
        return Response(error.description, status=error.code, mimetype="text/plain")

    return app
