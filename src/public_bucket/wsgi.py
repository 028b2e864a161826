"""WSGI entry point: ``gunicorn public_bucket.wsgi:app``."""

from .app import create_app
from .config import Settings
from .logging import initialize_logging

settings = Settings.from_env()
initialize_logging(settings.log_level)

app = create_app(settings=settings)
