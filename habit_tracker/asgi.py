"""ASGI entrypoint: ``uvicorn habit_tracker.asgi:app``."""

import logging

from .application import create_app
from .core.config import LOG_LEVEL

logging.basicConfig(level=LOG_LEVEL)

app = create_app()

__all__ = ["app", "create_app"]
