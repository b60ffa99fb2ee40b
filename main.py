"""ASGI entry point: ``uvicorn main:app``."""
from __future__ import annotations

import logging

from elbsim.app import create_app
from elbsim.settings import settings

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()
