"""
Farm Care Tracker: Entry Point.

Single entry point: `python main.py` serves the HTTP API with uvicorn.
"""

import logging

import uvicorn

from src.config import settings

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

from src.api.app import app

if __name__ == "__main__":
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)
