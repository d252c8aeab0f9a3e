# price_tracker/services/liveness.py

"""Minimal HTTP liveness endpoint for container hosts."""

import logging
import threading
from collections.abc import Callable
from typing import Any

import uvicorn
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

logger = logging.getLogger("price_tracker.liveness")

StatusProvider = Callable[[], dict[str, Any]]


def create_liveness_app(status_provider: StatusProvider) -> FastAPI:
    """Build the app. It only ever reads the status snapshot."""
    app = FastAPI(title="price_tracker liveness", docs_url=None, redoc_url=None)

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        return "Tracker alive"

    @app.get("/status")
    async def status() -> dict[str, Any]:
        return status_provider()

    return app


def start_liveness_server(
    app: FastAPI, host: str, port: int
) -> threading.Thread:
    """Serve *app* with uvicorn on a daemon thread and return the thread."""
    config = uvicorn.Config(app, host=host, port=port, log_level="warning")
    server = uvicorn.Server(config)
    thread = threading.Thread(
        target=server.run, name="liveness-server", daemon=True
    )
    thread.start()
    logger.info("Liveness server listening on %s:%d", host, port)
    return thread
