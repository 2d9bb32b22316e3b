"""
FastAPI application entry point for the proxy and sync service.
"""

from __future__ import annotations

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

from deckproxy.config import get_settings
from deckproxy.dependencies import init_user_store
from deckproxy.logging_config import configure_logging
from deckproxy.routes import router

logger = logging.getLogger(__name__)


def _mount_frontend(app: FastAPI, static_dir: str) -> None:
    """Serve the built frontend, falling back to index.html for SPA routes."""
    index_path = os.path.join(static_dir, "index.html")

    @app.get("/{full_path:path}", include_in_schema=False)
    def spa_fallback(full_path: str):
        candidate = os.path.realpath(os.path.join(static_dir, full_path))
        root = os.path.realpath(static_dir)
        if full_path and candidate.startswith(root + os.sep) and os.path.isfile(
            candidate
        ):
            return FileResponse(candidate)
        return FileResponse(index_path)


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Deck Proxy", version="0.1.0")
    app.state.user_store = init_user_store(settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router, prefix=settings.api_prefix)

    if os.path.isfile(os.path.join(settings.static_dir, "index.html")):
        _mount_frontend(app, settings.static_dir)
    else:
        logger.info("No frontend build at %s; serving API only", settings.static_dir)
    return app


app = create_app()


def main() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
