"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging

from deckproxy.config import Settings, get_settings
from deckproxy.store import LocalFileUserStore, RemoteKvUserStore, UserStore

logger = logging.getLogger(__name__)

_user_store: UserStore | None = None


def build_user_store(settings: Settings) -> UserStore:
    if settings.use_in_memory_backends:
        return LocalFileUserStore()
    if settings.use_remote_store:
        return RemoteKvUserStore(
            url=settings.kv_rest_api_url or "",
            token=settings.kv_rest_api_token or "",
        )
    return LocalFileUserStore(settings.local_db_path)


def init_user_store(settings: Settings) -> UserStore:
    """
    Choose the process-wide user store. Called from create_app() so a bad
    backend configuration fails at startup rather than on the first request.
    """
    global _user_store
    _user_store = build_user_store(settings)
    logger.info("Using user store %s", type(_user_store).__name__)
    return _user_store


def get_user_store() -> UserStore:
    if _user_store is None:
        return init_user_store(get_settings())
    return _user_store
