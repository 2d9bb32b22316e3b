"""
HTTP routes for the proxy API.

Every client call is a POST to /proxy whose JSON body names an action; the
remaining body fields are that action's payload.
"""

from __future__ import annotations

import logging
from typing import Callable, Type, TypeVar

import pydantic
from fastapi import APIRouter, Depends, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from deckproxy import accounts
from deckproxy.config import Settings, get_settings
from deckproxy.dependencies import get_user_store
from deckproxy.schemas import (
    AudioPayload,
    CredentialsPayload,
    GeminiGeneratePayload,
    GeminiGenerateResponse,
    LoginPayload,
    MessageResponse,
    SyncDataResponse,
    SyncMergePayload,
    UsernamePayload,
    WordPayload,
)
from deckproxy.store import UserStore
from lookups import fetch_utils
from models import gemini
from shared.errors import DeckProxyError, InternalError, ValidationError
from shared.types import DataBundle
from sync.engine import SyncEngine

logger = logging.getLogger(__name__)

router = APIRouter()

AUDIO_CACHE_CONTROL = "s-maxage=86400, stale-while-revalidate"

P = TypeVar("P", bound=pydantic.BaseModel)
ActionHandler = Callable[[dict, UserStore, Settings], Response]


def _parse(model: Type[P], payload: dict, message: str) -> P:
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as e:
        details = e.errors(include_url=False, include_context=False)
        raise ValidationError(message, details=details) from e


def _json(model: pydantic.BaseModel, status_code: int = 200) -> JSONResponse:
    return JSONResponse(model.model_dump(), status_code=status_code)


def _error_response(error: DeckProxyError) -> JSONResponse:
    return JSONResponse(error.to_body(), status_code=error.status_code)


def handle_ping(payload: dict, store: UserStore, settings: Settings) -> Response:
    return _json(MessageResponse(message="pong"))


def handle_gemini_generate(
    payload: dict, store: UserStore, settings: Settings
) -> Response:
    request = _parse(GeminiGeneratePayload, payload, "Model is required.")
    result = gemini.generate(
        request.model,
        request.contents,
        request.config,
        api_key=settings.gemini_api_key,
    )
    return _json(GeminiGenerateResponse(**result))


def handle_dictionary_free(
    payload: dict, store: UserStore, settings: Settings
) -> Response:
    request = _parse(WordPayload, payload, "Word is required.")
    result = fetch_utils.lookup_free_dictionary(request.word)
    return JSONResponse(result.body, status_code=result.status_code)


def handle_dictionary_mw(
    payload: dict, store: UserStore, settings: Settings
) -> Response:
    request = _parse(WordPayload, payload, "Word is required.")
    result = fetch_utils.lookup_merriam_webster(request.word, settings.mw_api_key)
    return JSONResponse(result.body, status_code=result.status_code)


def handle_fetch_audio(payload: dict, store: UserStore, settings: Settings) -> Response:
    request = _parse(AudioPayload, payload, "URL is required.")
    audio = fetch_utils.fetch_audio(request.url)
    return Response(
        content=audio.content,
        media_type=audio.content_type,
        headers={"Cache-Control": AUDIO_CACHE_CONTROL},
    )


def handle_register(payload: dict, store: UserStore, settings: Settings) -> Response:
    request = _parse(CredentialsPayload, payload, "Required fields missing")
    accounts.register(store, request.username, request.password)
    return _json(MessageResponse(message="Registered"), status_code=201)


def handle_login(payload: dict, store: UserStore, settings: Settings) -> Response:
    request = _parse(LoginPayload, payload, "Required fields missing")
    accounts.login(store, request.username, request.password)
    return _json(MessageResponse(message="Logged in"))


def handle_sync_load(payload: dict, store: UserStore, settings: Settings) -> Response:
    request = _parse(UsernamePayload, payload, "Required fields missing")
    bundle = SyncEngine(store).load(request.username)
    return _json(SyncDataResponse(data=bundle.to_json() if bundle else None))


def handle_sync_merge(payload: dict, store: UserStore, settings: Settings) -> Response:
    request = _parse(SyncMergePayload, payload, "Required fields missing")
    merged = SyncEngine(store).merge(
        request.username, DataBundle.from_json(request.data)
    )
    return _json(SyncDataResponse(data=merged.to_json()))


ACTION_HANDLERS: dict[str, ActionHandler] = {
    "ping": handle_ping,
    "ping-free-dict": handle_ping,
    "ping-mw": handle_ping,
    "gemini-generate": handle_gemini_generate,
    "dictionary-free": handle_dictionary_free,
    "dictionary-mw": handle_dictionary_mw,
    "fetch-audio": handle_fetch_audio,
    "auth-register": handle_register,
    "auth-login": handle_login,
    "sync-load": handle_sync_load,
    "sync-merge": handle_sync_merge,
}


@router.post("/proxy")
async def proxy(
    request: Request,
    store: UserStore = Depends(get_user_store),
    settings: Settings = Depends(get_settings),
):
    """
    Dispatch a proxy action. Every failure becomes a JSON error body here.
    """
    try:
        body = await request.json()
    except ValueError:
        return _error_response(ValidationError("Request body must be JSON"))
    if not isinstance(body, dict):
        return _error_response(ValidationError("Request body must be an object"))

    action = body.pop("action", None)
    handler = ACTION_HANDLERS.get(action) if isinstance(action, str) else None
    if handler is None:
        return _error_response(ValidationError("Invalid action"))

    try:
        # Handlers block on upstream HTTP and store I/O.
        return await run_in_threadpool(handler, body, store, settings)
    except DeckProxyError as e:
        return _error_response(e)
    except Exception as e:
        logger.exception("Route error for action %s", action)
        return _error_response(InternalError(str(e) or type(e).__name__))
