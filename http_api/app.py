"""
FastAPI HTTP Transport for the Word Store

Provides the REST surface over the word store:
- PUT /words - store a word and its definition (urlencoded form)
- GET /words - list all stored words as a JSON object
- GET /health - connection supervisor metrics
- / - static files from the public directory bundled with this package

Store, Redis and socket errors are returned as HTTP 500 with the error detail
as a plain-text body.
"""

import functools
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from redis.exceptions import RedisError

from config import WordStoreSettings, load_settings, resolve_endpoint_uris
from connection_management import (
    BackoffPolicy,
    ConnectionSupervisor,
    EndpointList,
    create_redis_client,
)
from word_operations import WordStore
from word_store_exceptions import InvalidRequestError, WordStoreError

logger = logging.getLogger(__name__)

PACKAGE_DIR = Path(__file__).resolve().parent


def build_supervisor(settings: WordStoreSettings) -> ConnectionSupervisor:
    """Create the connection supervisor described by ``settings``."""
    endpoints = EndpointList.from_uris(resolve_endpoint_uris(settings.redis))
    policy = BackoffPolicy(
        base_interval=settings.retry.base_interval,
        multiplier=settings.retry.multiplier,
        max_retries=settings.retry.max_retries,
    )
    return ConnectionSupervisor(
        endpoints,
        functools.partial(create_redis_client, settings=settings.redis),
        policy=policy,
        health_check_interval=settings.redis.health_check_interval,
    )


def resolve_static_dir(static_dir: str) -> Path:
    """
    Locate the static file directory.

    Absolute paths and relative paths present under the working directory
    are used as given. Other relative paths are looked up next to this
    module, where the bundled ``public`` directory is installed.
    """
    path = Path(static_dir)
    if path.is_absolute() or path.is_dir():
        return path
    return PACKAGE_DIR / path


def get_store(request: Request) -> WordStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise RuntimeError("Word store not initialized")
    return store


async def _error_response(request: Request, exc: Exception) -> PlainTextResponse:
    logger.error(f"{request.method} {request.url.path} failed: {exc!r}")
    return PlainTextResponse(str(exc) or exc.__class__.__name__, status_code=500)


def create_app(
    settings: Optional[WordStoreSettings] = None,
    supervisor: Optional[ConnectionSupervisor] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Service configuration; loaded from the environment when None
        supervisor: Pre-built connection supervisor. When None one is built
            from ``settings`` at startup.

    Returns:
        FastAPI application instance
    """
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        active = supervisor or build_supervisor(settings)
        await active.start()
        app.state.supervisor = active
        app.state.store = WordStore(active, hash_key=settings.redis.hash_key)
        logger.info(f"Word store service started on {active.active_endpoint.display}")
        try:
            yield
        finally:
            await active.close()
            logger.info("Word store service stopped")

    app = FastAPI(title="Word Store", lifespan=lifespan)
    app.add_exception_handler(WordStoreError, _error_response)
    app.add_exception_handler(RedisError, _error_response)
    app.add_exception_handler(OSError, _error_response)

    @app.put("/words")
    async def put_word(request: Request) -> PlainTextResponse:
        form = await request.form()
        word = form.get("word")
        definition = form.get("definition")
        if word is None or definition is None:
            raise InvalidRequestError("Both 'word' and 'definition' are required")
        await get_store(request).store_word(str(word), str(definition))
        return PlainTextResponse("success")

    @app.get("/words")
    async def get_words(request: Request) -> JSONResponse:
        return JSONResponse(await get_store(request).list_words())

    @app.get("/health")
    async def health(request: Request) -> JSONResponse:
        return JSONResponse(request.app.state.supervisor.get_metrics())

    static_dir = resolve_static_dir(settings.server.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(static_dir), html=True), name="public")
    else:
        logger.warning(f"Static directory '{static_dir}' not found, static files disabled")

    return app
