"""FastAPI application factory for the Cursor proxy."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from aiohttp import ClientSession
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from . import __version__
from .auth import CredentialStore
from .config import ProxySettings
from .routes import router

logger = logging.getLogger(__name__)


def _json_safe(obj: Any) -> Any:
    """Sanitize objects to be JSON-serializable, converting bytes to UTF-8 strings."""
    return jsonable_encoder(
        obj,
        exclude_none=True,
        custom_encoder={
            bytes: lambda b: b.decode("utf-8", errors="replace"),
        },
    )


def create_app(settings: ProxySettings | None = None) -> FastAPI:
    """Build the FastAPI app with configured routers and lifespan hooks."""

    settings = settings or ProxySettings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:  # pragma: no cover - exercised at runtime
        app.state.http_client = ClientSession()
        logger.info(
            "✓ Proxy ready upstream=%s tool_mode=%s credentials=%s",
            settings.upstream_base_url,
            settings.tool_mode,
            settings.credential_source,
        )
        try:
            yield
        finally:
            client: Optional[ClientSession] = app.state.http_client
            if client and not client.closed:
                await client.close()

    app = FastAPI(
        title="Cursor OpenAI Proxy",
        description="OpenAI-compatible chat completions backed by the Cursor chat service.",
        version=__version__,
        lifespan=lifespan,
    )

    app.include_router(router)

    app.state.settings = settings
    app.state.http_client = None
    app.state.credentials = CredentialStore(settings)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Log detailed validation errors for debugging 422 issues"""
        try:
            raw = await request.body()
            body_preview = raw.decode("utf-8", errors="replace")[:500]
        except RuntimeError:
            body_preview = "<unable to read body>"

        detail = _json_safe(exc.errors())

        logger.error(
            "Validation Error [422] %s %s\nBody: %s\nErrors: %s",
            request.method,
            request.url.path,
            body_preview,
            detail,
        )

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": detail},
            headers={"Access-Control-Allow-Origin": "*"},
        )

    return app
