# hashdrop_backend/app/main.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request, Response, status
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import ClientDisconnect

from .core.config import Settings
from .errors import BadRequestError, UploadError
from .routers import upload as upload_router

__version__ = "0.1.0"

logger = logging.getLogger("hashdrop.main")
logger.setLevel(logging.INFO)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the app around one immutable settings object.

    Used as an app factory so importing the package reads no environment:
    ``uvicorn hashdrop_backend.app.main:create_app --factory``.
    """
    settings = settings if settings is not None else Settings()

    app = FastAPI(title="hashdrop", version=__version__)
    app.state.settings = settings

    app.include_router(upload_router.router)

    # --- error mapping: details go to the log, the client gets a short text ---
    @app.exception_handler(BadRequestError)
    async def on_bad_request(request: Request, exc: BadRequestError):
        logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc)
        return PlainTextResponse(exc.public_message, status_code=status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(UploadError)
    async def on_upload_error(request: Request, exc: UploadError):
        logger.error("Upload failed for %s %s", request.method, request.url.path, exc_info=exc)
        return PlainTextResponse(exc.public_message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    @app.exception_handler(ClientDisconnect)
    async def on_client_disconnect(request: Request, exc: ClientDisconnect):
        logger.info("Client went away during %s %s", request.method, request.url.path)
        return Response(status_code=status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(StarletteHTTPException)
    async def on_http_exception(request: Request, exc: StarletteHTTPException):
        # unsupported methods get a bare 405, no body
        if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
            return Response(status_code=exc.status_code, headers=exc.headers)
        return await http_exception_handler(request, exc)

    # lifecycle hooks for debug
    @app.on_event("startup")
    async def on_startup():
        logger.info(
            ">>>> HASHDROP STARTUP store_dir=%s tmp_dir=%s view=%s",
            settings.store_dir,
            settings.tmp_dir,
            settings.index_view,
        )

    @app.on_event("shutdown")
    async def on_shutdown():
        logger.info(">>>> HASHDROP SHUTDOWN")

    return app

