"""
FastAPI application factory for the accounts API.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from accounts_api.auth import TokenVerifier
from accounts_api.config import Settings, get_settings
from accounts_api.db import AccountStore
from accounts_api.dependencies import build_store, build_verifier
from accounts_api.errors import AccountsApiError
from accounts_api.routes import router

logger = logging.getLogger(__name__)


class BodySizeLimitMiddleware:
    """
    Reject requests whose body is larger than the limit.

    The declared ``Content-Length`` is checked first. Bodies without one
    (chunked uploads) are read up front and counted; the app only sees
    them once they are known to fit.
    """

    def __init__(self, app: ASGIApp, max_body_bytes: int):
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        content_length = Headers(scope=scope).get("content-length", "")
        if content_length.isdigit() and int(content_length) > self.max_body_bytes:
            await self._reject(scope, receive, send)
            return

        buffered: list[Message] = []
        received = 0
        more_body = True
        while more_body:
            message = await receive()
            buffered.append(message)
            if message["type"] != "http.request":
                break
            received += len(message.get("body", b""))
            if received > self.max_body_bytes:
                await self._reject(scope, receive, send)
                return
            more_body = message.get("more_body", False)

        async def replay() -> Message:
            if buffered:
                return buffered.pop(0)
            return await receive()

        await self.app(scope, replay, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send) -> None:
        logger.warning(
            "Rejected %s %s: body exceeds %d bytes",
            scope["method"],
            scope["path"],
            self.max_body_bytes,
        )
        response = JSONResponse(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            content={"error": "Payload too large"},
        )
        await response(scope, receive, send)


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg', 'invalid')}")
    return "; ".join(parts)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AccountsApiError)
    async def handle_api_error(request: Request, exc: AccountsApiError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_payload(),
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(
        request: Request, exc: RequestValidationError
    ):
        logger.info(
            "Request validation error on %s %s", request.method, request.url.path
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": "Invalid request",
                "details": _format_validation_errors(exc),
            },
        )


def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[AccountStore] = None,
    verifier: Optional[TokenVerifier] = None,
) -> FastAPI:
    """
    Build the app and its process-wide collaborators.

    Missing configuration fails here, at startup, rather than on the first
    request. Tests pass ``store``/``verifier`` to skip the real backends.
    """
    settings = settings or get_settings()
    app = FastAPI(title="Accounts API", version="0.1.0")

    app.state.settings = settings
    app.state.store = store if store is not None else build_store(settings)
    app.state.verifier = verifier if verifier is not None else build_verifier(settings)

    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes)
    origins = settings.allowed_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )

    register_exception_handlers(app)
    app.include_router(router)
    return app
