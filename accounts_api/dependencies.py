"""
Dependency wiring for the FastAPI app.

The store and the token verifier are built once by ``create_app`` and
kept on ``app.state``; request handlers reach them through the getters
below.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Header, Request

from accounts_api.auth import (
    Caller,
    FirebaseTokenVerifier,
    TokenVerifier,
    parse_bearer,
)
from accounts_api.config import Settings
from accounts_api.db import AccountStore, InMemoryAccountStore, PostgresAccountStore
from accounts_api.errors import AuthError

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> AccountStore:
    if settings.use_in_memory_backends:
        logger.info("Using in-memory account store")
        return InMemoryAccountStore()
    return PostgresAccountStore(settings.database_url)


def build_verifier(settings: Settings) -> TokenVerifier:
    return FirebaseTokenVerifier(settings.firebase_credentials)


def get_store(request: Request) -> AccountStore:
    return request.app.state.store


def get_verifier(request: Request) -> TokenVerifier:
    return request.app.state.verifier


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def require_caller(
    request: Request, authorization: Optional[str] = Header(None)
) -> Caller:
    """Resolve the caller from the ``Authorization: Bearer`` header."""
    token = parse_bearer(authorization)
    if not token:
        raise AuthError("Missing token")
    return get_verifier(request).verify(token)
