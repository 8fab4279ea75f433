"""Bearer token verification backed by Firebase Authentication."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol

import firebase_admin
from firebase_admin import auth as admin_auth
from firebase_admin import credentials
from firebase_admin import exceptions as firebase_exceptions

from accounts_api.errors import AuthError

logger = logging.getLogger(__name__)

FIREBASE_APP_NAME = "accounts-api"


@dataclass(frozen=True)
class Caller:
    """Identity of the authenticated user making a request."""

    uid: str
    email: str = ""


class TokenVerifier(Protocol):
    """Turns a bearer token into a caller or raises ``AuthError``."""

    def verify(self, token: str) -> Caller:
        ...


def parse_bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    return authorization[7:].strip() or None


class FirebaseTokenVerifier:
    """Verifies Firebase ID tokens with the Admin SDK."""

    def __init__(self, service_account: dict, app_name: str = FIREBASE_APP_NAME):
        try:
            self.app = firebase_admin.get_app(app_name)
        except ValueError:
            cred = credentials.Certificate(service_account)
            self.app = firebase_admin.initialize_app(cred, name=app_name)

    def verify(self, token: str) -> Caller:
        try:
            decoded = admin_auth.verify_id_token(token, app=self.app)
        except (ValueError, firebase_exceptions.FirebaseError) as exc:
            logger.warning("Firebase token verification failed: %s", exc)
            raise AuthError("Invalid token", details=str(exc)) from exc
        return Caller(uid=decoded["uid"], email=decoded.get("email") or "")


@dataclass
class StaticTokenVerifier:
    """Token table for local development and tests."""

    tokens: dict[str, Caller] = field(default_factory=dict)

    def verify(self, token: str) -> Caller:
        caller = self.tokens.get(token)
        if caller is None:
            raise AuthError("Invalid token", details="Unknown token")
        return caller
