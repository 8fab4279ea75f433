"""Exception types surfaced by the accounts API."""

from __future__ import annotations

from typing import Optional

from fastapi import status


class AccountsApiError(Exception):
    """Base exception; carries the HTTP status it maps to."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def headers(self) -> Optional[dict[str, str]]:
        return None

    def to_payload(self) -> dict:
        return {"error": self.message}


class AuthError(AccountsApiError):
    """Raised when the bearer token is missing or rejected."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.details = details

    @property
    def headers(self) -> Optional[dict[str, str]]:
        return {"WWW-Authenticate": "Bearer"}

    def to_payload(self) -> dict:
        payload = super().to_payload()
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(AccountsApiError):
    """Raised when input is empty or invalid after normalization."""

    status_code = status.HTTP_400_BAD_REQUEST


class StoreError(AccountsApiError):
    """Raised when the underlying store fails, constraint violations included."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
