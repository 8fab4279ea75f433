"""
Configuration and settings for the accounts API.
"""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_LIST_LIMIT = 2000
DEFAULT_MAX_BODY_BYTES = 2 * 1024 * 1024


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Database (Postgres expected, any SQLAlchemy URL works)
    database_url: Optional[str] = Field(default=None)

    # Firebase Admin service account, as a one-line JSON document
    firebase_service_json: str = Field(...)

    # CORS; when unset every origin is allowed
    frontend_origin: Optional[str] = Field(default=None)

    port: int = Field(default=8080, ge=1, le=65535)
    log_level: str = Field(default="INFO")

    list_limit: int = Field(
        default=DEFAULT_LIST_LIMIT,
        ge=1,
        validation_alias=AliasChoices("list_limit", "ACCOUNTS_LIST_LIMIT"),
    )
    max_body_bytes: int = Field(
        default=DEFAULT_MAX_BODY_BYTES,
        ge=1,
        validation_alias=AliasChoices("max_body_bytes", "ACCOUNTS_MAX_BODY_BYTES"),
    )

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False,
        validation_alias=AliasChoices(
            "use_in_memory_backends", "ACCOUNTS_USE_IN_MEMORY_BACKENDS"
        ),
    )

    @field_validator("database_url")
    @classmethod
    def _use_psycopg2_driver(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        # Hosted Postgres providers hand out bare postgres:// URLs.
        for prefix in ("postgres://", "postgresql://"):
            if value.startswith(prefix):
                return "postgresql+psycopg2://" + value[len(prefix):]
        return value

    @field_validator("firebase_service_json")
    @classmethod
    def _require_service_account_object(cls, value: str) -> str:
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError as exc:
            raise ValueError(f"FIREBASE_SERVICE_JSON is not valid JSON: {exc}") from exc
        if not isinstance(parsed, dict):
            raise ValueError("FIREBASE_SERVICE_JSON must be a JSON object")
        return value

    @model_validator(mode="after")
    def _require_database(self) -> "Settings":
        if not self.use_in_memory_backends and not self.database_url:
            raise ValueError(
                "DATABASE_URL is required unless ACCOUNTS_USE_IN_MEMORY_BACKENDS is set"
            )
        return self

    @property
    def firebase_credentials(self) -> dict:
        return json.loads(self.firebase_service_json)

    @property
    def allowed_origins(self) -> list[str]:
        if self.frontend_origin:
            return [self.frontend_origin.strip()]
        return ["*"]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
