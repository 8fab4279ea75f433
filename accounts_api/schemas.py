"""
Pydantic schemas for the accounts API.

Request fields are typed ``Any`` because clients send loosely shaped
JSON; normalization decides what is valid, not the schema.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel


class CreateAccountPayload(BaseModel):
    name: Any = None
    phone: Any = None


class BulkCreatePayload(BaseModel):
    accounts: Any = None


class UpdateTagPayload(BaseModel):
    tag: Any = None


class AccountOut(BaseModel):
    id: int
    name: str
    phone: str
    tag: str
    created_by_email: str
    created_at: datetime


class ListAccountsResponse(BaseModel):
    accounts: list[AccountOut]


class CreateAccountResponse(BaseModel):
    ok: Literal[True] = True
    id: int


class BulkCreateResponse(BaseModel):
    ok: Literal[True] = True
    saved: int
    ids: Optional[list[int]] = None


class OkResponse(BaseModel):
    ok: Literal[True] = True
