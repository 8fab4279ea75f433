"""
HTTP routes for the accounts API.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse

from accounts_api.auth import Caller
from accounts_api.config import Settings
from accounts_api.db import AccountStore, NewAccount
from accounts_api.dependencies import get_app_settings, get_store, require_caller
from accounts_api.errors import ValidationError
from accounts_api.filters import AccountFilter
from accounts_api.normalization import normalize_name, normalize_phone, normalize_tag
from accounts_api.schemas import (
    BulkCreatePayload,
    BulkCreateResponse,
    CreateAccountPayload,
    CreateAccountResponse,
    ListAccountsResponse,
    OkResponse,
    UpdateTagPayload,
)

logger = logging.getLogger(__name__)

router = APIRouter()

LIVENESS_TEXT = "Accounts API OK"


def _clean_bulk_candidates(candidates: list) -> list[NewAccount]:
    """Normalize candidates, drop invalid ones and repeated phones (first wins)."""
    seen_phones: set[str] = set()
    cleaned: list[NewAccount] = []
    for candidate in candidates:
        if not isinstance(candidate, dict):
            continue
        name = normalize_name(candidate.get("name"))
        phone = normalize_phone(candidate.get("phone"))
        if not name or not phone or phone in seen_phones:
            continue
        seen_phones.add(phone)
        cleaned.append(NewAccount(name=name, phone=phone))
    return cleaned


@router.get("/", response_class=PlainTextResponse, include_in_schema=False)
def liveness() -> str:
    return LIVENESS_TEXT


@router.get("/accounts", response_model=ListAccountsResponse)
def list_accounts(
    tag: str = Query(""),
    created_by: str = Query("", alias="createdBy"),
    date: str = Query("", description="Creation day in UTC, YYYY-MM-DD"),
    q: str = Query("", description="Substring of the name or the phone digits"),
    caller: Caller = Depends(require_caller),
    store: AccountStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    """List the shared accounts, most recent first."""
    filters = AccountFilter(tag=tag, created_by=created_by, date=date, q=q)
    records = store.list_accounts(filters, limit=settings.list_limit)
    return ListAccountsResponse(accounts=[record.as_dict() for record in records])


@router.post("/accounts", response_model=CreateAccountResponse)
def create_account(
    payload: CreateAccountPayload,
    caller: Caller = Depends(require_caller),
    store: AccountStore = Depends(get_store),
):
    name = normalize_name(payload.name)
    phone = normalize_phone(payload.phone)
    if not name or not phone:
        raise ValidationError("Invalid name/phone")
    account_id = store.create_account(NewAccount(name=name, phone=phone), caller)
    logger.info("Account %s created by %s", account_id, caller.uid)
    return CreateAccountResponse(id=account_id)


@router.post("/accounts/bulk", response_model=BulkCreateResponse)
def create_accounts_bulk(
    payload: BulkCreatePayload,
    caller: Caller = Depends(require_caller),
    store: AccountStore = Depends(get_store),
):
    """
    Insert a pasted or uploaded batch of accounts.

    The batch is written in one transaction: every cleaned row is saved or
    none is. Phones are only de-duplicated within the batch, never against
    rows already stored.
    """
    candidates = payload.accounts if isinstance(payload.accounts, list) else []
    if not candidates:
        raise ValidationError("No accounts provided")

    cleaned = _clean_bulk_candidates(candidates)
    if not cleaned:
        raise ValidationError("No valid accounts after cleaning")

    ids = store.create_accounts(cleaned, caller)
    logger.info(
        "Bulk insert by %s: %d received, %d saved",
        caller.uid,
        len(candidates),
        len(ids),
    )
    return BulkCreateResponse(saved=len(ids), ids=ids)


@router.patch("/accounts/{account_id}/tag", response_model=OkResponse)
def update_account_tag(
    account_id: int,
    payload: Optional[UpdateTagPayload] = None,
    caller: Caller = Depends(require_caller),
    store: AccountStore = Depends(get_store),
):
    # Any authenticated caller may retag any account. An unknown id is a
    # no-op that still reports ok. A missing body clears the tag.
    tag = normalize_tag(payload.tag if payload else None)
    affected = store.update_tag(account_id, tag)
    logger.info(
        "Tag of account %s set to %r by %s (%d rows)",
        account_id,
        tag,
        caller.uid,
        affected,
    )
    return OkResponse()
