"""
Account store abstraction for Postgres and an in-memory test implementation.
"""

from __future__ import annotations

import itertools
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterator, Optional, Protocol, Sequence

from sqlalchemy import create_engine, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from accounts_api.auth import Caller
from accounts_api.config import DEFAULT_LIST_LIMIT
from accounts_api.errors import StoreError
from accounts_api.filters import AccountFilter
from accounts_api.tables import AccountRow, Base

logger = logging.getLogger(__name__)


class AccountStore(Protocol):
    """Interface for account persistence."""

    def list_accounts(
        self, filters: AccountFilter, limit: int = DEFAULT_LIST_LIMIT
    ) -> list["AccountRecord"]:
        ...

    def create_account(self, account: "NewAccount", caller: Caller) -> int:
        ...

    def create_accounts(
        self, accounts: Sequence["NewAccount"], caller: Caller
    ) -> list[int]:
        ...

    def update_tag(self, account_id: int, tag: str) -> int:
        ...


@dataclass(frozen=True)
class NewAccount:
    """An already-normalized account waiting to be inserted."""

    name: str
    phone: str


@dataclass
class AccountRecord:
    id: int
    name: str
    phone: str
    tag: str
    created_by_uid: str
    created_by_email: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "tag": self.tag,
            "created_by_email": self.created_by_email,
            "created_at": self.created_at,
        }


def _as_utc(value: Optional[datetime]) -> datetime:
    if value is None:
        return datetime.now(timezone.utc)
    # SQLite hands back naive UTC timestamps.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class InMemoryAccountStore:
    """Simple in-memory store for development and tests."""

    def __init__(self):
        self.accounts: dict[int, AccountRecord] = {}
        self._ids = itertools.count(1)

    def list_accounts(
        self, filters: AccountFilter, limit: int = DEFAULT_LIST_LIMIT
    ) -> list[AccountRecord]:
        matching = [r for r in self.accounts.values() if filters.matches(r)]
        matching.sort(key=lambda r: (r.created_at, r.id), reverse=True)
        return matching[:limit]

    def create_account(self, account: NewAccount, caller: Caller) -> int:
        record = AccountRecord(
            id=next(self._ids),
            name=account.name,
            phone=account.phone,
            tag="",
            created_by_uid=caller.uid,
            created_by_email=caller.email,
        )
        self.accounts[record.id] = record
        return record.id

    def create_accounts(
        self, accounts: Sequence[NewAccount], caller: Caller
    ) -> list[int]:
        return [self.create_account(account, caller) for account in accounts]

    def update_tag(self, account_id: int, tag: str) -> int:
        record = self.accounts.get(account_id)
        if not record:
            return 0
        record.tag = tag
        return 1

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.accounts.clear()
        self._ids = itertools.count(1)


class PostgresAccountStore:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).

    The schema is created on construction and creation is idempotent.
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for PostgresAccountStore")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to create accounts schema: {exc}") from exc

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with self.Session() as session:
                yield session
        except SQLAlchemyError as exc:
            logger.error("Account store operation failed: %s", exc)
            raise StoreError(str(exc)) from exc

    def _to_record(self, row: AccountRow) -> AccountRecord:
        return AccountRecord(
            id=row.id,
            name=row.name,
            phone=row.phone,
            tag=row.tag or "",
            created_by_uid=row.created_by_uid,
            created_by_email=row.created_by_email or "",
            created_at=_as_utc(row.created_at),
        )

    def list_accounts(
        self, filters: AccountFilter, limit: int = DEFAULT_LIST_LIMIT
    ) -> list[AccountRecord]:
        stmt = (
            filters.apply(select(AccountRow))
            .order_by(AccountRow.created_at.desc(), AccountRow.id.desc())
            .limit(limit)
        )
        with self._session() as session:
            rows = session.execute(stmt).scalars().all()
            return [self._to_record(row) for row in rows]

    def create_account(self, account: NewAccount, caller: Caller) -> int:
        with self._session() as session:
            row = AccountRow(
                name=account.name,
                phone=account.phone,
                tag="",
                created_by_uid=caller.uid,
                created_by_email=caller.email,
            )
            session.add(row)
            session.commit()
            return row.id

    def create_accounts(
        self, accounts: Sequence[NewAccount], caller: Caller
    ) -> list[int]:
        """Insert the whole batch in one transaction; ids come back in input order."""
        if not accounts:
            return []
        params = [
            {
                "name": account.name,
                "phone": account.phone,
                "tag": "",
                "created_by_uid": caller.uid,
                "created_by_email": caller.email,
            }
            for account in accounts
        ]
        stmt = insert(AccountRow).returning(
            AccountRow.id, sort_by_parameter_order=True
        )
        with self._session() as session:
            ids = list(session.scalars(stmt, params).all())
            session.commit()
            return ids

    def update_tag(self, account_id: int, tag: str) -> int:
        stmt = (
            update(AccountRow)
            .where(AccountRow.id == account_id)
            .values(tag=tag)
            .execution_options(synchronize_session=False)
        )
        with self._session() as session:
            result = session.execute(stmt)
            session.commit()
            return result.rowcount or 0
