"""
Listing filters for accounts.

An ``AccountFilter`` holds the optional query parameters of the listing
route. Each non-empty parameter becomes one predicate; predicates are
ANDed. The same filter renders to SQLAlchemy expressions (values travel
as bound parameters) and evaluates against in-memory records, so both
store implementations agree on what matches.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timezone
from typing import TYPE_CHECKING

from sqlalchemy import ColumnElement, Select, func, or_

from accounts_api.tables import AccountRow, utc_day

if TYPE_CHECKING:
    from accounts_api.db import AccountRecord


@dataclass(frozen=True)
class AccountFilter:
    tag: str = ""
    created_by: str = ""
    date: str = ""
    q: str = ""

    def predicates(self) -> list[ColumnElement[bool]]:
        clauses: list[ColumnElement[bool]] = []
        if self.tag:
            clauses.append(func.lower(AccountRow.tag) == self.tag.lower())
        if self.created_by:
            clauses.append(
                func.lower(AccountRow.created_by_email).like(
                    f"%{self.created_by.lower()}%"
                )
            )
        if self.date:
            clauses.append(utc_day(AccountRow.created_at) == self.date)
        if self.q:
            pattern = f"%{self.q.lower()}%"
            clauses.append(
                or_(
                    func.lower(AccountRow.name).like(pattern),
                    AccountRow.phone.like(pattern),
                )
            )
        return clauses

    def apply(self, stmt: Select) -> Select:
        clauses = self.predicates()
        if clauses:
            stmt = stmt.where(*clauses)
        return stmt

    def matches(self, record: "AccountRecord") -> bool:
        if self.tag and (record.tag or "").lower() != self.tag.lower():
            return False
        if (
            self.created_by
            and self.created_by.lower() not in (record.created_by_email or "").lower()
        ):
            return False
        if self.date:
            day = record.created_at.astimezone(timezone.utc).strftime("%Y-%m-%d")
            if day != self.date:
                return False
        if self.q:
            needle = self.q.lower()
            if needle not in record.name.lower() and needle not in record.phone:
                return False
        return True
