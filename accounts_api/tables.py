"""
SQLAlchemy table definitions for the accounts store.
"""

from __future__ import annotations

from sqlalchemy import BigInteger, Column, DateTime, Index, Integer, String, Text, func
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql.expression import FunctionElement

Base = declarative_base()


class AccountRow(Base):
    __tablename__ = "accounts"

    # SQLite only autoincrements INTEGER PRIMARY KEY columns.
    id = Column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    name = Column(Text, nullable=False)
    phone = Column(String(20), nullable=False)
    tag = Column(Text, server_default="")
    created_by_uid = Column(Text, nullable=False)
    created_by_email = Column(Text, server_default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("idx_accounts_created_at", created_at.desc()),
        Index("idx_accounts_phone", phone),
    )


class utc_day(FunctionElement):
    """Calendar day (YYYY-MM-DD) of a timestamp column, taken in UTC."""

    type = String()
    name = "utc_day"
    inherit_cache = True


@compiles(utc_day)
def _compile_utc_day(element, compiler, **kw):
    column = compiler.process(element.clauses, **kw)
    return f"to_char({column} AT TIME ZONE 'UTC', 'YYYY-MM-DD')"


@compiles(utc_day, "sqlite")
def _compile_utc_day_sqlite(element, compiler, **kw):
    # SQLite keeps timestamps as UTC text already.
    column = compiler.process(element.clauses, **kw)
    return f"strftime('%Y-%m-%d', {column})"
