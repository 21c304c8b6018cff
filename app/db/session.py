from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from app.core.config import settings
from app.core.errors import TransactionError, is_expected

_LOG = logging.getLogger("app.db")

T = TypeVar("T")

engine = create_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO, pool_pre_ping=True)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


def run_in_transaction(db: Session, fn: Callable[[Session], T]) -> T:
    """Run ``fn`` against ``db`` and commit, rolling back on any failure.

    Expected error kinds (bad data, authorization, not found) leave unchanged;
    anything else is wrapped into ``TransactionError``. A ``None`` result is a
    valid outcome.
    """
    try:
        result = fn(db)
        db.commit()
        return result
    except Exception as exc:
        db.rollback()
        if is_expected(exc):
            raise
        if isinstance(exc, TransactionError):
            raise
        if not isinstance(exc, SQLAlchemyError):
            _LOG.warning("transaction aborted by unexpected error: %r", exc)
        raise TransactionError(exc) from exc
