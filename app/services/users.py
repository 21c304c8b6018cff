from __future__ import annotations

import uuid
from collections.abc import Iterable
from typing import Any

from sqlalchemy.orm import Session

from app.models.common import as_uuid_or_none
from app.models.user import User


def find_user(db: Session, user_id: Any) -> User | None:
    user_uuid = as_uuid_or_none(user_id)
    if user_uuid is None:
        return None
    return db.get(User, user_uuid)


def read_user_set(db: Session, user_ids: Iterable[Any]) -> dict[uuid.UUID, User]:
    ids = {uid for uid in (as_uuid_or_none(raw) for raw in user_ids) if uid is not None}
    if not ids:
        return {}
    rows = db.query(User).filter(User.id.in_(ids)).all()
    return {row.id: row for row in rows}
