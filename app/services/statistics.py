from __future__ import annotations

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.errors import ValidationError
from app.models.category import Category
from app.models.common import utcnow
from app.models.statistic import Statistic
from app.models.topic import Topic
from app.models.user import User

STATISTIC_TOPICS = "topics"
STATISTIC_USERS = "users"
STATISTIC_CATEGORIES = "categories"

_COUNTED_MODELS = {
    STATISTIC_TOPICS: Topic,
    STATISTIC_USERS: User,
    STATISTIC_CATEGORIES: Category,
}


def upsert_statistic(db: Session, name: str) -> Statistic:
    key = str(name or "").strip().lower()
    model = _COUNTED_MODELS.get(key)
    if model is None:
        raise ValidationError(f"Unknown statistic: {name}")

    count = int(db.query(func.count(model.id)).scalar() or 0)
    row = db.query(Statistic).filter(Statistic.name == key).first()
    now = utcnow()
    if row is None:
        row = Statistic(name=key, count=count, created_at=now, updated_at=now)
    else:
        row.count = count
        row.updated_at = now
    db.add(row)
    db.flush()
    return row
