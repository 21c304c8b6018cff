from __future__ import annotations

import logging
import uuid
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.category import Category
from app.models.common import as_uuid_or_none, utcnow
from app.models.topic import Topic

logger = logging.getLogger(__name__)


def find_category(db: Session, category_id: Any, *, for_update: bool = False) -> Category | None:
    category_uuid = as_uuid_or_none(category_id)
    if category_uuid is None:
        return None
    query = db.query(Category).filter(Category.id == category_uuid)
    if for_update:
        query = query.with_for_update()
    return query.first()


def read_category_set(db: Session) -> dict[uuid.UUID, Category]:
    rows = db.query(Category).order_by(Category.position.asc()).all()
    return {row.id: row for row in rows}


def topics_count_by_category(db: Session, category_id: uuid.UUID) -> int:
    return int(db.query(func.count(Topic.id)).filter(Topic.category_id == category_id).scalar() or 0)


def last_topic_in_category(db: Session, category_id: uuid.UUID) -> Topic | None:
    return (
        db.query(Topic)
        .filter(Topic.category_id == category_id)
        .order_by(Topic.created_at.desc())
        .first()
    )


def refresh_category_aggregates(db: Session, category_id: Any) -> Category | None:
    """Recompute ``topics_count`` and ``last_topic_id`` from the topics table."""
    category = find_category(db, category_id, for_update=True)
    if category is None:
        return None
    last_topic = last_topic_in_category(db, category.id)
    category.topics_count = topics_count_by_category(db, category.id)
    category.last_topic_id = last_topic.id if last_topic is not None else None
    category.updated_at = utcnow()
    db.add(category)
    db.flush()
    return category


def schedule_category_dispersal(*category_ids: Any) -> int:
    """Queue an aggregate refresh per category; returns how many were queued.

    Fire-and-forget: the caller's outcome never depends on the queue.
    """
    from app.workers.tasks.categories import disperse_category

    queued = 0
    for raw in category_ids:
        category_id = str(raw or "").strip()
        if not category_id:
            continue
        try:
            disperse_category.delay(category_id)
        except Exception:
            logger.warning("category dispersal not queued category_id=%s", category_id, exc_info=True)
            continue
        queued += 1
        logger.info("category dispersal queued category_id=%s", category_id)
    return queued
