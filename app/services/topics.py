from __future__ import annotations

import logging
import time
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import AuthorizationError, NotFoundError, ServerError, TransactionError, ValidationError
from app.db.session import run_in_transaction
from app.models.category import Category
from app.models.common import as_uuid_or_none, utcnow
from app.models.topic import Topic
from app.models.user import User
from app.services.categories import (
    find_category,
    read_category_set,
    schedule_category_dispersal,
    topics_count_by_category,
)
from app.services.short_ids import generate_short_id, timestamp_nanos
from app.services.statistics import STATISTIC_TOPICS, upsert_statistic
from app.services.users import find_user, read_user_set

logger = logging.getLogger(__name__)

MIGRATION_DEFAULT_LIMIT = 100


def _clean(value: Any) -> str:
    return str(value or "").strip()


def _title_too_short(title: str) -> bool:
    return len(title) < settings.TOPIC_TITLE_MIN_LENGTH


def _page_offset(offset: datetime | None) -> datetime:
    return offset or utcnow()


def split_short_id(raw: Any) -> str | None:
    """Leading token of a ``shortid-slug`` value, or None when it is too short to look up."""
    head = _clean(raw).split("-", 1)[0]
    if len(head) <= settings.SHORT_ID_LOOKUP_MIN_LENGTH:
        return None
    return head


def find_topic(db: Session, topic_id: Any) -> Topic | None:
    topic_uuid = as_uuid_or_none(topic_id)
    if topic_uuid is None:
        return None
    return db.get(Topic, topic_uuid)


def find_topic_by_short_id(db: Session, short_id: str) -> Topic | None:
    return db.query(Topic).filter(Topic.short_id == short_id).first()


def topics_count(db: Session) -> int:
    return int(db.query(func.count(Topic.id)).scalar() or 0)


def _attach_associations(db: Session, topic: Topic) -> Topic:
    topic.user = find_user(db, topic.user_id)
    topic.category = find_category(db, topic.category_id)
    return topic


def _reserve_short_id(tx: Session, topic: Topic) -> None:
    attempts = max(int(settings.SHORT_ID_MAX_ATTEMPTS), 1)
    for attempt in range(1, attempts + 1):
        if find_topic_by_short_id(tx, topic.short_id) is None:
            return
        logger.warning("topic short id conflict short_id=%s attempt=%s/%s", topic.short_id, attempt, attempts)
        topic.short_id = generate_short_id(time.time_ns() + attempt)
    raise ServerError(f"no free short id after {attempts} attempts")


def create_topic(db: Session, author: User, title: str, body: str, category_id: Any) -> Topic:
    title, body = _clean(title), _clean(body)
    if _title_too_short(title):
        raise ValidationError(f"Title must be at least {settings.TOPIC_TITLE_MIN_LENGTH} characters")

    now = utcnow()
    topic = Topic(
        id=uuid.uuid4(),
        short_id=generate_short_id(now),
        title=title,
        body=body,
        comments_count=0,
        user_id=author.id,
        score=0,
        created_at=now,
        updated_at=now,
    )

    def _create(tx: Session) -> Topic:
        category = find_category(tx, category_id, for_update=True)
        if category is None:
            raise ValidationError("Category not found")
        topic.category_id = category.id
        count = topics_count_by_category(tx, category.id)
        _reserve_short_id(tx, topic)
        tx.add(topic)
        tx.flush()
        category.last_topic_id = topic.id
        category.topics_count = count + 1
        category.updated_at = utcnow()
        tx.add(category)
        tx.flush()
        upsert_statistic(tx, STATISTIC_TOPICS)
        return topic

    created = run_in_transaction(db, _create)
    logger.info("topic created topic_id=%s short_id=%s category_id=%s", created.id, created.short_id, created.category_id)
    return created


def update_topic(
    db: Session,
    actor: User,
    topic_id: Any,
    title: str,
    body: str,
    category_id: Any = None,
) -> Topic:
    title, body = _clean(title), _clean(body)
    if title and _title_too_short(title):
        raise ValidationError(f"Title must be at least {settings.TOPIC_TITLE_MIN_LENGTH} characters")
    requested_category = _clean(category_id)
    prev_category_id: uuid.UUID | None = None

    def _update(tx: Session) -> Topic | None:
        nonlocal prev_category_id
        topic = find_topic(tx, topic_id)
        if topic is None:
            return None
        if topic.user_id != actor.id and not actor.is_admin:
            raise AuthorizationError("Only the author or an administrator can edit this topic")
        if title:
            topic.title = title
        topic.body = body
        if requested_category and as_uuid_or_none(requested_category) != topic.category_id:
            category = find_category(tx, requested_category)
            if category is None:
                raise ValidationError("Category not found")
            prev_category_id = topic.category_id
            topic.category_id = category.id
            topic.category = category
        topic.updated_at = utcnow()
        tx.add(topic)
        tx.flush()
        return topic

    topic = run_in_transaction(db, _update)
    if topic is None:
        raise NotFoundError("Topic not found")

    if prev_category_id is not None:
        schedule_category_dispersal(prev_category_id, topic.category_id)
    topic.user = actor
    logger.info("topic updated topic_id=%s actor_id=%s", topic.id, actor.id)
    return topic


def read_topic(db: Session, topic_id: Any) -> Topic | None:
    def _read(tx: Session) -> Topic | None:
        topic = find_topic(tx, topic_id)
        if topic is None:
            short_id = split_short_id(topic_id)
            if short_id is None:
                return None
            topic = find_topic_by_short_id(tx, short_id)
            if topic is None:
                return None
        return _attach_associations(tx, topic)

    return run_in_transaction(db, _read)


def read_topic_by_short_id(db: Session, value: Any) -> Topic | None:
    short_id = split_short_id(value)
    if short_id is None:
        return None

    def _read(tx: Session) -> Topic | None:
        topic = find_topic_by_short_id(tx, short_id)
        if topic is None:
            return None
        return _attach_associations(tx, topic)

    return run_in_transaction(db, _read)


def _recent_topics_query(tx: Session, offset: datetime):
    return (
        tx.query(Topic)
        .filter(Topic.created_at < offset)
        .order_by(Topic.created_at.desc())
    )


def list_topics(db: Session, offset: datetime | None = None) -> list[Topic]:
    offset = _page_offset(offset)

    def _list(tx: Session) -> list[Topic]:
        categories = read_category_set(tx)
        topics = _recent_topics_query(tx, offset).limit(settings.TOPICS_PAGE_SIZE).all()
        users = read_user_set(tx, [topic.user_id for topic in topics])
        for topic in topics:
            topic.category = categories.get(topic.category_id)
            topic.user = users.get(topic.user_id)
        return topics

    return run_in_transaction(db, _list)


def list_user_topics(db: Session, user: User, offset: datetime | None = None) -> list[Topic]:
    offset = _page_offset(offset)

    def _list(tx: Session) -> list[Topic]:
        categories = read_category_set(tx)
        topics = (
            _recent_topics_query(tx, offset)
            .filter(Topic.user_id == user.id)
            .limit(settings.TOPICS_PAGE_SIZE)
            .all()
        )
        for topic in topics:
            topic.user = user
            topic.category = categories.get(topic.category_id)
        return topics

    return run_in_transaction(db, _list)


def list_category_topics(db: Session, category: Category, offset: datetime | None = None) -> list[Topic]:
    offset = _page_offset(offset)

    def _list(tx: Session) -> list[Topic]:
        topics = (
            _recent_topics_query(tx, offset)
            .filter(Topic.category_id == category.id)
            .limit(settings.TOPICS_PAGE_SIZE)
            .all()
        )
        users = read_user_set(tx, [topic.user_id for topic in topics])
        for topic in topics:
            topic.category = category
            topic.user = users.get(topic.user_id)
        return topics

    return run_in_transaction(db, _list)


def _backfill_short_id(tx: Session, created_at: datetime, reserved: set[str]) -> str | None:
    # Rows sharing a created_at encode to the same token; nudge by nanoseconds.
    nanos = timestamp_nanos(created_at)
    attempts = max(int(settings.SHORT_ID_MAX_ATTEMPTS), 1)
    for nudge in range(attempts + 1):
        candidate = generate_short_id(nanos + nudge)
        if candidate not in reserved and find_topic_by_short_id(tx, candidate) is None:
            return candidate
    logger.warning("topic short id backfill skipped row created_at=%s after %s attempts", created_at, attempts)
    return None


def migrate_topic_short_ids(
    db: Session,
    offset: datetime | None = None,
    limit: int = MIGRATION_DEFAULT_LIMIT,
) -> tuple[int, datetime]:
    """Backfill short ids for one page of topics older than ``offset``.

    Returns the number of rows scanned and the created_at of the oldest one,
    which is the offset for the next (older) page.
    """
    offset = _page_offset(offset)
    pending: dict[uuid.UUID, str] = {}

    def _scan(tx: Session) -> tuple[int, datetime]:
        rows = (
            tx.query(Topic.id, Topic.short_id, Topic.created_at)
            .filter(Topic.created_at < offset)
            .order_by(Topic.created_at.desc())
            .limit(int(limit))
            .all()
        )
        last = offset
        reserved: set[str] = set()
        for topic_id, short_id, created_at in rows:
            last = created_at
            if short_id is not None:
                continue
            candidate = _backfill_short_id(tx, created_at, reserved)
            if candidate is None:
                continue
            reserved.add(candidate)
            pending[topic_id] = candidate
        return len(rows), last

    scanned, last = run_in_transaction(db, _scan)

    for topic_id, short_id in pending.items():
        stmt = (
            update(Topic)
            .where(Topic.id == topic_id, Topic.short_id.is_(None))
            .values(short_id=short_id)
        )
        try:
            db.execute(stmt)
            db.commit()
        except Exception as exc:
            db.rollback()
            raise TransactionError(exc) from exc
    if pending:
        logger.info("topic short ids backfilled updated=%s scanned=%s last=%s", len(pending), scanned, last)
    return scanned, last
