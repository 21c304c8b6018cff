from __future__ import annotations

from datetime import datetime

from app.db.session import SessionLocal
from app.services.topics import MIGRATION_DEFAULT_LIMIT, migrate_topic_short_ids
from app.workers.celery_app import celery_app


@celery_app.task(name="app.workers.tasks.topics.backfill_topic_short_ids")
def backfill_topic_short_ids(offset: str | None = None, limit: int = MIGRATION_DEFAULT_LIMIT):
    start = datetime.fromisoformat(offset) if offset else None
    db = SessionLocal()
    try:
        scanned, last = migrate_topic_short_ids(db, start, int(limit))
        return {"scanned": int(scanned), "last": last.isoformat()}
    finally:
        db.close()
