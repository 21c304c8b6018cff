from __future__ import annotations

import logging

from app.db.session import SessionLocal
from app.services.categories import refresh_category_aggregates
from app.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="app.workers.tasks.categories.disperse_category", ignore_result=True)
def disperse_category(category_id: str):
    db = SessionLocal()
    try:
        category = refresh_category_aggregates(db, category_id)
        if category is None:
            db.rollback()
            logger.info("category dispersal skipped, category not found category_id=%s", category_id)
            return {"category_id": category_id, "found": False}
        db.commit()
        return {
            "category_id": str(category.id),
            "found": True,
            "topics_count": int(category.topics_count),
            "last_topic_id": str(category.last_topic_id) if category.last_topic_id else None,
        }
    except Exception:
        db.rollback()
        logger.exception("category dispersal failed category_id=%s", category_id)
        raise
    finally:
        db.close()
