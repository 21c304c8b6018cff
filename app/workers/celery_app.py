from celery import Celery
from app.core.config import settings

celery_app = Celery(
    settings.APP_NAME,
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=["app.workers.tasks.categories", "app.workers.tasks.topics"],
)

celery_app.conf.task_always_eager = settings.CELERY_TASK_ALWAYS_EAGER
celery_app.conf.timezone = settings.CELERY_TIMEZONE
