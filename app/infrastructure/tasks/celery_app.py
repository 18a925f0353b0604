"""Celery application, with Redis as broker and result backend.

Workers run as a separate process from the API server, so media cleanup
and counter reconciliation never block request handlers.

Task states stored in Redis:
  PENDING  → dispatched, not yet picked up by a worker
  STARTED  → worker has begun execution  (task_track_started=True)
  SUCCESS  → finished without error
  FAILURE  → raised an unhandled exception
  RETRY    → failed and waiting for its next attempt
"""

from celery import Celery

from app.core.config import settings

celery_app = Celery(
    "vidshare",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["app.infrastructure.tasks.media_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    result_expires=86400,           # 24 h
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_reject_on_worker_lost=True,
)
