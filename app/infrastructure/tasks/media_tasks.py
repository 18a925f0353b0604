"""Celery task wrappers for media and counter maintenance.

Each task is a thin synchronous wrapper around a coroutine in
``app.services.background_tasks``.

Retry policy (per task):
  - max_retries=3
  - countdown=60 between attempts
"""

import asyncio
import logging

from app.infrastructure.tasks.celery_app import celery_app
from app.services.background_tasks import (
    delete_media_file_task,
    reconcile_reaction_counters_task,
)

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name="media.delete_file", max_retries=3)
def delete_media_file(self, file_path: str) -> bool:
    """Celery task: remove the media object of a deleted video."""
    try:
        return asyncio.run(delete_media_file_task(file_path))
    except Exception as exc:
        logger.warning(
            "delete_media_file failed (attempt %d/%d): %s",
            self.request.retries + 1,
            self.max_retries + 1,
            exc,
        )
        raise self.retry(exc=exc, countdown=60)


@celery_app.task(bind=True, name="videos.reconcile_reaction_counters", max_retries=3)
def reconcile_reaction_counters(self, video_id: str) -> dict | None:
    """Celery task: recount likes/dislikes for a video from membership rows."""
    try:
        return asyncio.run(reconcile_reaction_counters_task(video_id))
    except Exception as exc:
        logger.warning(
            "reconcile_reaction_counters failed (attempt %d/%d): %s",
            self.request.retries + 1,
            self.max_retries + 1,
            exc,
        )
        raise self.retry(exc=exc, countdown=60)
