"""Async implementations of background work.

These coroutines hold the logic executed by Celery workers.  Each one is
self-contained: it opens its own DB session through the NullPool worker
engine and builds the storage backend from config, with no FastAPI DI.

The Celery wrappers in ``app.infrastructure.tasks.media_tasks`` call them
with ``asyncio.run()``.
"""

import logging
from uuid import UUID

from app.core.dependencies import get_storage_service
from app.domain.entities import RelationKind
from app.infrastructure.database.connection import worker_session_maker as async_session_maker
from app.infrastructure.database.repository import VideoRelationRepository, VideoRepository

logger = logging.getLogger(__name__)


async def delete_media_file_task(file_path: str) -> bool:
    """Remove a deleted video's media object from storage."""
    logger.info("BG-TASK: deleting media %s", file_path)
    try:
        deleted = await get_storage_service().delete_file(file_path)
    except Exception as exc:
        logger.error("BG-TASK: media deletion failed for %s: %s", file_path, exc, exc_info=True)
        raise
    logger.info("BG-TASK: media %s %s", file_path, "deleted" if deleted else "already gone")
    return deleted


async def reconcile_reaction_counters_task(video_id: str) -> dict | None:
    """Recompute a video's likes/dislikes from the users' reaction sets.

    Returns the stored counters, or ``None`` when the video no longer exists.
    """
    logger.info("BG-TASK: reconciling reaction counters for video %s", video_id)
    try:
        async with async_session_maker() as session:
            video_repo = VideoRepository(session)
            relation_repo = VideoRelationRepository(session)

            vid = UUID(video_id)
            video = await video_repo.get_by_id(vid)
            if video is None:
                logger.error("BG-TASK: video %s not found", video_id)
                return None

            likes = await relation_repo.count_members(vid, RelationKind.LIKED)
            dislikes = await relation_repo.count_members(vid, RelationKind.DISLIKED)
            if (likes, dislikes) != (video.likes, video.dislikes):
                logger.warning(
                    "BG-TASK: video %s counters drifted (likes %d->%d, dislikes %d->%d)",
                    video_id, video.likes, likes, video.dislikes, dislikes,
                )
                video.likes = likes
                video.dislikes = dislikes
                await video_repo.save_counters(video)
                await session.commit()
            return {"likes": likes, "dislikes": dislikes}
    except Exception as exc:
        logger.error(
            "BG-TASK: reconciliation failed for video %s: %s", video_id, exc, exc_info=True
        )
        raise
