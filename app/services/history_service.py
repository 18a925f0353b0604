"""Watch history service."""

import logging
from uuid import UUID

from app.domain.collections import HISTORY_LIMIT, HistoryLog
from app.domain.entities import HistoryEntry, Video
from app.domain.exceptions import NotFoundError
from app.domain.repositories import IHistoryRepository, IUnitOfWork, IVideoRepository
from app.domain.services import IHistoryService
from app.services.base import TransactionalService

logger = logging.getLogger(__name__)


class HistoryService(TransactionalService, IHistoryService):
    """Bounded, deduplicated, newest-first watch history."""

    def __init__(
        self,
        history_repository: IHistoryRepository,
        video_repository: IVideoRepository,
        unit_of_work: IUnitOfWork,
        limit: int = HISTORY_LIMIT,
    ):
        super().__init__(unit_of_work)
        self.history_repository = history_repository
        self.video_repository = video_repository
        self.limit = limit

    async def get_history(self, user_id: UUID) -> list[tuple[HistoryEntry, Video]]:
        log = await self.history_repository.get_log(user_id)
        return await self._resolve(log)

    async def record(self, user_id: UUID, video_id: UUID) -> list[tuple[HistoryEntry, Video]]:
        async with self._transaction("update history"):
            await self.unit_of_work.lock_user(user_id)
            if await self.video_repository.get_by_id(video_id) is None:
                raise NotFoundError("Video not found")
            log = await self.history_repository.get_log(user_id)
            log.limit = self.limit
            log.record(video_id)
            await self.history_repository.save_log(log)
        logger.info("History recorded: user %s watched %s", user_id, video_id)
        return await self._resolve(log)

    async def remove(self, user_id: UUID, video_id: UUID) -> list[tuple[HistoryEntry, Video]]:
        """Drop a video from history. Removing an absent video is a no-op."""
        async with self._transaction("remove from history"):
            await self.unit_of_work.lock_user(user_id)
            log = await self.history_repository.get_log(user_id)
            removed = log.remove(video_id)
            if removed:
                await self.history_repository.save_log(log)
        logger.info("History: removed %d entries of %s for user %s", removed, video_id, user_id)
        return await self._resolve(log)

    async def clear(self, user_id: UUID) -> int:
        async with self._transaction("clear history"):
            await self.unit_of_work.lock_user(user_id)
            log = await self.history_repository.get_log(user_id)
            count = log.clear()
            await self.history_repository.save_log(log)
        logger.info("History cleared for user %s (%d entries)", user_id, count)
        return count

    async def _resolve(self, log: HistoryLog) -> list[tuple[HistoryEntry, Video]]:
        """Newest first; entries whose video is gone are silently dropped."""
        ordered = log.ordered()
        videos = await self.video_repository.get_many([e.video_id for e in ordered])
        return [(e, videos[e.video_id]) for e in ordered if e.video_id in videos]
