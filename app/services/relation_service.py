"""Liked / disliked / watch-later relation sets and like-dislike toggles."""

import logging
from uuid import UUID

from app.domain.collections import REACTION_KINDS, ReactionCoordinator, VideoReferenceSet
from app.domain.entities import RelationKind, Video
from app.domain.exceptions import NotFoundError
from app.domain.repositories import IUnitOfWork, IVideoRelationRepository, IVideoRepository
from app.domain.services import IRelationService
from app.services.base import TransactionalService

logger = logging.getLogger(__name__)


class RelationService(TransactionalService, IRelationService):
    """Maintains per-user video relation sets.

    Liked and disliked changes go through :class:`ReactionCoordinator` so the
    user-side membership and the video-side counters are staged together and
    committed in one transaction.
    """

    def __init__(
        self,
        relation_repository: IVideoRelationRepository,
        video_repository: IVideoRepository,
        unit_of_work: IUnitOfWork,
    ):
        super().__init__(unit_of_work)
        self.relation_repository = relation_repository
        self.video_repository = video_repository

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def list_videos(self, user_id: UUID, kind: RelationKind) -> list[Video]:
        """Videos in the set, in insertion order. Deleted videos are skipped."""
        ref_set = await self.relation_repository.get_set(user_id, kind)
        videos = await self.video_repository.get_many(ref_set.video_ids)
        return [videos[v] for v in ref_set.video_ids if v in videos]

    async def contains(self, user_id: UUID, kind: RelationKind, video_id: UUID) -> bool:
        ref_set = await self.relation_repository.get_set(user_id, kind)
        return video_id in ref_set

    async def reaction_status(self, user_id: UUID, video_id: UUID) -> dict:
        video = await self._require_video(video_id)
        coordinator = await self._coordinator(user_id)
        return {
            "is_liked": video_id in coordinator.liked,
            "is_disliked": video_id in coordinator.disliked,
            "likes": video.likes,
            "dislikes": video.dislikes,
        }

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    async def add(self, user_id: UUID, kind: RelationKind, video_id: UUID) -> VideoReferenceSet:
        async with self._transaction(f"add video to {kind.value}"):
            await self.unit_of_work.lock_user(user_id)
            video = await self._require_video(video_id)
            if kind in REACTION_KINDS:
                coordinator = await self._coordinator(user_id)
                coordinator.add(kind, video)
                await self._save_reactions(coordinator, [video])
                ref_set = coordinator.liked if kind is RelationKind.LIKED else coordinator.disliked
            else:
                ref_set = await self.relation_repository.get_set(user_id, kind)
                ref_set.add(video_id)
                await self.relation_repository.save_set(ref_set)
        logger.info("User %s added video %s to %s", user_id, video_id, kind.value)
        return ref_set

    async def remove(self, user_id: UUID, kind: RelationKind, video_id: UUID) -> VideoReferenceSet:
        async with self._transaction(f"remove video from {kind.value}"):
            await self.unit_of_work.lock_user(user_id)
            if kind in REACTION_KINDS:
                video = await self.video_repository.get_by_id(video_id)
                coordinator = await self._coordinator(user_id)
                coordinator.remove(kind, video_id, video)
                await self._save_reactions(coordinator, [video] if video else [])
                ref_set = coordinator.liked if kind is RelationKind.LIKED else coordinator.disliked
            else:
                ref_set = await self.relation_repository.get_set(user_id, kind)
                ref_set.remove(video_id)
                await self.relation_repository.save_set(ref_set)
        logger.info("User %s removed video %s from %s", user_id, video_id, kind.value)
        return ref_set

    async def clear(self, user_id: UUID, kind: RelationKind) -> int:
        """Empty the set and return how many videos it held.

        Clearing liked or disliked videos also decrements the counter of each
        affected video that still exists.
        """
        async with self._transaction(f"clear {kind.value}"):
            await self.unit_of_work.lock_user(user_id)
            if kind in REACTION_KINDS:
                coordinator = await self._coordinator(user_id)
                current = coordinator.liked if kind is RelationKind.LIKED else coordinator.disliked
                videos = await self.video_repository.get_many(list(current.video_ids))
                removed = coordinator.clear(kind, videos)
                await self._save_reactions(coordinator, list(videos.values()))
            else:
                ref_set = await self.relation_repository.get_set(user_id, kind)
                removed = ref_set.clear()
                await self.relation_repository.save_set(ref_set)
        logger.info("User %s cleared %d videos from %s", user_id, len(removed), kind.value)
        return len(removed)

    async def toggle(self, user_id: UUID, kind: RelationKind, video_id: UUID) -> tuple[bool, Video]:
        """Like/dislike button semantics. Returns (now_member, video)."""
        if kind not in REACTION_KINDS:
            raise ValueError(f"{kind.value} cannot be toggled")
        async with self._transaction(f"toggle {kind.value}"):
            await self.unit_of_work.lock_user(user_id)
            video = await self._require_video(video_id)
            coordinator = await self._coordinator(user_id)
            now_member = coordinator.toggle(kind, video)
            await self._save_reactions(coordinator, [video])
        logger.info(
            "User %s %s video %s (likes=%d, dislikes=%d)",
            user_id,
            kind.value if now_member else f"un-{kind.value}",
            video_id,
            video.likes,
            video.dislikes,
        )
        return now_member, video

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    async def _require_video(self, video_id: UUID) -> Video:
        video = await self.video_repository.get_by_id(video_id)
        if video is None:
            raise NotFoundError("Video not found")
        return video

    async def _coordinator(self, user_id: UUID) -> ReactionCoordinator:
        liked = await self.relation_repository.get_set(user_id, RelationKind.LIKED)
        disliked = await self.relation_repository.get_set(user_id, RelationKind.DISLIKED)
        return ReactionCoordinator(liked, disliked)

    async def _save_reactions(self, coordinator: ReactionCoordinator, videos: list[Video]) -> None:
        await self.relation_repository.save_set(coordinator.liked)
        await self.relation_repository.save_set(coordinator.disliked)
        for video in videos:
            deltas = coordinator.counter_deltas.get(video.id)
            if not deltas:
                continue
            counters = await self.video_repository.adjust_counters(video.id, **deltas)
            if counters is not None:
                video.likes, video.dislikes = counters
