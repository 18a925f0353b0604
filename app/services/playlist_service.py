"""Playlist service."""

import logging
from typing import Optional
from uuid import UUID

from app.domain.entities import Playlist, Video
from app.domain.exceptions import NotFoundError
from app.domain.repositories import IPlaylistRepository, IUnitOfWork, IVideoRepository
from app.domain.services import IPlaylistService
from app.services.base import TransactionalService

logger = logging.getLogger(__name__)


class PlaylistService(TransactionalService, IPlaylistService):
    """Creates, edits and fills a user's playlists."""

    def __init__(
        self,
        playlist_repository: IPlaylistRepository,
        video_repository: IVideoRepository,
        unit_of_work: IUnitOfWork,
    ):
        super().__init__(unit_of_work)
        self.playlist_repository = playlist_repository
        self.video_repository = video_repository

    async def list_playlists(self, user_id: UUID) -> list[tuple[Playlist, list[Video]]]:
        collection = await self.playlist_repository.get_collection(user_id)
        return await self._populate(collection.playlists)

    async def get_playlist(self, user_id: UUID, playlist_id: UUID) -> tuple[Playlist, list[Video]]:
        collection = await self.playlist_repository.get_collection(user_id)
        playlist = collection.get(playlist_id)
        [populated] = await self._populate([playlist])
        return populated

    async def playlists_for_video(self, user_id: UUID, video_id: UUID) -> list[tuple[Playlist, bool]]:
        collection = await self.playlist_repository.get_collection(user_id)
        return collection.membership(video_id)

    async def create_playlist(
        self, user_id: UUID, name: Optional[str], description: Optional[str] = None
    ) -> Playlist:
        async with self._transaction("create playlist"):
            await self.unit_of_work.lock_user(user_id)
            collection = await self.playlist_repository.get_collection(user_id)
            playlist = collection.create(name, description)
            await self.playlist_repository.save_collection(collection)
        logger.info("Playlist created: %s for user %s", playlist.id, user_id)
        return playlist

    async def update_playlist(
        self,
        user_id: UUID,
        playlist_id: UUID,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Playlist:
        async with self._transaction("update playlist"):
            await self.unit_of_work.lock_user(user_id)
            collection = await self.playlist_repository.get_collection(user_id)
            playlist = collection.update(playlist_id, name, description)
            await self.playlist_repository.save_collection(collection)
        logger.info("Playlist updated: %s", playlist_id)
        return playlist

    async def add_video(self, user_id: UUID, playlist_id: UUID, video_id: UUID) -> Playlist:
        async with self._transaction("add video to playlist"):
            await self.unit_of_work.lock_user(user_id)
            if await self.video_repository.get_by_id(video_id) is None:
                raise NotFoundError("Video not found")
            collection = await self.playlist_repository.get_collection(user_id)
            playlist = collection.add_video(playlist_id, video_id)
            await self.playlist_repository.save_collection(collection)
        logger.info("Video %s added to playlist %s", video_id, playlist_id)
        return playlist

    async def remove_video(self, user_id: UUID, playlist_id: UUID, video_id: UUID) -> Playlist:
        async with self._transaction("remove video from playlist"):
            await self.unit_of_work.lock_user(user_id)
            collection = await self.playlist_repository.get_collection(user_id)
            playlist = collection.remove_video(playlist_id, video_id)
            await self.playlist_repository.save_collection(collection)
        logger.info("Video %s removed from playlist %s", video_id, playlist_id)
        return playlist

    async def delete_playlist(
        self, user_id: UUID, playlist_id: UUID
    ) -> tuple[Playlist, list[tuple[Playlist, list[Video]]]]:
        """Delete one playlist; return it along with the populated remainder."""
        async with self._transaction("delete playlist"):
            await self.unit_of_work.lock_user(user_id)
            collection = await self.playlist_repository.get_collection(user_id)
            deleted = collection.delete(playlist_id)
            await self.playlist_repository.save_collection(collection)
        logger.info("Playlist deleted: %s", playlist_id)
        return deleted, await self._populate(collection.playlists)

    async def delete_all(self, user_id: UUID) -> int:
        async with self._transaction("delete all playlists"):
            await self.unit_of_work.lock_user(user_id)
            collection = await self.playlist_repository.get_collection(user_id)
            count = collection.delete_all()
            await self.playlist_repository.save_collection(collection)
        logger.info("Deleted %d playlists for user %s", count, user_id)
        return count

    async def _populate(self, playlists: list[Playlist]) -> list[tuple[Playlist, list[Video]]]:
        """Attach the videos that still exist, keeping playlist order."""
        wanted = [v for p in playlists for v in p.video_ids]
        videos = await self.video_repository.get_many(wanted) if wanted else {}
        return [(p, [videos[v] for v in p.video_ids if v in videos]) for p in playlists]
