"""Domain-level application service interfaces (ports).

These abstract classes define the contracts that the API layer depends on.
Concrete implementations live in ``app/services/`` and are wired together
by the composition root in ``app/core/dependencies.py``.

Route handlers import from ``app.domain`` only, so every service can be
replaced with a test double via FastAPI's ``app.dependency_overrides``.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from app.domain.collections import VideoReferenceSet
from app.domain.entities import Comment, HistoryEntry, Playlist, RelationKind, User, Video


class IVideoService(ABC):

    @abstractmethod
    async def upload_video(
        self,
        uploader: User,
        file_content: bytes,
        filename: str,
        title: Optional[str],
        category: Optional[str],
        description: Optional[str] = None,
        thumbnail: Optional[tuple[bytes, str]] = None,
    ) -> Video:
        pass

    @abstractmethod
    async def get_video(self, video_id: UUID) -> Video:
        """Return the video and count one view."""
        pass

    @abstractmethod
    async def get_stats(self, video_id: UUID) -> Video:
        pass

    @abstractmethod
    async def list_videos(self, skip: int = 0, limit: int = 100) -> list[Video]:
        pass

    @abstractmethod
    async def list_trending(self, limit: int = 10) -> list[Video]:
        pass

    @abstractmethod
    async def list_uploaded_by(self, user_id: UUID) -> list[Video]:
        pass

    @abstractmethod
    async def require_uploader(self, user: User, video_id: UUID) -> Video:
        pass

    @abstractmethod
    async def delete_video(self, user: User, video_id: UUID) -> Video:
        pass


class IRelationService(ABC):

    @abstractmethod
    async def list_videos(self, user_id: UUID, kind: RelationKind) -> list[Video]:
        pass

    @abstractmethod
    async def contains(self, user_id: UUID, kind: RelationKind, video_id: UUID) -> bool:
        pass

    @abstractmethod
    async def reaction_status(self, user_id: UUID, video_id: UUID) -> dict:
        pass

    @abstractmethod
    async def add(self, user_id: UUID, kind: RelationKind, video_id: UUID) -> VideoReferenceSet:
        pass

    @abstractmethod
    async def remove(self, user_id: UUID, kind: RelationKind, video_id: UUID) -> VideoReferenceSet:
        pass

    @abstractmethod
    async def clear(self, user_id: UUID, kind: RelationKind) -> int:
        pass

    @abstractmethod
    async def toggle(self, user_id: UUID, kind: RelationKind, video_id: UUID) -> tuple[bool, Video]:
        pass


class IPlaylistService(ABC):

    @abstractmethod
    async def list_playlists(self, user_id: UUID) -> list[tuple[Playlist, list[Video]]]:
        pass

    @abstractmethod
    async def get_playlist(self, user_id: UUID, playlist_id: UUID) -> tuple[Playlist, list[Video]]:
        pass

    @abstractmethod
    async def playlists_for_video(self, user_id: UUID, video_id: UUID) -> list[tuple[Playlist, bool]]:
        pass

    @abstractmethod
    async def create_playlist(
        self, user_id: UUID, name: Optional[str], description: Optional[str] = None
    ) -> Playlist:
        pass

    @abstractmethod
    async def update_playlist(
        self,
        user_id: UUID,
        playlist_id: UUID,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Playlist:
        pass

    @abstractmethod
    async def add_video(self, user_id: UUID, playlist_id: UUID, video_id: UUID) -> Playlist:
        pass

    @abstractmethod
    async def remove_video(self, user_id: UUID, playlist_id: UUID, video_id: UUID) -> Playlist:
        pass

    @abstractmethod
    async def delete_playlist(
        self, user_id: UUID, playlist_id: UUID
    ) -> tuple[Playlist, list[tuple[Playlist, list[Video]]]]:
        pass

    @abstractmethod
    async def delete_all(self, user_id: UUID) -> int:
        pass


class IHistoryService(ABC):

    @abstractmethod
    async def get_history(self, user_id: UUID) -> list[tuple[HistoryEntry, Video]]:
        pass

    @abstractmethod
    async def record(self, user_id: UUID, video_id: UUID) -> list[tuple[HistoryEntry, Video]]:
        pass

    @abstractmethod
    async def remove(self, user_id: UUID, video_id: UUID) -> list[tuple[HistoryEntry, Video]]:
        pass

    @abstractmethod
    async def clear(self, user_id: UUID) -> int:
        pass


class ICommentService(ABC):

    @abstractmethod
    async def add_comment(self, user: User, video_id: UUID, text: str) -> Comment:
        pass

    @abstractmethod
    async def list_comments(self, video_id: UUID) -> list[Comment]:
        pass

    @abstractmethod
    async def update_comment(
        self, user: User, video_id: UUID, comment_id: UUID, text: str
    ) -> Comment:
        pass

    @abstractmethod
    async def delete_comment(self, user: User, video_id: UUID, comment_id: UUID) -> None:
        pass
