"""Repository interfaces (ports) for dependency inversion.

Repositories stage changes in the current transaction but never commit;
the :class:`IUnitOfWork` shared by one request decides when a whole
operation lands.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from app.domain.collections import HistoryLog, PlaylistCollection, VideoReferenceSet
from app.domain.entities import Comment, RelationKind, User, Video


class IUnitOfWork(ABC):

    @abstractmethod
    async def commit(self) -> None:
        pass

    @abstractmethod
    async def rollback(self) -> None:
        pass

    @abstractmethod
    async def lock_user(self, user_id: UUID) -> None:
        """Hold off other writers of *user_id*'s collections until commit or rollback."""
        pass


class IUserRepository(ABC):

    @abstractmethod
    async def create(self, user: User) -> User:
        pass

    @abstractmethod
    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        pass

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[User]:
        pass

    @abstractmethod
    async def update(self, user: User) -> User:
        pass


class IVideoRepository(ABC):

    @abstractmethod
    async def create(self, video: Video) -> Video:
        pass

    @abstractmethod
    async def get_by_id(self, video_id: UUID) -> Optional[Video]:
        pass

    @abstractmethod
    async def get_many(self, video_ids: list[UUID]) -> dict[UUID, Video]:
        """Load the videos that still exist, keyed by id. Missing ids are skipped."""
        pass

    @abstractmethod
    async def list_all(self, skip: int = 0, limit: int = 100) -> list[Video]:
        pass

    @abstractmethod
    async def list_trending(self, limit: int = 10) -> list[Video]:
        """Most viewed first."""
        pass

    @abstractmethod
    async def list_by_uploader(self, user_id: UUID) -> list[Video]:
        pass

    @abstractmethod
    async def save_counters(self, video: Video) -> None:
        """Overwrite the stored ``likes``/``dislikes`` with those of *video*."""
        pass

    @abstractmethod
    async def adjust_counters(
        self, video_id: UUID, likes: int = 0, dislikes: int = 0
    ) -> Optional[tuple[int, int]]:
        """Add the deltas to the stored counters, flooring each at zero.

        Returns the new ``(likes, dislikes)`` or ``None`` if the video is gone.
        """
        pass

    @abstractmethod
    async def increment_views(self, video_id: UUID) -> Optional[int]:
        """Atomically add one view; return the new count or ``None`` if missing."""
        pass

    @abstractmethod
    async def delete(self, video_id: UUID) -> bool:
        pass


class ICommentRepository(ABC):

    @abstractmethod
    async def create(self, comment: Comment) -> Comment:
        pass

    @abstractmethod
    async def get(self, video_id: UUID, comment_id: UUID) -> Optional[Comment]:
        pass

    @abstractmethod
    async def list_for_video(self, video_id: UUID) -> list[Comment]:
        """Oldest first."""
        pass

    @abstractmethod
    async def update(self, comment: Comment) -> Comment:
        pass

    @abstractmethod
    async def delete(self, comment_id: UUID) -> bool:
        pass


class IVideoRelationRepository(ABC):
    """Liked / disliked / watch-later membership, one set per (user, kind)."""

    @abstractmethod
    async def get_set(self, user_id: UUID, kind: RelationKind) -> VideoReferenceSet:
        pass

    @abstractmethod
    async def save_set(self, ref_set: VideoReferenceSet) -> None:
        """Stage the difference between the stored set and *ref_set*."""
        pass

    @abstractmethod
    async def count_members(self, video_id: UUID, kind: RelationKind) -> int:
        """How many users hold *video_id* in their *kind* set."""
        pass


class IPlaylistRepository(ABC):

    @abstractmethod
    async def get_collection(self, user_id: UUID) -> PlaylistCollection:
        pass

    @abstractmethod
    async def save_collection(self, collection: PlaylistCollection) -> None:
        pass


class IHistoryRepository(ABC):

    @abstractmethod
    async def get_log(self, user_id: UUID) -> HistoryLog:
        pass

    @abstractmethod
    async def save_log(self, log: HistoryLog) -> None:
        pass


class IStorageService(ABC):

    @abstractmethod
    async def save_file(self, file_content: bytes, filename: str) -> str:
        pass

    @abstractmethod
    async def get_file(self, file_path: str) -> bytes:
        pass

    @abstractmethod
    async def delete_file(self, file_path: str) -> bool:
        pass

    @abstractmethod
    def public_url(self, file_path: str) -> str:
        """URL clients use to stream the stored object."""
        pass
