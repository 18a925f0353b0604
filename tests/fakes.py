"""In-memory implementations of the repository ports.

All fakes write into one :class:`InMemoryStore`.  Writes are visible
immediately (like a flushed session); :class:`FakeUnitOfWork` checkpoints
the store on commit and restores the last checkpoint on rollback, so
tests can observe all-or-nothing behaviour.
"""

from copy import deepcopy
from typing import Optional
from uuid import UUID

from app.domain.collections import HistoryLog, PlaylistCollection, VideoReferenceSet
from app.domain.entities import Comment, RelationKind, User, Video
from app.domain.repositories import (
    ICommentRepository,
    IHistoryRepository,
    IPlaylistRepository,
    IStorageService,
    IUnitOfWork,
    IUserRepository,
    IVideoRelationRepository,
    IVideoRepository,
)


class InMemoryStore:
    def __init__(self):
        self.users: dict[UUID, User] = {}
        self.videos: dict[UUID, Video] = {}
        self.comments: dict[UUID, Comment] = {}
        self.relations: dict[tuple[UUID, RelationKind], list[UUID]] = {}
        self.playlists: dict[UUID, list] = {}
        self.history: dict[UUID, list] = {}
        self._checkpoint = None
        self.checkpoint()

    def _state(self) -> dict:
        return {k: v for k, v in vars(self).items() if not k.startswith("_")}

    def checkpoint(self) -> None:
        self._checkpoint = deepcopy(self._state())

    def restore(self) -> None:
        for key, value in deepcopy(self._checkpoint).items():
            setattr(self, key, value)


class FakeUnitOfWork(IUnitOfWork):

    def __init__(self, store: InMemoryStore):
        self.store = store
        self.commits = 0
        self.rollbacks = 0
        self.fail_on_commit = False
        self.locked_users: list[UUID] = []

    async def commit(self) -> None:
        if self.fail_on_commit:
            raise RuntimeError("database is unavailable")
        self.store.checkpoint()
        self.commits += 1

    async def rollback(self) -> None:
        self.store.restore()
        self.rollbacks += 1

    async def lock_user(self, user_id: UUID) -> None:
        self.locked_users.append(user_id)


class FakeUserRepository(IUserRepository):

    def __init__(self, store: InMemoryStore):
        self.store = store

    async def create(self, user: User) -> User:
        self.store.users[user.id] = deepcopy(user)
        return deepcopy(user)

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        return deepcopy(self.store.users.get(user_id))

    async def get_by_email(self, email: str) -> Optional[User]:
        return next((deepcopy(u) for u in self.store.users.values() if u.email == email), None)

    async def get_by_username(self, username: str) -> Optional[User]:
        return next(
            (deepcopy(u) for u in self.store.users.values() if u.username == username), None
        )

    async def update(self, user: User) -> User:
        self.store.users[user.id] = deepcopy(user)
        return deepcopy(user)


class FakeVideoRepository(IVideoRepository):

    def __init__(self, store: InMemoryStore):
        self.store = store

    async def create(self, video: Video) -> Video:
        self.store.videos[video.id] = deepcopy(video)
        return deepcopy(video)

    async def get_by_id(self, video_id: UUID) -> Optional[Video]:
        return deepcopy(self.store.videos.get(video_id))

    async def get_many(self, video_ids: list[UUID]) -> dict[UUID, Video]:
        return {v: deepcopy(self.store.videos[v]) for v in video_ids if v in self.store.videos}

    async def list_all(self, skip: int = 0, limit: int = 100) -> list[Video]:
        videos = sorted(self.store.videos.values(), key=lambda v: v.uploaded_at, reverse=True)
        return deepcopy(videos[skip:skip + limit])

    async def list_trending(self, limit: int = 10) -> list[Video]:
        videos = sorted(self.store.videos.values(), key=lambda v: v.views, reverse=True)
        return deepcopy(videos[:limit])

    async def list_by_uploader(self, user_id: UUID) -> list[Video]:
        return deepcopy([v for v in self.store.videos.values() if v.uploaded_by == user_id])

    async def save_counters(self, video: Video) -> None:
        stored = self.store.videos.get(video.id)
        if stored is not None:
            stored.likes = max(0, video.likes)
            stored.dislikes = max(0, video.dislikes)

    async def adjust_counters(
        self, video_id: UUID, likes: int = 0, dislikes: int = 0
    ) -> Optional[tuple[int, int]]:
        stored = self.store.videos.get(video_id)
        if stored is None:
            return None
        stored.likes = max(0, stored.likes + likes)
        stored.dislikes = max(0, stored.dislikes + dislikes)
        return stored.likes, stored.dislikes

    async def increment_views(self, video_id: UUID) -> Optional[int]:
        stored = self.store.videos.get(video_id)
        if stored is None:
            return None
        stored.views += 1
        return stored.views

    async def delete(self, video_id: UUID) -> bool:
        if self.store.videos.pop(video_id, None) is None:
            return False
        self.store.comments = {
            cid: c for cid, c in self.store.comments.items() if c.video_id != video_id
        }
        return True


class FakeCommentRepository(ICommentRepository):

    def __init__(self, store: InMemoryStore):
        self.store = store

    async def create(self, comment: Comment) -> Comment:
        self.store.comments[comment.id] = deepcopy(comment)
        return deepcopy(comment)

    async def get(self, video_id: UUID, comment_id: UUID) -> Optional[Comment]:
        comment = self.store.comments.get(comment_id)
        if comment is None or comment.video_id != video_id:
            return None
        return deepcopy(comment)

    async def list_for_video(self, video_id: UUID) -> list[Comment]:
        comments = [c for c in self.store.comments.values() if c.video_id == video_id]
        return deepcopy(sorted(comments, key=lambda c: c.created_at))

    async def update(self, comment: Comment) -> Comment:
        self.store.comments[comment.id] = deepcopy(comment)
        return deepcopy(comment)

    async def delete(self, comment_id: UUID) -> bool:
        return self.store.comments.pop(comment_id, None) is not None


class FakeRelationRepository(IVideoRelationRepository):

    def __init__(self, store: InMemoryStore):
        self.store = store

    async def get_set(self, user_id: UUID, kind: RelationKind) -> VideoReferenceSet:
        ids = self.store.relations.get((user_id, kind), [])
        return VideoReferenceSet(user_id=user_id, kind=kind, video_ids=list(ids))

    async def save_set(self, ref_set: VideoReferenceSet) -> None:
        self.store.relations[(ref_set.user_id, ref_set.kind)] = list(ref_set.video_ids)

    async def count_members(self, video_id: UUID, kind: RelationKind) -> int:
        return sum(
            1 for (_, k), ids in self.store.relations.items() if k is kind and video_id in ids
        )


class FakePlaylistRepository(IPlaylistRepository):

    def __init__(self, store: InMemoryStore):
        self.store = store

    async def get_collection(self, user_id: UUID) -> PlaylistCollection:
        return PlaylistCollection(
            user_id=user_id, playlists=deepcopy(self.store.playlists.get(user_id, []))
        )

    async def save_collection(self, collection: PlaylistCollection) -> None:
        self.store.playlists[collection.user_id] = deepcopy(collection.playlists)


class FakeHistoryRepository(IHistoryRepository):

    def __init__(self, store: InMemoryStore):
        self.store = store

    async def get_log(self, user_id: UUID) -> HistoryLog:
        return HistoryLog(user_id=user_id, entries=deepcopy(self.store.history.get(user_id, [])))

    async def save_log(self, log: HistoryLog) -> None:
        self.store.history[log.user_id] = deepcopy(log.entries)


class FakeStorageService(IStorageService):

    def __init__(self):
        self.files: dict[str, bytes] = {}

    async def save_file(self, file_content: bytes, filename: str) -> str:
        key = f"{len(self.files):04d}_{filename}"
        self.files[key] = file_content
        return key

    async def get_file(self, file_path: str) -> bytes:
        if file_path not in self.files:
            raise FileNotFoundError(file_path)
        return self.files[file_path]

    async def delete_file(self, file_path: str) -> bool:
        return self.files.pop(file_path, None) is not None

    def public_url(self, file_path: str) -> str:
        return f"/media/{file_path}"
