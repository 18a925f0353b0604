"""Repository implementations.

Repositories only flush; :class:`SqlAlchemyUnitOfWork` commits.  Because
FastAPI caches ``get_db`` per request, every repository of one request
shares the same session and therefore the same transaction.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.collections import HistoryLog, PlaylistCollection, VideoReferenceSet
from app.domain.entities import Comment, HistoryEntry, Playlist, RelationKind, User, Video
from app.domain.exceptions import AlreadyPresentError, DuplicateNameError
from app.domain.repositories import (
    ICommentRepository,
    IHistoryRepository,
    IPlaylistRepository,
    IUnitOfWork,
    IUserRepository,
    IVideoRelationRepository,
    IVideoRepository,
)
from app.infrastructure.database.models import (
    PLAYLIST_NAME_INDEX,
    CommentModel,
    HistoryEntryModel,
    PlaylistModel,
    PlaylistVideoModel,
    UserModel,
    VideoModel,
    VideoRelationModel,
)


# ---------------------------------------------------------------------------
# Unit of Work
# ---------------------------------------------------------------------------
class SqlAlchemyUnitOfWork(IUnitOfWork):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()

    async def lock_user(self, user_id: UUID) -> None:
        await self.session.execute(
            select(UserModel.id).where(UserModel.id == user_id).with_for_update()
        )


# ---------------------------------------------------------------------------
# User Repository
# ---------------------------------------------------------------------------
class UserRepository(IUserRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user: User) -> User:
        db_user = UserModel(
            id=user.id,
            username=user.username,
            email=user.email,
            hashed_password=user.hashed_password,
            is_active=user.is_active,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
        self.session.add(db_user)
        await self.session.flush()
        return self._to_entity(db_user)

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        result = await self.session.execute(select(UserModel).where(UserModel.id == user_id))
        db_user = result.scalar_one_or_none()
        return self._to_entity(db_user) if db_user else None

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(select(UserModel).where(UserModel.email == email))
        db_user = result.scalar_one_or_none()
        return self._to_entity(db_user) if db_user else None

    async def get_by_username(self, username: str) -> Optional[User]:
        result = await self.session.execute(select(UserModel).where(UserModel.username == username))
        db_user = result.scalar_one_or_none()
        return self._to_entity(db_user) if db_user else None

    async def update(self, user: User) -> User:
        result = await self.session.execute(select(UserModel).where(UserModel.id == user.id))
        db_user = result.scalar_one()
        db_user.username = user.username
        db_user.email = user.email
        db_user.hashed_password = user.hashed_password
        db_user.is_active = user.is_active
        db_user.updated_at = datetime.utcnow()
        await self.session.flush()
        return self._to_entity(db_user)

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=model.id,
            username=model.username,
            email=model.email,
            hashed_password=model.hashed_password,
            is_active=model.is_active,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


# ---------------------------------------------------------------------------
# Video Repository
# ---------------------------------------------------------------------------
def _floored(expression):
    return case((expression < 0, 0), else_=expression)


class VideoRepository(IVideoRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, video: Video) -> Video:
        db_video = VideoModel(
            id=video.id,
            title=video.title,
            category=video.category,
            description=video.description,
            video_src_url=video.video_src_url,
            file_path=video.file_path,
            thumbnail_url=video.thumbnail_url,
            likes=video.likes,
            dislikes=video.dislikes,
            views=video.views,
            uploaded_by=video.uploaded_by,
            uploaded_at=video.uploaded_at,
        )
        self.session.add(db_video)
        await self.session.flush()
        return video

    async def get_by_id(self, video_id: UUID) -> Optional[Video]:
        result = await self.session.execute(select(VideoModel).where(VideoModel.id == video_id))
        db_video = result.scalar_one_or_none()
        return self._to_entity(db_video) if db_video else None

    async def get_many(self, video_ids: list[UUID]) -> dict[UUID, Video]:
        if not video_ids:
            return {}
        result = await self.session.execute(
            select(VideoModel).where(VideoModel.id.in_(set(video_ids)))
        )
        return {m.id: self._to_entity(m) for m in result.scalars().all()}

    async def list_all(self, skip: int = 0, limit: int = 100) -> list[Video]:
        result = await self.session.execute(
            select(VideoModel).order_by(VideoModel.uploaded_at.desc()).offset(skip).limit(limit)
        )
        return [self._to_entity(v) for v in result.scalars().all()]

    async def list_trending(self, limit: int = 10) -> list[Video]:
        result = await self.session.execute(
            select(VideoModel).order_by(VideoModel.views.desc()).limit(limit)
        )
        return [self._to_entity(v) for v in result.scalars().all()]

    async def list_by_uploader(self, user_id: UUID) -> list[Video]:
        result = await self.session.execute(
            select(VideoModel)
            .where(VideoModel.uploaded_by == user_id)
            .order_by(VideoModel.uploaded_at.desc())
        )
        return [self._to_entity(v) for v in result.scalars().all()]

    async def save_counters(self, video: Video) -> None:
        await self.session.execute(
            update(VideoModel)
            .where(VideoModel.id == video.id)
            .values(likes=max(0, video.likes), dislikes=max(0, video.dislikes))
        )

    async def adjust_counters(
        self, video_id: UUID, likes: int = 0, dislikes: int = 0
    ) -> Optional[tuple[int, int]]:
        # Computed in SQL so concurrent reactions from other users are not overwritten.
        result = await self.session.execute(
            update(VideoModel)
            .where(VideoModel.id == video_id)
            .values(
                likes=_floored(VideoModel.likes + likes),
                dislikes=_floored(VideoModel.dislikes + dislikes),
            )
            .returning(VideoModel.likes, VideoModel.dislikes)
        )
        row = result.one_or_none()
        return (row.likes, row.dislikes) if row else None

    async def increment_views(self, video_id: UUID) -> Optional[int]:
        result = await self.session.execute(
            update(VideoModel)
            .where(VideoModel.id == video_id)
            .values(views=VideoModel.views + 1)
            .returning(VideoModel.views)
        )
        return result.scalar_one_or_none()

    async def delete(self, video_id: UUID) -> bool:
        # Comments go with the video through ON DELETE CASCADE.
        result = await self.session.execute(delete(VideoModel).where(VideoModel.id == video_id))
        return result.rowcount > 0

    @staticmethod
    def _to_entity(model: VideoModel) -> Video:
        return Video(
            id=model.id,
            title=model.title,
            category=model.category,
            description=model.description or "",
            video_src_url=model.video_src_url,
            file_path=model.file_path,
            thumbnail_url=model.thumbnail_url,
            likes=model.likes,
            dislikes=model.dislikes,
            views=model.views,
            uploaded_by=model.uploaded_by,
            uploader_name=model.uploader.username if model.uploader else None,
            uploaded_at=model.uploaded_at,
        )


# ---------------------------------------------------------------------------
# Comment Repository
# ---------------------------------------------------------------------------
class CommentRepository(ICommentRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, comment: Comment) -> Comment:
        db_comment = CommentModel(
            id=comment.id,
            video_id=comment.video_id,
            user_id=comment.user_id,
            username=comment.username,
            text=comment.text,
            is_uploader=comment.is_uploader,
            created_at=comment.created_at,
        )
        self.session.add(db_comment)
        await self.session.flush()
        return self._to_entity(db_comment)

    async def get(self, video_id: UUID, comment_id: UUID) -> Optional[Comment]:
        result = await self.session.execute(
            select(CommentModel).where(
                CommentModel.id == comment_id,
                CommentModel.video_id == video_id,
            )
        )
        db_comment = result.scalar_one_or_none()
        return self._to_entity(db_comment) if db_comment else None

    async def list_for_video(self, video_id: UUID) -> list[Comment]:
        result = await self.session.execute(
            select(CommentModel)
            .where(CommentModel.video_id == video_id)
            .order_by(CommentModel.created_at.asc())
        )
        return [self._to_entity(c) for c in result.scalars().all()]

    async def update(self, comment: Comment) -> Comment:
        result = await self.session.execute(
            select(CommentModel).where(CommentModel.id == comment.id)
        )
        db_comment = result.scalar_one()
        db_comment.text = comment.text
        await self.session.flush()
        return self._to_entity(db_comment)

    async def delete(self, comment_id: UUID) -> bool:
        result = await self.session.execute(delete(CommentModel).where(CommentModel.id == comment_id))
        return result.rowcount > 0

    @staticmethod
    def _to_entity(model: CommentModel) -> Comment:
        return Comment(
            id=model.id,
            video_id=model.video_id,
            user_id=model.user_id,
            username=model.username,
            text=model.text,
            is_uploader=model.is_uploader,
            created_at=model.created_at,
        )


# ---------------------------------------------------------------------------
# Video Relation Repository (liked / disliked / watch later)
# ---------------------------------------------------------------------------
class VideoRelationRepository(IVideoRelationRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_set(self, user_id: UUID, kind: RelationKind) -> VideoReferenceSet:
        result = await self.session.execute(
            select(VideoRelationModel.video_id)
            .where(
                VideoRelationModel.user_id == user_id,
                VideoRelationModel.kind == kind.value,
            )
            .order_by(VideoRelationModel.added_at.asc())
        )
        return VideoReferenceSet(user_id=user_id, kind=kind, video_ids=list(result.scalars().all()))

    async def save_set(self, ref_set: VideoReferenceSet) -> None:
        stored = await self.get_set(ref_set.user_id, ref_set.kind)
        wanted = set(ref_set.video_ids)
        removed = [v for v in stored.video_ids if v not in wanted]
        added = [v for v in ref_set.video_ids if v not in stored]
        if removed:
            await self.session.execute(
                delete(VideoRelationModel).where(
                    VideoRelationModel.user_id == ref_set.user_id,
                    VideoRelationModel.kind == ref_set.kind.value,
                    VideoRelationModel.video_id.in_(removed),
                )
            )
        now = datetime.utcnow()
        self.session.add_all(
            VideoRelationModel(
                id=uuid4(),
                user_id=ref_set.user_id,
                video_id=video_id,
                kind=ref_set.kind.value,
                added_at=now,
            )
            for video_id in added
        )
        try:
            await self.session.flush()
        except IntegrityError as exc:
            # Another transaction inserted the same membership first.
            raise AlreadyPresentError(f"Video is already in {ref_set.label}") from exc

    async def count_members(self, video_id: UUID, kind: RelationKind) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(VideoRelationModel)
            .where(
                VideoRelationModel.video_id == video_id,
                VideoRelationModel.kind == kind.value,
            )
        )
        return result.scalar_one()


# ---------------------------------------------------------------------------
# Playlist Repository
# ---------------------------------------------------------------------------
class PlaylistRepository(IPlaylistRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_collection(self, user_id: UUID) -> PlaylistCollection:
        rows = await self._load(user_id)
        return PlaylistCollection(user_id=user_id, playlists=[self._to_entity(p) for p in rows])

    async def save_collection(self, collection: PlaylistCollection) -> None:
        try:
            await self._write(collection)
        except IntegrityError as exc:
            if PLAYLIST_NAME_INDEX not in str(exc.orig):
                raise
            raise DuplicateNameError("A playlist with this name already exists") from exc
        self.session.expire_all()

    async def _write(self, collection: PlaylistCollection) -> None:
        stored = {p.id: p for p in await self._load(collection.user_id)}
        kept_ids = {p.id for p in collection.playlists}

        removed = [pid for pid in stored if pid not in kept_ids]
        if removed:
            await self.session.execute(delete(PlaylistModel).where(PlaylistModel.id.in_(removed)))

        for playlist in collection.playlists:
            db_playlist = stored.get(playlist.id)
            if db_playlist is None:
                self.session.add(
                    PlaylistModel(
                        id=playlist.id,
                        user_id=collection.user_id,
                        name=playlist.name,
                        description=playlist.description,
                        created_at=playlist.created_at,
                        updated_at=playlist.updated_at,
                    )
                )
                await self.session.flush()
            else:
                db_playlist.name = playlist.name
                db_playlist.description = playlist.description
                db_playlist.updated_at = playlist.updated_at
                if [item.video_id for item in db_playlist.items] == playlist.video_ids:
                    continue
            # Rewrite the item sequence so positions follow the in-memory order.
            await self.session.execute(
                delete(PlaylistVideoModel).where(PlaylistVideoModel.playlist_id == playlist.id)
            )
            self.session.add_all(
                PlaylistVideoModel(id=uuid4(), playlist_id=playlist.id, video_id=v, position=i)
                for i, v in enumerate(playlist.video_ids)
            )
        await self.session.flush()

    async def _load(self, user_id: UUID) -> list[PlaylistModel]:
        result = await self.session.execute(
            select(PlaylistModel)
            .where(PlaylistModel.user_id == user_id)
            .order_by(PlaylistModel.created_at.asc())
        )
        return list(result.scalars().all())

    @staticmethod
    def _to_entity(model: PlaylistModel) -> Playlist:
        return Playlist(
            id=model.id,
            user_id=model.user_id,
            name=model.name,
            description=model.description or "",
            video_ids=[item.video_id for item in sorted(model.items, key=lambda i: i.position)],
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


# ---------------------------------------------------------------------------
# History Repository
# ---------------------------------------------------------------------------
class HistoryRepository(IHistoryRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_log(self, user_id: UUID) -> HistoryLog:
        result = await self.session.execute(
            select(HistoryEntryModel)
            .where(HistoryEntryModel.user_id == user_id)
            .order_by(HistoryEntryModel.watched_at.desc())
        )
        entries = [
            HistoryEntry(video_id=row.video_id, watched_at=row.watched_at)
            for row in result.scalars().all()
        ]
        return HistoryLog(user_id=user_id, entries=entries)

    async def save_log(self, log: HistoryLog) -> None:
        # The log is small and bounded, so it is rewritten wholesale.
        await self.session.execute(
            delete(HistoryEntryModel).where(HistoryEntryModel.user_id == log.user_id)
        )
        self.session.add_all(
            HistoryEntryModel(
                id=uuid4(),
                user_id=log.user_id,
                video_id=entry.video_id,
                watched_at=entry.watched_at,
            )
            for entry in log.entries
        )
        await self.session.flush()
