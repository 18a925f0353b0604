"""Video catalogue service: upload, detail views, listings and deletion."""

import logging
from datetime import datetime
from pathlib import PurePath
from typing import Optional
from uuid import UUID, uuid4

from app.domain.entities import User, Video
from app.domain.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.domain.repositories import IStorageService, IUnitOfWork, IVideoRepository
from app.domain.services import IVideoService
from app.services.base import TransactionalService

logger = logging.getLogger(__name__)

DEFAULT_VIDEO_EXTENSIONS = ("mp4", "mkv", "avi", "mov")


class VideoService(TransactionalService, IVideoService):
    """Video service handling business logic."""

    def __init__(
        self,
        video_repository: IVideoRepository,
        storage_service: IStorageService,
        unit_of_work: IUnitOfWork,
        allowed_extensions: tuple[str, ...] = DEFAULT_VIDEO_EXTENSIONS,
        max_upload_bytes: int = 100 * 1024 * 1024,
    ):
        super().__init__(unit_of_work)
        self.video_repository = video_repository
        self.storage_service = storage_service
        self.allowed_extensions = tuple(ext.lower() for ext in allowed_extensions)
        self.max_upload_bytes = max_upload_bytes

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
        """Store the media file and create the video record.

        The file goes to the storage backend first; if the database write
        then fails, the stored objects are deleted again.
        """
        if not title or not title.strip() or not category or not category.strip():
            raise ValidationError("Title and category are required")
        self._validate_file(file_content, filename)

        file_path = await self.storage_service.save_file(file_content, filename)
        stored = [file_path]
        thumbnail_url = None
        if thumbnail is not None:
            thumb_bytes, thumb_name = thumbnail
            thumb_path = await self.storage_service.save_file(thumb_bytes, thumb_name)
            stored.append(thumb_path)
            thumbnail_url = self.storage_service.public_url(thumb_path)

        video = Video(
            id=uuid4(),
            title=title.strip(),
            category=category.strip(),
            description=description or "",
            video_src_url=self.storage_service.public_url(file_path),
            file_path=file_path,
            thumbnail_url=thumbnail_url,
            uploaded_by=uploader.id,
            uploader_name=uploader.username,
            uploaded_at=datetime.utcnow(),
        )
        try:
            async with self._transaction("upload video"):
                created = await self.video_repository.create(video)
        except Exception:
            for path in stored:
                await self.storage_service.delete_file(path)
            raise
        logger.info("Video uploaded: %s by user %s", created.id, uploader.id)
        return created

    async def get_video(self, video_id: UUID) -> Video:
        """Detail view. Each call counts as one view."""
        async with self._transaction("fetch video"):
            video = await self.video_repository.get_by_id(video_id)
            if video is None:
                raise NotFoundError("Video not found")
            views = await self.video_repository.increment_views(video_id)
        video.views = views if views is not None else video.views + 1
        return video

    async def get_stats(self, video_id: UUID) -> Video:
        video = await self.video_repository.get_by_id(video_id)
        if video is None:
            raise NotFoundError("Video not found")
        return video

    async def list_videos(self, skip: int = 0, limit: int = 100) -> list[Video]:
        return await self.video_repository.list_all(skip, limit)

    async def list_trending(self, limit: int = 10) -> list[Video]:
        return await self.video_repository.list_trending(limit)

    async def list_uploaded_by(self, user_id: UUID) -> list[Video]:
        return await self.video_repository.list_by_uploader(user_id)

    async def require_uploader(self, user: User, video_id: UUID) -> Video:
        video = await self.video_repository.get_by_id(video_id)
        if video is None:
            raise NotFoundError("Video not found")
        if video.uploaded_by != user.id:
            raise AuthorizationError("Only the uploader can manage this video")
        return video

    async def delete_video(self, user: User, video_id: UUID) -> Video:
        """Delete the record and its comments.

        The stored media file is left for a background task; relation,
        playlist and history references to the video are left dangling and
        filtered out at read time.
        """
        async with self._transaction("delete video"):
            video = await self.require_uploader(user, video_id)
            await self.video_repository.delete(video_id)
        logger.info("Video deleted: %s by user %s", video_id, user.id)
        return video

    def _validate_file(self, file_content: bytes, filename: str) -> None:
        if not file_content:
            raise ValidationError("No file uploaded")
        extension = PurePath(filename).suffix.lstrip(".").lower()
        if extension not in self.allowed_extensions:
            raise ValidationError(
                f"Unsupported video format '{extension or filename}'; "
                f"allowed: {', '.join(self.allowed_extensions)}"
            )
        if len(file_content) > self.max_upload_bytes:
            raise ValidationError(
                f"File exceeds the {self.max_upload_bytes // (1024 * 1024)} MB upload limit"
            )
