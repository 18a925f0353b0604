"""Comment service."""

import logging
from datetime import datetime
from uuid import UUID, uuid4

from app.domain.entities import Comment, User, Video
from app.domain.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.domain.repositories import ICommentRepository, IUnitOfWork, IVideoRepository
from app.domain.services import ICommentService
from app.services.base import TransactionalService

logger = logging.getLogger(__name__)


class CommentService(TransactionalService, ICommentService):
    """Comments are owned by their video; author or uploader may edit them."""

    def __init__(
        self,
        comment_repository: ICommentRepository,
        video_repository: IVideoRepository,
        unit_of_work: IUnitOfWork,
    ):
        super().__init__(unit_of_work)
        self.comment_repository = comment_repository
        self.video_repository = video_repository

    async def add_comment(self, user: User, video_id: UUID, text: str) -> Comment:
        self._require_text(text)
        async with self._transaction("add comment"):
            video = await self._require_video(video_id)
            comment = Comment(
                id=uuid4(),
                video_id=video_id,
                user_id=user.id,
                username=user.username,
                text=text,
                # Fixed at creation; never recomputed.
                is_uploader=video.uploaded_by == user.id,
                created_at=datetime.utcnow(),
            )
            created = await self.comment_repository.create(comment)
        logger.info("Comment %s added to video %s by %s", created.id, video_id, user.id)
        return created

    async def list_comments(self, video_id: UUID) -> list[Comment]:
        await self._require_video(video_id)
        comments = await self.comment_repository.list_for_video(video_id)
        return sorted(comments, key=lambda c: c.created_at)

    async def update_comment(
        self, user: User, video_id: UUID, comment_id: UUID, text: str
    ) -> Comment:
        self._require_text(text)
        async with self._transaction("update comment"):
            comment = await self._require_moderator(user, video_id, comment_id)
            comment.text = text
            updated = await self.comment_repository.update(comment)
        logger.info("Comment %s updated by %s", comment_id, user.id)
        return updated

    async def delete_comment(self, user: User, video_id: UUID, comment_id: UUID) -> None:
        async with self._transaction("delete comment"):
            await self._require_moderator(user, video_id, comment_id)
            await self.comment_repository.delete(comment_id)
        logger.info("Comment %s deleted by %s", comment_id, user.id)

    @staticmethod
    def _require_text(text: str) -> None:
        if not text or not text.strip():
            raise ValidationError("Comment text is required")

    async def _require_video(self, video_id: UUID) -> Video:
        video = await self.video_repository.get_by_id(video_id)
        if video is None:
            raise NotFoundError("Video not found")
        return video

    async def _require_moderator(self, user: User, video_id: UUID, comment_id: UUID) -> Comment:
        """Load the comment and check the actor is its author or the video's uploader."""
        video = await self._require_video(video_id)
        comment = await self.comment_repository.get(video_id, comment_id)
        if comment is None:
            raise NotFoundError("Comment not found")
        if comment.user_id != user.id and video.uploaded_by != user.id:
            logger.warning(
                "User %s denied on comment %s (author %s, uploader %s)",
                user.id, comment_id, comment.user_id, video.uploaded_by,
            )
            raise AuthorizationError("Not authorized to modify this comment")
        return comment
