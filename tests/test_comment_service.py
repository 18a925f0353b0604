# tests/test_comment_service.py
"""Tests for CommentService."""

from datetime import timedelta
from uuid import uuid4

import pytest

from app.domain.exceptions import AuthorizationError, NotFoundError, ValidationError


class TestCommentService:
    async def test_uploader_flag_set_at_creation(self, comment_service, alice, bob, make_video):
        video = make_video(uploader=alice)
        own = await comment_service.add_comment(alice, video.id, "thanks for watching")
        other = await comment_service.add_comment(bob, video.id, "nice")
        assert own.is_uploader is True
        assert other.is_uploader is False
        assert other.username == "bob"

    async def test_blank_text_rejected(self, comment_service, alice, make_video):
        with pytest.raises(ValidationError):
            await comment_service.add_comment(alice, make_video().id, "   ")

    async def test_unknown_video(self, comment_service, alice):
        with pytest.raises(NotFoundError):
            await comment_service.add_comment(alice, uuid4(), "hello")
        with pytest.raises(NotFoundError):
            await comment_service.list_comments(uuid4())

    async def test_list_is_oldest_first(self, comment_service, alice, make_video, store):
        video = make_video()
        first = await comment_service.add_comment(alice, video.id, "first")
        second = await comment_service.add_comment(alice, video.id, "second")
        store.comments[first.id].created_at = second.created_at + timedelta(seconds=1)
        comments = await comment_service.list_comments(video.id)
        assert [c.text for c in comments] == ["second", "first"]

    async def test_author_can_edit(self, comment_service, alice, bob, make_video):
        video = make_video(uploader=alice)
        comment = await comment_service.add_comment(bob, video.id, "typo")
        updated = await comment_service.update_comment(bob, video.id, comment.id, "fixed")
        assert updated.text == "fixed"

    async def test_uploader_can_delete_any(self, comment_service, alice, bob, make_video, store):
        video = make_video(uploader=alice)
        comment = await comment_service.add_comment(bob, video.id, "spam")
        await comment_service.delete_comment(alice, video.id, comment.id)
        assert comment.id not in store.comments

    async def test_stranger_cannot_modify(self, comment_service, alice, bob, make_user, make_video):
        carol = make_user("carol")
        video = make_video(uploader=alice)
        comment = await comment_service.add_comment(bob, video.id, "mine")
        with pytest.raises(AuthorizationError):
            await comment_service.update_comment(carol, video.id, comment.id, "hijack")
        with pytest.raises(AuthorizationError):
            await comment_service.delete_comment(carol, video.id, comment.id)

    async def test_comment_on_other_video_not_found(self, comment_service, alice, make_video):
        a, b = make_video(), make_video()
        comment = await comment_service.add_comment(alice, a.id, "here")
        with pytest.raises(NotFoundError, match="Comment not found"):
            await comment_service.delete_comment(alice, b.id, comment.id)
