# tests/test_relation_service.py
"""Tests for RelationService against in-memory repositories."""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from app.domain.entities import RelationKind
from app.domain.exceptions import AlreadyPresentError, NotFoundError, NotInSetError, PersistenceFault


class TestWatchLater:
    async def test_add_list_check(self, relation_service, alice, make_video):
        video = make_video("First")
        ref_set = await relation_service.add(alice.id, RelationKind.WATCH_LATER, video.id)
        assert ref_set.video_ids == [video.id]
        assert await relation_service.contains(alice.id, RelationKind.WATCH_LATER, video.id)
        listed = await relation_service.list_videos(alice.id, RelationKind.WATCH_LATER)
        assert [v.title for v in listed] == ["First"]

    async def test_add_unknown_video(self, relation_service, alice, uow):
        with pytest.raises(NotFoundError, match="Video not found"):
            await relation_service.add(alice.id, RelationKind.WATCH_LATER, uuid4())
        assert uow.commits == 0
        assert uow.rollbacks == 1

    async def test_add_twice_rejected(self, relation_service, alice, make_video):
        video = make_video()
        await relation_service.add(alice.id, RelationKind.WATCH_LATER, video.id)
        with pytest.raises(AlreadyPresentError):
            await relation_service.add(alice.id, RelationKind.WATCH_LATER, video.id)

    async def test_remove_absent_rejected(self, relation_service, alice, make_video):
        with pytest.raises(NotInSetError):
            await relation_service.remove(alice.id, RelationKind.WATCH_LATER, make_video().id)

    async def test_check_unknown_video_is_false(self, relation_service, alice):
        assert await relation_service.contains(alice.id, RelationKind.WATCH_LATER, uuid4()) is False

    async def test_dangling_reference_is_skipped(self, relation_service, alice, make_video, store):
        """A deleted video stays referenced but is not listed."""
        kept, deleted = make_video("kept"), make_video("deleted")
        await relation_service.add(alice.id, RelationKind.WATCH_LATER, kept.id)
        await relation_service.add(alice.id, RelationKind.WATCH_LATER, deleted.id)
        del store.videos[deleted.id]

        listed = await relation_service.list_videos(alice.id, RelationKind.WATCH_LATER)
        assert [v.id for v in listed] == [kept.id]
        assert await relation_service.contains(alice.id, RelationKind.WATCH_LATER, deleted.id)

    async def test_clear_returns_prior_count(self, relation_service, alice, make_video):
        for _ in range(3):
            await relation_service.add(alice.id, RelationKind.WATCH_LATER, make_video().id)
        assert await relation_service.clear(alice.id, RelationKind.WATCH_LATER) == 3
        assert await relation_service.list_videos(alice.id, RelationKind.WATCH_LATER) == []


class TestReactions:
    async def test_toggle_like_after_dislike(self, relation_service, alice, make_video, store):
        video = make_video(likes=5, dislikes=3)
        await relation_service.toggle(alice.id, RelationKind.DISLIKED, video.id)

        liked, updated = await relation_service.toggle(alice.id, RelationKind.LIKED, video.id)

        assert liked is True
        assert (updated.likes, updated.dislikes) == (6, 3)
        assert (store.videos[video.id].likes, store.videos[video.id].dislikes) == (6, 3)
        assert store.relations[(alice.id, RelationKind.DISLIKED)] == []
        assert store.relations[(alice.id, RelationKind.LIKED)] == [video.id]

    async def test_toggle_twice_is_identity(self, relation_service, alice, make_video, store):
        video = make_video(likes=2)
        await relation_service.toggle(alice.id, RelationKind.LIKED, video.id)
        liked, updated = await relation_service.toggle(alice.id, RelationKind.LIKED, video.id)
        assert liked is False
        assert updated.likes == 2
        assert store.videos[video.id].likes == 2

    async def test_two_users_count_separately(self, relation_service, alice, bob, make_video):
        video = make_video()
        await relation_service.toggle(alice.id, RelationKind.LIKED, video.id)
        _, updated = await relation_service.toggle(bob.id, RelationKind.LIKED, video.id)
        assert updated.likes == 2

    async def test_add_liked_evicts_disliked(self, relation_service, alice, make_video, store):
        video = make_video()
        await relation_service.add(alice.id, RelationKind.DISLIKED, video.id)
        await relation_service.add(alice.id, RelationKind.LIKED, video.id)
        assert not await relation_service.contains(alice.id, RelationKind.DISLIKED, video.id)
        assert (store.videos[video.id].likes, store.videos[video.id].dislikes) == (1, 0)

    async def test_remove_liked_of_deleted_video(self, relation_service, alice, make_video, store):
        video = make_video()
        await relation_service.add(alice.id, RelationKind.LIKED, video.id)
        del store.videos[video.id]
        ref_set = await relation_service.remove(alice.id, RelationKind.LIKED, video.id)
        assert video.id not in ref_set

    async def test_clear_liked_decrements_counters(self, relation_service, alice, make_video, store):
        a, b = make_video(), make_video()
        await relation_service.add(alice.id, RelationKind.LIKED, a.id)
        await relation_service.add(alice.id, RelationKind.LIKED, b.id)
        del store.videos[b.id]

        assert await relation_service.clear(alice.id, RelationKind.LIKED) == 2
        assert store.videos[a.id].likes == 0

    async def test_toggle_watch_later_not_supported(self, relation_service, alice, make_video):
        with pytest.raises(ValueError):
            await relation_service.toggle(alice.id, RelationKind.WATCH_LATER, make_video().id)

    async def test_reaction_status(self, relation_service, alice, make_video):
        video = make_video()
        await relation_service.toggle(alice.id, RelationKind.DISLIKED, video.id)
        status = await relation_service.reaction_status(alice.id, video.id)
        assert status == {"is_liked": False, "is_disliked": True, "likes": 0, "dislikes": 1}

    async def test_reaction_status_unknown_video(self, relation_service, alice):
        with pytest.raises(NotFoundError):
            await relation_service.reaction_status(alice.id, uuid4())

    async def test_like_keeps_counts_made_since_video_was_read(
        self, relation_service, video_repo, alice, make_video, store, monkeypatch
    ):
        """Another user's like lands between our read and our write."""
        video = make_video()
        stale = await video_repo.get_by_id(video.id)
        store.videos[video.id].likes = 1
        monkeypatch.setattr(video_repo, "get_by_id", AsyncMock(return_value=stale))

        _, updated = await relation_service.toggle(alice.id, RelationKind.LIKED, video.id)

        assert updated.likes == 2
        assert store.videos[video.id].likes == 2

    async def test_mutations_lock_the_user(self, relation_service, alice, make_video, uow):
        video = make_video()
        await relation_service.toggle(alice.id, RelationKind.LIKED, video.id)
        await relation_service.clear(alice.id, RelationKind.WATCH_LATER)
        assert uow.locked_users == [alice.id, alice.id]


class TestAtomicity:
    async def test_failed_commit_leaves_no_partial_state(
        self, relation_service, alice, make_video, store, uow
    ):
        """Membership and counter land together or not at all."""
        video = make_video(likes=1)
        uow.fail_on_commit = True

        with pytest.raises(PersistenceFault):
            await relation_service.toggle(alice.id, RelationKind.LIKED, video.id)

        assert store.videos[video.id].likes == 1
        assert store.relations.get((alice.id, RelationKind.LIKED), []) == []
        assert uow.rollbacks == 1

    async def test_fault_message_is_opaque(self, relation_service, alice, make_video, uow):
        uow.fail_on_commit = True
        with pytest.raises(PersistenceFault) as excinfo:
            await relation_service.add(alice.id, RelationKind.WATCH_LATER, make_video().id)
        assert excinfo.value.category == "Fault"
        assert "database" not in excinfo.value.message
