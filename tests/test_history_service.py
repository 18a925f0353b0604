# tests/test_history_service.py
"""Tests for HistoryService."""

from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from app.domain.entities import HistoryEntry
from app.domain.exceptions import NotFoundError
from app.services.history_service import HistoryService


class TestHistoryService:
    async def test_rewatch_moves_to_top(self, history_service, alice, make_video):
        v1, v2 = make_video("v1"), make_video("v2")
        await history_service.record(alice.id, v1.id)
        await history_service.record(alice.id, v2.id)
        history = await history_service.record(alice.id, v1.id)
        assert [video.title for _, video in history] == ["v1", "v2"]

    async def test_record_unknown_video(self, history_service, alice, store):
        with pytest.raises(NotFoundError):
            await history_service.record(alice.id, uuid4())
        assert store.history.get(alice.id, []) == []

    async def test_limit_is_enforced(self, history_repo, video_repo, uow, alice, make_video, store):
        service = HistoryService(history_repo, video_repo, uow, limit=3)
        videos = [make_video(str(i)) for i in range(4)]
        for video in videos:
            await service.record(alice.id, video.id)
        assert len(store.history[alice.id]) == 3
        history = await service.get_history(alice.id)
        assert [v.title for _, v in history] == ["3", "2", "1"]

    async def test_read_sorts_by_watched_at(self, history_service, alice, make_video, store):
        old, new = make_video("old"), make_video("new")
        t0 = datetime(2026, 1, 1)
        # Stored out of order on purpose.
        store.history[alice.id] = [
            HistoryEntry(old.id, t0),
            HistoryEntry(new.id, t0 + timedelta(hours=1)),
        ]
        history = await history_service.get_history(alice.id)
        assert [v.title for _, v in history] == ["new", "old"]

    async def test_deleted_video_is_skipped(self, history_service, alice, make_video, store):
        kept, gone = make_video("kept"), make_video("gone")
        await history_service.record(alice.id, kept.id)
        await history_service.record(alice.id, gone.id)
        del store.videos[gone.id]
        history = await history_service.get_history(alice.id)
        assert [v.title for _, v in history] == ["kept"]

    async def test_remove_absent_is_noop(self, history_service, alice, make_video):
        video = make_video()
        await history_service.record(alice.id, video.id)
        history = await history_service.remove(alice.id, uuid4())
        assert len(history) == 1

    async def test_remove_and_clear(self, history_service, alice, make_video):
        a, b = make_video("a"), make_video("b")
        await history_service.record(alice.id, a.id)
        await history_service.record(alice.id, b.id)
        history = await history_service.remove(alice.id, a.id)
        assert [v.title for _, v in history] == ["b"]
        assert await history_service.clear(alice.id) == 1
        assert await history_service.get_history(alice.id) == []
