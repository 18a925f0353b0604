# tests/conftest.py
"""Shared fixtures: an in-memory store, fake repositories and wired services."""

from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from app.domain.entities import User, Video
from app.services.comment_service import CommentService
from app.services.history_service import HistoryService
from app.services.playlist_service import PlaylistService
from app.services.relation_service import RelationService
from app.services.video_service import VideoService
from tests.fakes import (
    FakeCommentRepository,
    FakeHistoryRepository,
    FakePlaylistRepository,
    FakeRelationRepository,
    FakeStorageService,
    FakeUnitOfWork,
    FakeUserRepository,
    FakeVideoRepository,
    InMemoryStore,
)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def uow(store):
    return FakeUnitOfWork(store)


@pytest.fixture
def user_repo(store):
    return FakeUserRepository(store)


@pytest.fixture
def video_repo(store):
    return FakeVideoRepository(store)


@pytest.fixture
def relation_repo(store):
    return FakeRelationRepository(store)


@pytest.fixture
def playlist_repo(store):
    return FakePlaylistRepository(store)


@pytest.fixture
def history_repo(store):
    return FakeHistoryRepository(store)


@pytest.fixture
def comment_repo(store):
    return FakeCommentRepository(store)


@pytest.fixture
def storage():
    return FakeStorageService()


@pytest.fixture
def make_user(store):
    """Factory that persists a user and returns it."""

    def _make(username: str) -> User:
        user = User(
            id=uuid4(),
            username=username,
            email=f"{username}@example.com",
            hashed_password="not-a-real-hash",
        )
        store.users[user.id] = user
        store.checkpoint()
        return user

    return _make


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")


@pytest.fixture
def make_video(store, alice):
    """Factory that persists a video uploaded by alice (unless told otherwise)."""
    counter = {"n": 0}

    def _make(title: str = "Clip", uploader: User = None, **fields) -> Video:
        counter["n"] += 1
        owner = uploader or alice
        video = Video(
            id=uuid4(),
            title=title,
            category="music",
            video_src_url=f"/media/{counter['n']}.mp4",
            file_path=f"{counter['n']}.mp4",
            uploaded_by=owner.id,
            uploader_name=owner.username,
            uploaded_at=datetime(2026, 1, 1) + timedelta(minutes=counter["n"]),
            **fields,
        )
        store.videos[video.id] = video
        store.checkpoint()
        return video

    return _make


@pytest.fixture
def relation_service(relation_repo, video_repo, uow):
    return RelationService(relation_repo, video_repo, uow)


@pytest.fixture
def playlist_service(playlist_repo, video_repo, uow):
    return PlaylistService(playlist_repo, video_repo, uow)


@pytest.fixture
def history_service(history_repo, video_repo, uow):
    return HistoryService(history_repo, video_repo, uow)


@pytest.fixture
def comment_service(comment_repo, video_repo, uow):
    return CommentService(comment_repo, video_repo, uow)


@pytest.fixture
def video_service(video_repo, storage, uow):
    return VideoService(video_repo, storage, uow, max_upload_bytes=1024)
