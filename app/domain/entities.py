"""Domain entities for the video-sharing backend."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID


class RelationKind(str, Enum):
    """Per-user video relation sets."""

    LIKED = "liked"
    DISLIKED = "disliked"
    WATCH_LATER = "watch_later"


@dataclass
class User:
    id: UUID
    username: str
    email: str
    hashed_password: str
    is_active: bool = True
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class Video:
    id: UUID
    title: str
    category: str
    video_src_url: str
    file_path: str
    uploaded_by: UUID
    description: str = ""
    thumbnail_url: Optional[str] = None
    likes: int = 0
    dislikes: int = 0
    views: int = 0
    uploader_name: Optional[str] = None  # read-only projection of the uploader's username
    uploaded_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class Comment:
    id: UUID
    video_id: UUID
    user_id: UUID
    username: str
    text: str
    is_uploader: bool = False
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class Playlist:
    id: UUID
    user_id: UUID
    name: str
    description: str = ""
    video_ids: list[UUID] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class HistoryEntry:
    """One watch event. ``video_id`` is a weak reference and may dangle."""

    video_id: UUID
    watched_at: datetime = field(default_factory=datetime.utcnow)
