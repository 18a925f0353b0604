"""SQLAlchemy database models."""

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    pass


class UserModel(Base):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    username = Column(String(100), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    hashed_password = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    videos = relationship("VideoModel", back_populates="uploader")
    playlists = relationship("PlaylistModel", back_populates="user", cascade="all, delete-orphan")


class VideoModel(Base):
    __tablename__ = "videos"
    __table_args__ = (Index("ix_videos_views", "views"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False, index=True)
    category = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    video_src_url = Column(String(1024), nullable=False)
    file_path = Column(String(512), nullable=False)
    thumbnail_url = Column(String(1024), nullable=True)
    likes = Column(Integer, nullable=False, default=0)
    dislikes = Column(Integer, nullable=False, default=0)
    views = Column(Integer, nullable=False, default=0)
    uploaded_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    uploaded_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    uploader = relationship("UserModel", back_populates="videos", lazy="joined")
    comments = relationship(
        "CommentModel", back_populates="video", cascade="all, delete-orphan", passive_deletes=True
    )


class CommentModel(Base):
    __tablename__ = "comments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    video_id = Column(
        UUID(as_uuid=True), ForeignKey("videos.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    username = Column(String(100), nullable=False)  # snapshot at creation
    text = Column(Text, nullable=False)
    is_uploader = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    video = relationship("VideoModel", back_populates="comments")


class VideoRelationModel(Base):
    """Liked / disliked / watch-later membership.

    ``video_id`` is a weak reference: no foreign key, rows may outlive the
    video and are filtered out when read.
    """

    __tablename__ = "video_relations"
    __table_args__ = (
        UniqueConstraint("user_id", "video_id", "kind", name="uq_user_video_relation"),
        Index("ix_relations_user_kind", "user_id", "kind"),
        Index("ix_relations_video_kind", "video_id", "kind"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    video_id = Column(UUID(as_uuid=True), nullable=False)
    kind = Column(String(20), nullable=False)  # liked | disliked | watch_later
    added_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class PlaylistModel(Base):
    __tablename__ = "playlists"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("UserModel", back_populates="playlists")
    items = relationship(
        "PlaylistVideoModel",
        back_populates="playlist",
        cascade="all, delete-orphan",
        order_by="PlaylistVideoModel.position",
        lazy="selectin",
    )


class PlaylistVideoModel(Base):
    __tablename__ = "playlist_videos"
    __table_args__ = (UniqueConstraint("playlist_id", "video_id", name="uq_playlist_video"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    playlist_id = Column(
        UUID(as_uuid=True), ForeignKey("playlists.id", ondelete="CASCADE"), nullable=False, index=True
    )
    video_id = Column(UUID(as_uuid=True), nullable=False)  # weak reference
    position = Column(Integer, nullable=False)

    playlist = relationship("PlaylistModel", back_populates="items")


# Playlist names are unique per user regardless of case.
PLAYLIST_NAME_INDEX = "uq_playlists_user_lower_name"

Index(
    PLAYLIST_NAME_INDEX,
    PlaylistModel.user_id,
    func.lower(PlaylistModel.name),
    unique=True,
)


class HistoryEntryModel(Base):
    __tablename__ = "history_entries"
    __table_args__ = (
        UniqueConstraint("user_id", "video_id", name="uq_history_user_video"),
        Index("ix_history_user_watched", "user_id", "watched_at"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    video_id = Column(UUID(as_uuid=True), nullable=False)  # weak reference
    watched_at = Column(DateTime, default=datetime.utcnow, nullable=False)
