"""Pydantic schemas for API requests and responses."""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field


# ---------------------------------------------------------------------------
# Common
# ---------------------------------------------------------------------------
class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    detail: str


class MessageResponse(BaseModel):
    success: bool = True
    message: str


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------
class SignupRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    id: UUID
    username: str
    email: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfileUpdateRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=100)
    email: EmailStr


# ---------------------------------------------------------------------------
# Videos
# ---------------------------------------------------------------------------
class VideoResponse(BaseModel):
    id: UUID
    title: str
    category: str
    description: str = ""
    video_src_url: str
    thumbnail_url: Optional[str] = None
    likes: int
    dislikes: int
    views: int
    uploaded_by: UUID
    uploader_name: Optional[str] = None
    uploaded_at: datetime

    model_config = ConfigDict(from_attributes=True)


class VideoListResponse(BaseModel):
    success: bool = True
    videos: list[VideoResponse]
    count: int


class VideoMutationResponse(BaseModel):
    success: bool = True
    message: str
    video: VideoResponse


class VideoStatsResponse(BaseModel):
    success: bool = True
    video_id: UUID
    views: int
    likes: int
    dislikes: int
    uploaded_at: datetime


class ReactionToggleResponse(BaseModel):
    success: bool = True
    message: str = Field(..., description="liked | unliked | disliked | undisliked")
    is_liked: bool
    is_disliked: bool
    likes: int
    dislikes: int


class ReactionStatusResponse(BaseModel):
    success: bool = True
    is_liked: bool
    is_disliked: bool
    likes: int
    dislikes: int


# ---------------------------------------------------------------------------
# Relation sets (liked / disliked / watch later)
# ---------------------------------------------------------------------------
class RelationListResponse(BaseModel):
    success: bool = True
    videos: list[VideoResponse]
    count: int


class RelationMutationResponse(BaseModel):
    success: bool = True
    message: str
    video_ids: list[UUID]
    count: int


class RelationCheckResponse(BaseModel):
    success: bool = True
    video_id: UUID
    contains: bool


class ClearResponse(BaseModel):
    success: bool = True
    message: str
    count: int = Field(..., description="Number of items removed")


# ---------------------------------------------------------------------------
# Playlists
# ---------------------------------------------------------------------------
class PlaylistCreateRequest(BaseModel):
    # Blank names are rejected by the domain with a 400, not a 422.
    name: Optional[str] = None
    description: Optional[str] = None


class PlaylistUpdateRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None


class PlaylistResponse(BaseModel):
    id: UUID
    name: str
    description: str = ""
    video_ids: list[UUID]
    video_count: int
    videos: Optional[list[VideoResponse]] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, playlist, videos=None) -> "PlaylistResponse":
        """``videos`` is the populated list; omit it for id-only responses."""
        return cls(
            id=playlist.id,
            name=playlist.name,
            description=playlist.description,
            video_ids=list(playlist.video_ids),
            video_count=len(playlist.video_ids),
            videos=[VideoResponse.model_validate(v) for v in videos] if videos is not None else None,
            created_at=playlist.created_at,
            updated_at=playlist.updated_at,
        )


class PlaylistListResponse(BaseModel):
    success: bool = True
    playlists: list[PlaylistResponse]
    count: int


class PlaylistMutationResponse(BaseModel):
    success: bool = True
    message: str
    playlist: PlaylistResponse


class PlaylistDeleteResponse(BaseModel):
    success: bool = True
    message: str
    deleted: PlaylistResponse
    playlists: list[PlaylistResponse]
    count: int


class PlaylistMembershipItem(BaseModel):
    id: UUID
    name: str
    video_count: int
    contains_video: bool


class PlaylistMembershipResponse(BaseModel):
    success: bool = True
    video_id: UUID
    playlists: list[PlaylistMembershipItem]
    count: int


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------
class HistoryItem(BaseModel):
    video: VideoResponse
    watched_at: datetime

    @classmethod
    def from_pair(cls, entry, video) -> "HistoryItem":
        return cls(video=VideoResponse.model_validate(video), watched_at=entry.watched_at)


class HistoryResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    history: list[HistoryItem]
    count: int


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------
class CommentRequest(BaseModel):
    text: str = ""


class CommentResponse(BaseModel):
    id: UUID
    video_id: UUID
    user_id: UUID
    username: str
    text: str
    is_uploader: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CommentListResponse(BaseModel):
    success: bool = True
    comments: list[CommentResponse]
    count: int


class CommentMutationResponse(BaseModel):
    success: bool = True
    message: str
    comment: CommentResponse


# ---------------------------------------------------------------------------
# Library
# ---------------------------------------------------------------------------
class LibraryResponse(BaseModel):
    """Everything the user has collected, in one payload."""

    success: bool = True
    user: UserResponse
    liked_videos: list[VideoResponse]
    watch_later: list[VideoResponse]
    history: list[HistoryItem]
    playlists: list[PlaylistResponse]
    uploaded_videos: list[VideoResponse]


# ---------------------------------------------------------------------------
# Background tasks
# ---------------------------------------------------------------------------
class TaskStatusResponse(BaseModel):
    task_id: str
    status: str = Field(..., description="PENDING | STARTED | SUCCESS | FAILURE | RETRY")
    result: Optional[Any] = None
    error: Optional[str] = None
