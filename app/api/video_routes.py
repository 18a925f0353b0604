"""Video API routes (upload, listings, detail, reactions, comments, deletion)."""

import logging
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status

from app.api.schemas import (
    CommentListResponse,
    CommentMutationResponse,
    CommentRequest,
    CommentResponse,
    MessageResponse,
    PlaylistMembershipItem,
    PlaylistMembershipResponse,
    ReactionStatusResponse,
    ReactionToggleResponse,
    VideoListResponse,
    VideoMutationResponse,
    VideoResponse,
    VideoStatsResponse,
)
from app.core.config import settings
from app.core.dependencies import (
    get_comment_service,
    get_current_user,
    get_playlist_service,
    get_relation_service,
    get_video_service,
)
from app.domain.entities import RelationKind, User
from app.domain.services import ICommentService, IPlaylistService, IRelationService, IVideoService
from app.infrastructure.tasks.media_tasks import delete_media_file, reconcile_reaction_counters

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/videos", tags=["videos"])


def _video_list(videos) -> VideoListResponse:
    return VideoListResponse(
        videos=[VideoResponse.model_validate(v) for v in videos],
        count=len(videos),
    )


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
@router.post("/", response_model=VideoMutationResponse, status_code=status.HTTP_201_CREATED)
async def upload_video(
    file: Annotated[UploadFile, File()],
    video_service: Annotated[IVideoService, Depends(get_video_service)],
    current_user: Annotated[User, Depends(get_current_user)],
    title: Annotated[Optional[str], Form()] = None,
    category: Annotated[Optional[str], Form()] = None,
    description: Annotated[Optional[str], Form()] = None,
    thumbnail: Annotated[Optional[UploadFile], File()] = None,
) -> VideoMutationResponse:
    """Upload a video file (mp4, mkv, avi or mov) with its metadata."""
    file_content = await file.read()
    thumb = None
    if thumbnail is not None and thumbnail.filename:
        thumb = (await thumbnail.read(), thumbnail.filename)

    video = await video_service.upload_video(
        uploader=current_user,
        file_content=file_content,
        filename=file.filename or "",
        title=title,
        category=category,
        description=description,
        thumbnail=thumb,
    )
    return VideoMutationResponse(
        message="Video uploaded successfully",
        video=VideoResponse.model_validate(video),
    )


@router.get("/", response_model=VideoListResponse)
async def list_videos(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    video_service: Annotated[IVideoService, Depends(get_video_service)] = ...,
    current_user: Annotated[User, Depends(get_current_user)] = ...,
) -> VideoListResponse:
    """List videos, newest first."""
    skip = (page - 1) * limit
    return _video_list(await video_service.list_videos(skip=skip, limit=limit))


@router.get("/trending", response_model=VideoListResponse)
async def list_trending(
    video_service: Annotated[IVideoService, Depends(get_video_service)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> VideoListResponse:
    """Most viewed videos."""
    return _video_list(await video_service.list_trending(settings.trending_limit))


@router.get("/mine", response_model=VideoListResponse)
async def list_my_videos(
    video_service: Annotated[IVideoService, Depends(get_video_service)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> VideoListResponse:
    return _video_list(await video_service.list_uploaded_by(current_user.id))


@router.get("/{video_id}", response_model=VideoResponse)
async def get_video(
    video_id: UUID,
    video_service: Annotated[IVideoService, Depends(get_video_service)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> VideoResponse:
    """Video detail. Counts one view."""
    return VideoResponse.model_validate(await video_service.get_video(video_id))


@router.get("/{video_id}/stats", response_model=VideoStatsResponse)
async def get_video_stats(
    video_id: UUID,
    video_service: Annotated[IVideoService, Depends(get_video_service)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> VideoStatsResponse:
    video = await video_service.get_stats(video_id)
    return VideoStatsResponse(
        video_id=video.id,
        views=video.views,
        likes=video.likes,
        dislikes=video.dislikes,
        uploaded_at=video.uploaded_at,
    )


@router.delete("/{video_id}", response_model=MessageResponse)
async def delete_video(
    video_id: UUID,
    response: Response,
    video_service: Annotated[IVideoService, Depends(get_video_service)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> MessageResponse:
    """Delete a video and its comments (uploader only).

    The media file is removed by a **Celery task** whose ID is returned in
    the ``X-Task-ID`` response header.
    """
    video = await video_service.delete_video(current_user, video_id)
    task = delete_media_file.delay(video.file_path)
    response.headers["X-Task-ID"] = task.id
    logger.info("Celery media deletion task %s dispatched for video %s", task.id, video_id)
    return MessageResponse(message="Video deleted successfully")


@router.post(
    "/{video_id}/reconcile",
    response_model=MessageResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def reconcile_counters(
    video_id: UUID,
    response: Response,
    video_service: Annotated[IVideoService, Depends(get_video_service)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> MessageResponse:
    """Recount likes/dislikes from users' reaction sets (uploader only)."""
    await video_service.require_uploader(current_user, video_id)
    task = reconcile_reaction_counters.delay(str(video_id))
    response.headers["X-Task-ID"] = task.id
    logger.info("Celery reconcile task %s dispatched for video %s", task.id, video_id)
    return MessageResponse(message="Counter reconciliation scheduled")


# ---------------------------------------------------------------------------
# Reactions
# ---------------------------------------------------------------------------
async def _toggle(
    kind: RelationKind, video_id: UUID, user: User, relation_service: IRelationService
) -> ReactionToggleResponse:
    now_member, video = await relation_service.toggle(user.id, kind, video_id)
    verb = "liked" if kind is RelationKind.LIKED else "disliked"
    return ReactionToggleResponse(
        message=verb if now_member else f"un{verb}",
        is_liked=now_member and kind is RelationKind.LIKED,
        is_disliked=now_member and kind is RelationKind.DISLIKED,
        likes=video.likes,
        dislikes=video.dislikes,
    )


@router.post("/{video_id}/like", response_model=ReactionToggleResponse)
async def toggle_like(
    video_id: UUID,
    relation_service: Annotated[IRelationService, Depends(get_relation_service)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ReactionToggleResponse:
    """Like the video, or take the like back. A like replaces a dislike."""
    return await _toggle(RelationKind.LIKED, video_id, current_user, relation_service)


@router.post("/{video_id}/dislike", response_model=ReactionToggleResponse)
async def toggle_dislike(
    video_id: UUID,
    relation_service: Annotated[IRelationService, Depends(get_relation_service)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ReactionToggleResponse:
    """Dislike the video, or take the dislike back. A dislike replaces a like."""
    return await _toggle(RelationKind.DISLIKED, video_id, current_user, relation_service)


@router.get("/{video_id}/reaction", response_model=ReactionStatusResponse)
async def get_reaction_status(
    video_id: UUID,
    relation_service: Annotated[IRelationService, Depends(get_relation_service)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ReactionStatusResponse:
    return ReactionStatusResponse(
        **await relation_service.reaction_status(current_user.id, video_id)
    )


# ---------------------------------------------------------------------------
# Playlist membership
# ---------------------------------------------------------------------------
@router.get("/{video_id}/playlists", response_model=PlaylistMembershipResponse)
async def get_playlists_for_video(
    video_id: UUID,
    playlist_service: Annotated[IPlaylistService, Depends(get_playlist_service)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> PlaylistMembershipResponse:
    """The user's playlists, each flagged with whether it holds this video."""
    membership = await playlist_service.playlists_for_video(current_user.id, video_id)
    items = [
        PlaylistMembershipItem(
            id=p.id,
            name=p.name,
            video_count=len(p.video_ids),
            contains_video=contains,
        )
        for p, contains in membership
    ]
    return PlaylistMembershipResponse(video_id=video_id, playlists=items, count=len(items))


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------
@router.get("/{video_id}/comments", response_model=CommentListResponse)
async def list_comments(
    video_id: UUID,
    comment_service: Annotated[ICommentService, Depends(get_comment_service)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> CommentListResponse:
    comments = await comment_service.list_comments(video_id)
    return CommentListResponse(
        comments=[CommentResponse.model_validate(c) for c in comments],
        count=len(comments),
    )


@router.post(
    "/{video_id}/comments",
    response_model=CommentMutationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    video_id: UUID,
    body: CommentRequest,
    comment_service: Annotated[ICommentService, Depends(get_comment_service)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> CommentMutationResponse:
    comment = await comment_service.add_comment(current_user, video_id, body.text)
    return CommentMutationResponse(
        message="Comment added", comment=CommentResponse.model_validate(comment)
    )


@router.put("/{video_id}/comments/{comment_id}", response_model=CommentMutationResponse)
async def update_comment(
    video_id: UUID,
    comment_id: UUID,
    body: CommentRequest,
    comment_service: Annotated[ICommentService, Depends(get_comment_service)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> CommentMutationResponse:
    """Edit a comment (its author or the video's uploader)."""
    comment = await comment_service.update_comment(current_user, video_id, comment_id, body.text)
    return CommentMutationResponse(
        message="Comment updated", comment=CommentResponse.model_validate(comment)
    )


@router.delete("/{video_id}/comments/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    video_id: UUID,
    comment_id: UUID,
    comment_service: Annotated[ICommentService, Depends(get_comment_service)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> MessageResponse:
    """Delete a comment (its author or the video's uploader)."""
    await comment_service.delete_comment(current_user, video_id, comment_id)
    return MessageResponse(message="Comment deleted")
