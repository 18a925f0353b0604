"""User library route: everything a user has collected in one call."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.schemas import (
    HistoryItem,
    LibraryResponse,
    PlaylistResponse,
    UserResponse,
    VideoResponse,
)
from app.core.dependencies import (
    get_current_user,
    get_history_service,
    get_playlist_service,
    get_relation_service,
    get_video_service,
)
from app.domain.entities import RelationKind, User
from app.domain.services import IHistoryService, IPlaylistService, IRelationService, IVideoService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/library", tags=["library"])


@router.get("/", response_model=LibraryResponse)
async def get_library(
    current_user: Annotated[User, Depends(get_current_user)],
    relation_service: Annotated[IRelationService, Depends(get_relation_service)],
    history_service: Annotated[IHistoryService, Depends(get_history_service)],
    playlist_service: Annotated[IPlaylistService, Depends(get_playlist_service)],
    video_service: Annotated[IVideoService, Depends(get_video_service)],
) -> LibraryResponse:
    liked = await relation_service.list_videos(current_user.id, RelationKind.LIKED)
    watch_later = await relation_service.list_videos(current_user.id, RelationKind.WATCH_LATER)
    history = await history_service.get_history(current_user.id)
    playlists = await playlist_service.list_playlists(current_user.id)
    uploaded = await video_service.list_uploaded_by(current_user.id)
    logger.debug("Library assembled for user %s", current_user.id)
    return LibraryResponse(
        user=UserResponse.model_validate(current_user),
        liked_videos=[VideoResponse.model_validate(v) for v in liked],
        watch_later=[VideoResponse.model_validate(v) for v in watch_later],
        history=[HistoryItem.from_pair(e, v) for e, v in history],
        playlists=[PlaylistResponse.from_entity(p, videos) for p, videos in playlists],
        uploaded_videos=[VideoResponse.model_validate(v) for v in uploaded],
    )
