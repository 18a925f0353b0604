"""Playlist API routes."""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.api.schemas import (
    ClearResponse,
    PlaylistCreateRequest,
    PlaylistDeleteResponse,
    PlaylistListResponse,
    PlaylistMutationResponse,
    PlaylistResponse,
    PlaylistUpdateRequest,
)
from app.core.dependencies import get_current_user, get_playlist_service
from app.domain.entities import User
from app.domain.services import IPlaylistService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/playlists", tags=["playlists"])


@router.get("/", response_model=PlaylistListResponse)
async def list_playlists(
    playlist_service: Annotated[IPlaylistService, Depends(get_playlist_service)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> PlaylistListResponse:
    """All playlists of the user, in creation order, with their videos."""
    populated = await playlist_service.list_playlists(current_user.id)
    playlists = [PlaylistResponse.from_entity(p, videos) for p, videos in populated]
    return PlaylistListResponse(playlists=playlists, count=len(playlists))


@router.post("/", response_model=PlaylistMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_playlist(
    body: PlaylistCreateRequest,
    playlist_service: Annotated[IPlaylistService, Depends(get_playlist_service)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> PlaylistMutationResponse:
    playlist = await playlist_service.create_playlist(current_user.id, body.name, body.description)
    return PlaylistMutationResponse(
        message="Playlist created", playlist=PlaylistResponse.from_entity(playlist, [])
    )


@router.delete("/", response_model=ClearResponse)
async def delete_all_playlists(
    playlist_service: Annotated[IPlaylistService, Depends(get_playlist_service)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ClearResponse:
    count = await playlist_service.delete_all(current_user.id)
    return ClearResponse(message="All playlists deleted", count=count)


@router.get("/{playlist_id}", response_model=PlaylistResponse)
async def get_playlist(
    playlist_id: UUID,
    playlist_service: Annotated[IPlaylistService, Depends(get_playlist_service)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> PlaylistResponse:
    playlist, videos = await playlist_service.get_playlist(current_user.id, playlist_id)
    return PlaylistResponse.from_entity(playlist, videos)


@router.put("/{playlist_id}", response_model=PlaylistMutationResponse)
async def update_playlist(
    playlist_id: UUID,
    body: PlaylistUpdateRequest,
    playlist_service: Annotated[IPlaylistService, Depends(get_playlist_service)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> PlaylistMutationResponse:
    """Rename and/or re-describe a playlist. A blank name leaves it unchanged."""
    playlist = await playlist_service.update_playlist(
        current_user.id, playlist_id, body.name, body.description
    )
    return PlaylistMutationResponse(
        message="Playlist updated", playlist=PlaylistResponse.from_entity(playlist)
    )


@router.delete("/{playlist_id}", response_model=PlaylistDeleteResponse)
async def delete_playlist(
    playlist_id: UUID,
    playlist_service: Annotated[IPlaylistService, Depends(get_playlist_service)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> PlaylistDeleteResponse:
    deleted, remaining = await playlist_service.delete_playlist(current_user.id, playlist_id)
    playlists = [PlaylistResponse.from_entity(p, videos) for p, videos in remaining]
    return PlaylistDeleteResponse(
        message="Playlist deleted",
        deleted=PlaylistResponse.from_entity(deleted),
        playlists=playlists,
        count=len(playlists),
    )


@router.post("/{playlist_id}/videos/{video_id}", response_model=PlaylistMutationResponse)
async def add_video_to_playlist(
    playlist_id: UUID,
    video_id: UUID,
    playlist_service: Annotated[IPlaylistService, Depends(get_playlist_service)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> PlaylistMutationResponse:
    playlist = await playlist_service.add_video(current_user.id, playlist_id, video_id)
    return PlaylistMutationResponse(
        message="Video added to playlist", playlist=PlaylistResponse.from_entity(playlist)
    )


@router.delete("/{playlist_id}/videos/{video_id}", response_model=PlaylistMutationResponse)
async def remove_video_from_playlist(
    playlist_id: UUID,
    video_id: UUID,
    playlist_service: Annotated[IPlaylistService, Depends(get_playlist_service)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> PlaylistMutationResponse:
    playlist = await playlist_service.remove_video(current_user.id, playlist_id, video_id)
    return PlaylistMutationResponse(
        message="Video removed from playlist", playlist=PlaylistResponse.from_entity(playlist)
    )
