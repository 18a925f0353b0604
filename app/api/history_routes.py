"""Watch history API routes."""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends

from app.api.schemas import ClearResponse, HistoryItem, HistoryResponse
from app.core.dependencies import get_current_user, get_history_service
from app.domain.entities import User
from app.domain.services import IHistoryService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/history", tags=["history"])


def _history(pairs, message=None) -> HistoryResponse:
    items = [HistoryItem.from_pair(entry, video) for entry, video in pairs]
    return HistoryResponse(message=message, history=items, count=len(items))


@router.get("/", response_model=HistoryResponse)
async def get_history(
    history_service: Annotated[IHistoryService, Depends(get_history_service)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> HistoryResponse:
    """Watch history, most recent first."""
    return _history(await history_service.get_history(current_user.id))


@router.post("/{video_id}", response_model=HistoryResponse)
async def record_watch(
    video_id: UUID,
    history_service: Annotated[IHistoryService, Depends(get_history_service)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> HistoryResponse:
    """Move the video to the top of the history (keeps the newest 100)."""
    pairs = await history_service.record(current_user.id, video_id)
    return _history(pairs, "History updated")


@router.delete("/{video_id}", response_model=HistoryResponse)
async def remove_from_history(
    video_id: UUID,
    history_service: Annotated[IHistoryService, Depends(get_history_service)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> HistoryResponse:
    pairs = await history_service.remove(current_user.id, video_id)
    return _history(pairs, "Video removed from history")


@router.delete("/", response_model=ClearResponse)
async def clear_history(
    history_service: Annotated[IHistoryService, Depends(get_history_service)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ClearResponse:
    count = await history_service.clear(current_user.id)
    return ClearResponse(message="History cleared", count=count)
