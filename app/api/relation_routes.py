"""Liked, disliked and watch-later API routes.

The three collections share one shape, so their routers are built from a
single factory:

  GET    /{prefix}/                  list the populated videos
  POST   /{prefix}/{video_id}        add
  DELETE /{prefix}/{video_id}        remove
  GET    /{prefix}/{video_id}/check  membership test
  DELETE /{prefix}/                  clear
"""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends

from app.api.schemas import (
    ClearResponse,
    RelationCheckResponse,
    RelationListResponse,
    RelationMutationResponse,
    VideoResponse,
)
from app.core.dependencies import get_current_user, get_relation_service
from app.domain.collections import RELATION_LABELS
from app.domain.entities import RelationKind, User
from app.domain.services import IRelationService

logger = logging.getLogger(__name__)


def build_relation_router(kind: RelationKind, prefix: str) -> APIRouter:
    label = RELATION_LABELS[kind]
    router = APIRouter(prefix=prefix, tags=[label])

    @router.get("/", response_model=RelationListResponse)
    async def list_relation(
        relation_service: Annotated[IRelationService, Depends(get_relation_service)],
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> RelationListResponse:
        videos = await relation_service.list_videos(current_user.id, kind)
        return RelationListResponse(
            videos=[VideoResponse.model_validate(v) for v in videos],
            count=len(videos),
        )

    @router.post("/{video_id}", response_model=RelationMutationResponse)
    async def add_to_relation(
        video_id: UUID,
        relation_service: Annotated[IRelationService, Depends(get_relation_service)],
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> RelationMutationResponse:
        ref_set = await relation_service.add(current_user.id, kind, video_id)
        return RelationMutationResponse(
            message=f"Video added to {label}",
            video_ids=list(ref_set.video_ids),
            count=len(ref_set),
        )

    @router.delete("/{video_id}", response_model=RelationMutationResponse)
    async def remove_from_relation(
        video_id: UUID,
        relation_service: Annotated[IRelationService, Depends(get_relation_service)],
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> RelationMutationResponse:
        ref_set = await relation_service.remove(current_user.id, kind, video_id)
        return RelationMutationResponse(
            message=f"Video removed from {label}",
            video_ids=list(ref_set.video_ids),
            count=len(ref_set),
        )

    @router.get("/{video_id}/check", response_model=RelationCheckResponse)
    async def check_relation(
        video_id: UUID,
        relation_service: Annotated[IRelationService, Depends(get_relation_service)],
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> RelationCheckResponse:
        contains = await relation_service.contains(current_user.id, kind, video_id)
        return RelationCheckResponse(video_id=video_id, contains=contains)

    @router.delete("/", response_model=ClearResponse)
    async def clear_relation(
        relation_service: Annotated[IRelationService, Depends(get_relation_service)],
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> ClearResponse:
        removed = await relation_service.clear(current_user.id, kind)
        return ClearResponse(message=f"Cleared {label}", count=removed)

    return router


liked_router = build_relation_router(RelationKind.LIKED, "/liked")
disliked_router = build_relation_router(RelationKind.DISLIKED, "/disliked")
watch_later_router = build_relation_router(RelationKind.WATCH_LATER, "/watch-later")
