"""Dependency injection container."""

from uuid import UUID

import redis.asyncio as aioredis
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.redis_client import get_redis, is_token_revoked
from app.core.security import decode_access_token
from app.domain.entities import User
from app.domain.repositories import (
    ICommentRepository,
    IHistoryRepository,
    IPlaylistRepository,
    IStorageService,
    IUnitOfWork,
    IUserRepository,
    IVideoRelationRepository,
    IVideoRepository,
)
from app.domain.services import (
    ICommentService,
    IHistoryService,
    IPlaylistService,
    IRelationService,
    IVideoService,
)
from app.infrastructure.database.connection import get_db
from app.infrastructure.database.repository import (
    CommentRepository,
    HistoryRepository,
    PlaylistRepository,
    SqlAlchemyUnitOfWork,
    UserRepository,
    VideoRelationRepository,
    VideoRepository,
)
from app.infrastructure.storage.local import LocalStorageService
from app.infrastructure.storage.s3 import S3StorageService
from app.services.auth_service import AuthService
from app.services.comment_service import CommentService
from app.services.history_service import HistoryService
from app.services.playlist_service import PlaylistService
from app.services.relation_service import RelationService
from app.services.video_service import VideoService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


# ---------------------------------------------------------------------------
# Infrastructure providers
# ---------------------------------------------------------------------------
def get_storage_service() -> IStorageService:
    """Return the configured storage backend."""
    if settings.storage_backend == "local":
        return LocalStorageService(settings.storage_path, settings.media_base_url)
    elif settings.storage_backend == "s3":
        return S3StorageService(
            bucket_name=settings.s3_bucket,
            region=settings.s3_region,
            endpoint_url=settings.s3_endpoint_url or None,
            public_url=settings.s3_public_url or None,
            aws_access_key_id=settings.s3_access_key or None,
            aws_secret_access_key=settings.s3_secret_key or None,
        )
    raise ValueError(f"Unknown storage backend: {settings.storage_backend}")


async def get_unit_of_work(session: AsyncSession = Depends(get_db)) -> IUnitOfWork:
    return SqlAlchemyUnitOfWork(session)


# ---------------------------------------------------------------------------
# Repository providers
# ---------------------------------------------------------------------------
async def get_user_repository(session: AsyncSession = Depends(get_db)) -> IUserRepository:
    return UserRepository(session)


async def get_video_repository(session: AsyncSession = Depends(get_db)) -> IVideoRepository:
    return VideoRepository(session)


async def get_comment_repository(session: AsyncSession = Depends(get_db)) -> ICommentRepository:
    return CommentRepository(session)


async def get_relation_repository(
    session: AsyncSession = Depends(get_db),
) -> IVideoRelationRepository:
    return VideoRelationRepository(session)


async def get_playlist_repository(
    session: AsyncSession = Depends(get_db),
) -> IPlaylistRepository:
    return PlaylistRepository(session)


async def get_history_repository(
    session: AsyncSession = Depends(get_db),
) -> IHistoryRepository:
    return HistoryRepository(session)


# ---------------------------------------------------------------------------
# Service providers
# ---------------------------------------------------------------------------
async def get_auth_service(
    user_repo: IUserRepository = Depends(get_user_repository),
    uow: IUnitOfWork = Depends(get_unit_of_work),
) -> AuthService:
    return AuthService(user_repository=user_repo, unit_of_work=uow)


async def get_video_service(
    repo: IVideoRepository = Depends(get_video_repository),
    storage: IStorageService = Depends(get_storage_service),
    uow: IUnitOfWork = Depends(get_unit_of_work),
) -> IVideoService:
    """Get video service with dependencies."""
    return VideoService(
        video_repository=repo,
        storage_service=storage,
        unit_of_work=uow,
        allowed_extensions=settings.allowed_video_extensions,
        max_upload_bytes=settings.max_upload_mb * 1024 * 1024,
    )


async def get_relation_service(
    relation_repo: IVideoRelationRepository = Depends(get_relation_repository),
    video_repo: IVideoRepository = Depends(get_video_repository),
    uow: IUnitOfWork = Depends(get_unit_of_work),
) -> IRelationService:
    return RelationService(
        relation_repository=relation_repo,
        video_repository=video_repo,
        unit_of_work=uow,
    )


async def get_playlist_service(
    playlist_repo: IPlaylistRepository = Depends(get_playlist_repository),
    video_repo: IVideoRepository = Depends(get_video_repository),
    uow: IUnitOfWork = Depends(get_unit_of_work),
) -> IPlaylistService:
    return PlaylistService(
        playlist_repository=playlist_repo,
        video_repository=video_repo,
        unit_of_work=uow,
    )


async def get_history_service(
    history_repo: IHistoryRepository = Depends(get_history_repository),
    video_repo: IVideoRepository = Depends(get_video_repository),
    uow: IUnitOfWork = Depends(get_unit_of_work),
) -> IHistoryService:
    return HistoryService(
        history_repository=history_repo,
        video_repository=video_repo,
        unit_of_work=uow,
        limit=settings.history_limit,
    )


async def get_comment_service(
    comment_repo: ICommentRepository = Depends(get_comment_repository),
    video_repo: IVideoRepository = Depends(get_video_repository),
    uow: IUnitOfWork = Depends(get_unit_of_work),
) -> ICommentService:
    return CommentService(
        comment_repository=comment_repo,
        video_repository=video_repo,
        unit_of_work=uow,
    )


# ---------------------------------------------------------------------------
# Auth dependency
# ---------------------------------------------------------------------------
async def get_current_user(
    token: str = Depends(oauth2_scheme),
    user_repo: IUserRepository = Depends(get_user_repository),
    redis_client: aioredis.Redis = Depends(get_redis),
) -> User:
    """Decode JWT and return the authenticated user.

    Rejects tokens whose ``jti`` has been written to the Redis revocation
    blacklist (i.e. the user has signed out).
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    payload = decode_access_token(token)
    if payload is None:
        raise credentials_exception

    jti: str | None = payload.get("jti")
    if jti and await is_token_revoked(redis_client, jti):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has been revoked",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id_str: str = payload.get("sub")
    if user_id_str is None:
        raise credentials_exception
    try:
        user_id = UUID(user_id_str)
    except ValueError:
        raise credentials_exception
    user = await user_repo.get_by_id(user_id)
    if user is None or not user.is_active:
        raise credentials_exception
    return user
