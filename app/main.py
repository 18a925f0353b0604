"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from app.api.auth_routes import router as auth_router
from app.api.history_routes import router as history_router
from app.api.library_routes import router as library_router
from app.api.playlist_routes import router as playlist_router
from app.api.relation_routes import disliked_router, liked_router, watch_later_router
from app.api.task_routes import router as task_router
from app.api.video_routes import router as video_router
from app.core.config import settings
from app.domain.exceptions import (
    AuthorizationError,
    DomainError,
    NotFoundError,
    PersistenceFault,
)
from app.infrastructure.database.connection import init_db

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("Starting VidShare application")
    await init_db()
    logger.info("Database initialized")
    yield
    logger.info("Shutting down VidShare application")


app = FastAPI(
    title="VidShare",
    description="Video sharing backend: uploads, reactions, playlists and watch history",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error translation
# ---------------------------------------------------------------------------
def _status_for(exc: DomainError) -> int:
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, AuthorizationError):
        return status.HTTP_403_FORBIDDEN
    if isinstance(exc, PersistenceFault):
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    # ValidationError and every InvariantViolation
    return status.HTTP_400_BAD_REQUEST


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = _status_for(exc)
    if status_code >= 500:
        # The cause was logged where it was caught.
        detail = "Internal server error"
    else:
        detail = exc.message
        logger.info("%s %s rejected: %s (%s)", request.method, request.url.path, exc.category, detail)
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": exc.category, "detail": detail},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s: %s", request.method, request.url.path, exc, exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": PersistenceFault.category, "detail": "Internal server error"},
    )


app.include_router(auth_router)
app.include_router(video_router)
app.include_router(liked_router)
app.include_router(disliked_router)
app.include_router(watch_later_router)
app.include_router(playlist_router)
app.include_router(history_router)
app.include_router(library_router)
app.include_router(task_router)

if settings.storage_backend == "local":
    app.mount("/media", StaticFiles(directory=settings.storage_path, check_dir=False), name="media")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
