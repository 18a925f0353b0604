"""Task status API route.

  GET /tasks/{task_id}

Clients poll this with the ``X-Task-ID`` header returned by video deletion
and counter reconciliation.  ``status`` mirrors Celery's task states.
"""

import logging

from celery.result import AsyncResult
from fastapi import APIRouter

from app.api.schemas import TaskStatusResponse
from app.infrastructure.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("/{task_id}", response_model=TaskStatusResponse)
async def get_task_status(task_id: str) -> TaskStatusResponse:
    """Get the current state of a background task."""
    result = AsyncResult(task_id, app=celery_app)

    value = None
    error: str | None = None
    if result.state == "SUCCESS":
        value = result.result
    elif result.state == "FAILURE":
        error = str(result.result)

    logger.debug("Task %s state: %s", task_id, result.state)

    return TaskStatusResponse(task_id=task_id, status=result.state, result=value, error=error)
