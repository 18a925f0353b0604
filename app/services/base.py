"""Shared transaction handling for application services."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from app.domain.exceptions import DomainError, PersistenceFault
from app.domain.repositories import IUnitOfWork

logger = logging.getLogger(__name__)


class TransactionalService:
    """Base for services whose operations must land all-or-nothing."""

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    @asynccontextmanager
    async def _transaction(self, action: str) -> AsyncIterator[None]:
        """Run the body and commit once.

        Domain rejections roll back and propagate unchanged.  Anything else
        is logged with full context and re-raised as an opaque
        :class:`PersistenceFault`.
        """
        try:
            yield
            await self.unit_of_work.commit()
        except DomainError:
            await self.unit_of_work.rollback()
            raise
        except Exception as exc:
            logger.error("Failed to %s: %s", action, exc, exc_info=True)
            await self.unit_of_work.rollback()
            raise PersistenceFault(f"Failed to {action}") from exc
