"""FastAPI dependency injection — provides DB sessions and the services.

Each request that touches the database gets a fresh ``AsyncSession`` via
``get_db()``.  The session is committed on success and rolled back on error.
Repository methods call ``flush()`` but never ``commit()``, so a step
submission's response row and session update land together or not at all.

Routes declare it as ``Depends(get_db, scope="function")`` so the commit
runs before the response is sent; a failed commit then reaches the
exception handlers and the client sees a 503 instead of a success body.
"""

import logging
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from intake_db.engine import get_session_factory
from intake_workflow.admin import AdminService
from intake_workflow.errors import StorageFailure
from intake_workflow.workflow import IntakeWorkflow

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Database session — transaction boundary lives here
# ------------------------------------------------------------------

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async DB session; commit on success, rollback on error.

    A failed commit is rolled back and re-raised as ``StorageFailure``.
    """
    factory = get_session_factory()
    async with factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        try:
            await session.commit()
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.error("Commit failed: %s", exc)
            raise StorageFailure("Failed to save changes") from exc


# ------------------------------------------------------------------
# Services — stashed on app.state during lifespan
# ------------------------------------------------------------------

def get_workflow(request: Request) -> IntakeWorkflow:
    """Return the IntakeWorkflow singleton from ``app.state``."""
    return request.app.state.workflow


def get_admin(request: Request) -> AdminService:
    """Return the AdminService singleton from ``app.state``."""
    return request.app.state.admin
