"""Session endpoints — start an intake and resume it by token.

The token returned on creation is the patient's only credential; anyone
holding it can read and submit on that session.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from intake_workflow.models import CreateSessionResult, PatientCreate, SessionInfo
from intake_workflow.workflow import IntakeWorkflow

from intake_server.dependencies import get_db, get_workflow

router = APIRouter(tags=["sessions"])


@router.post("/sessions", status_code=201)
async def create_session(
    body: PatientCreate,
    db: AsyncSession = Depends(get_db, scope="function"),
    workflow: IntakeWorkflow = Depends(get_workflow),
) -> CreateSessionResult:
    """Register a patient and open their intake session at step 1."""
    return await workflow.create_session(db, body)


@router.get("/sessions/{session_token}")
async def get_session(
    session_token: str,
    db: AsyncSession = Depends(get_db, scope="function"),
    workflow: IntakeWorkflow = Depends(get_workflow),
) -> SessionInfo:
    """Return session progress joined with the patient.  404 if unknown."""
    return await workflow.get_session(db, session_token=session_token)
