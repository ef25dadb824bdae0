"""Questionnaire endpoints — one POST per workflow step.

Each body is validated against its step's schema before the database is
touched.  A successful call stores the answers and advances the session in
the same transaction, returning the next step (and ``completed`` once all
five steps are in).
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from intake_workflow.models import (
    ConsentAnswers,
    Eq5dAnswers,
    IfcAnswers,
    OdiAnswers,
    SubmissionResult,
    VasAnswers,
)
from intake_workflow.workflow import IntakeWorkflow

from intake_server.dependencies import get_db, get_workflow

router = APIRouter(prefix="/sessions/{session_token}/questionnaires", tags=["questionnaires"])


@router.post("/odi")
async def submit_odi(
    session_token: str,
    body: OdiAnswers,
    db: AsyncSession = Depends(get_db, scope="function"),
    workflow: IntakeWorkflow = Depends(get_workflow),
) -> SubmissionResult:
    """Step 1 — Oswestry Disability Index.  ``total_score`` is computed here."""
    return await workflow.submit_odi(db, session_token=session_token, answers=body)


@router.post("/vas")
async def submit_vas(
    session_token: str,
    body: VasAnswers,
    db: AsyncSession = Depends(get_db, scope="function"),
    workflow: IntakeWorkflow = Depends(get_workflow),
) -> SubmissionResult:
    """Step 2 — Visual Analogue Scale."""
    return await workflow.submit_vas(db, session_token=session_token, answers=body)


@router.post("/eq5d")
async def submit_eq5d(
    session_token: str,
    body: Eq5dAnswers,
    db: AsyncSession = Depends(get_db, scope="function"),
    workflow: IntakeWorkflow = Depends(get_workflow),
) -> SubmissionResult:
    """Step 3 — EQ-5D-3L."""
    return await workflow.submit_eq5d(db, session_token=session_token, answers=body)


@router.post("/consent")
async def submit_consent(
    session_token: str,
    body: ConsentAnswers,
    db: AsyncSession = Depends(get_db, scope="function"),
    workflow: IntakeWorkflow = Depends(get_workflow),
) -> SubmissionResult:
    """Step 4 — surgical consent."""
    return await workflow.submit_consent(db, session_token=session_token, answers=body)


@router.post("/ifc")
async def submit_ifc(
    session_token: str,
    body: IfcAnswers,
    db: AsyncSession = Depends(get_db, scope="function"),
    workflow: IntakeWorkflow = Depends(get_workflow),
) -> SubmissionResult:
    """Step 5 — informed financial consent.  Completes the session."""
    return await workflow.submit_ifc(db, session_token=session_token, answers=body)
