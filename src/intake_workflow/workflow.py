"""IntakeWorkflow — patient-facing session creation and step submission.

Stateless orchestrator: each call resolves the session from the database,
applies the state machine, persists changes, and returns a result.  No
in-memory state is kept between calls.

Every method accepts an ``AsyncSession`` from the caller so the caller
(typically the FastAPI ``get_db`` dependency) owns the transaction.  A step
submission performs two writes (response row, session progress) and
flushes both; if either fails, the exception propagates and the caller's
rollback discards both.

Step overview:
    1  ODI      — Oswestry Disability Index (server computes total_score)
    2  VAS      — six pain-site ratings
    3  EQ5D     — five health dimensions plus a 0-100 scale
    4  Consent  — surgical consent with initialled items
    5  IFC      — informed financial consent; completes the session
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from intake_db.models.session import IntakeSession
from intake_db.repository import IntakeRepository

from intake_workflow.constants import SESSION_TOKEN_BYTES, STEP_NAMES
from intake_workflow.errors import NotFound
from intake_workflow.models.answers import (
    ANSWER_MODELS,
    ConsentAnswers,
    Eq5dAnswers,
    IfcAnswers,
    OdiAnswers,
    PatientCreate,
    VasAnswers,
    parse_payload,
)
from intake_workflow.models.views import (
    CreateSessionResult,
    SessionInfo,
    SubmissionResult,
)
from intake_workflow.state import advance, progress_of, validate_step

logger = logging.getLogger(__name__)


def new_session_token() -> str:
    """Opaque bearer token drawn from the OS CSPRNG."""
    return secrets.token_urlsafe(SESSION_TOKEN_BYTES)


async def require_session(
    repo: IntakeRepository, db: AsyncSession, session_token: str
) -> IntakeSession:
    """Load a session row by token or raise :class:`NotFound`."""
    row = await repo.get_by_token(db, session_token)
    if row is None:
        # The token is a credential; keep it out of messages and logs
        raise NotFound("Session not found")
    return row


class IntakeWorkflow:
    """Drives one patient through the five questionnaire steps."""

    def __init__(self) -> None:
        self._repo = IntakeRepository()

    # ==================================================================
    # Session lifecycle
    # ==================================================================

    async def create_session(
        self, db: AsyncSession, patient: PatientCreate | dict[str, Any]
    ) -> CreateSessionResult:
        """Create a patient and their session, starting at step 1.

        Raises:
            ValidationError: if ``name`` or ``date_of_birth`` is missing
                or malformed.
        """
        data = parse_payload(PatientCreate, patient)

        patient_row = await self._repo.create_patient(db, **data.model_dump())
        row = await self._repo.create_session(
            db, patient=patient_row, session_token=new_session_token(),
        )
        logger.info(
            "Created intake session id=%s for patient id=%s", row.id, patient_row.id,
        )
        return CreateSessionResult(
            session_token=row.session_token, patient_id=patient_row.id,
        )

    async def get_session(self, db: AsyncSession, *, session_token: str) -> SessionInfo:
        """Resolve a token to the session joined with its patient.

        Raises:
            NotFound: if no session carries ``session_token``.
        """
        row = await require_session(self._repo, db, session_token)
        return self._to_session_info(row)

    # ==================================================================
    # Step submission
    # ==================================================================

    async def submit_step(
        self,
        db: AsyncSession,
        *,
        session_token: str,
        step: int,
        answers: Any,
    ) -> SubmissionResult:
        """Persist one step's answers and advance the session.

        The payload is validated before the database is touched.  A
        repeated submission of a step overwrites that step's row and leaves
        ``completed_steps`` unchanged.

        Raises:
            ValidationError: unknown step or malformed answers.
            NotFound: unknown token; nothing is written.
        """
        step = validate_step(step)
        parsed = parse_payload(ANSWER_MODELS[step], answers)
        row = await require_session(self._repo, db, session_token)

        values = parsed.to_columns()
        values["completed_at"] = datetime.now(timezone.utc)
        await self._repo.save_response(db, step, row.id, values)

        before = progress_of(row)
        after = advance(before, step)
        await self._repo.save_progress(
            db,
            row,
            current_step=after.current_step,
            completed_steps=list(after.completed_steps),
            status=after.status,
        )

        logger.info(
            "Session id=%s submitted step %d (%s); next step %d",
            row.id, step, STEP_NAMES[step], after.current_step,
        )
        if after.is_completed and not before.is_completed:
            logger.info("Session id=%s completed", row.id)

        return SubmissionResult(
            step=step,
            next_step=after.current_step,
            completed=after.is_completed,
        )

    async def submit_odi(
        self, db: AsyncSession, *, session_token: str, answers: OdiAnswers | dict[str, Any]
    ) -> SubmissionResult:
        return await self.submit_step(db, session_token=session_token, step=1, answers=answers)

    async def submit_vas(
        self, db: AsyncSession, *, session_token: str, answers: VasAnswers | dict[str, Any]
    ) -> SubmissionResult:
        return await self.submit_step(db, session_token=session_token, step=2, answers=answers)

    async def submit_eq5d(
        self, db: AsyncSession, *, session_token: str, answers: Eq5dAnswers | dict[str, Any]
    ) -> SubmissionResult:
        return await self.submit_step(db, session_token=session_token, step=3, answers=answers)

    async def submit_consent(
        self,
        db: AsyncSession,
        *,
        session_token: str,
        answers: ConsentAnswers | dict[str, Any],
    ) -> SubmissionResult:
        return await self.submit_step(db, session_token=session_token, step=4, answers=answers)

    async def submit_ifc(
        self, db: AsyncSession, *, session_token: str, answers: IfcAnswers | dict[str, Any]
    ) -> SubmissionResult:
        return await self.submit_step(db, session_token=session_token, step=5, answers=answers)

    # ==================================================================
    # Helpers
    # ==================================================================

    @staticmethod
    def _to_session_info(row: IntakeSession) -> SessionInfo:
        """Convert an ORM row (with patient loaded) to a public SessionInfo."""
        progress = progress_of(row)
        patient = row.patient
        return SessionInfo(
            session_token=row.session_token,
            patient_id=patient.id,
            name=patient.name,
            date_of_birth=patient.date_of_birth,
            hospital=patient.hospital,
            current_step=progress.current_step,
            current_step_name=STEP_NAMES[progress.current_step],
            completed_steps=sorted(progress.completed_steps),
            status=progress.status.value,
            created_at=row.created_at,
            updated_at=row.updated_at,
            completed_at=row.completed_at,
        )
