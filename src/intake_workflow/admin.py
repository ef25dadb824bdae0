"""AdminService — read-side queries for staff and the IFC pre-fill upsert.

Staff review patients, drill into every questionnaire a patient has
submitted, watch dashboard counts, and can write the financial part of
the IFC step ahead of the patient.  Apart from that upsert, nothing here
writes to the database.
"""

from __future__ import annotations

import logging
from datetime import datetime, time, timedelta, timezone
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from intake_db.models.enums import SessionStatus
from intake_db.models.session import IntakeSession
from intake_db.repository import IntakeRepository

from intake_workflow.constants import IFC_FINANCIAL_FIELDS
from intake_workflow.errors import NotFound, ValidationError
from intake_workflow.models.answers import IfcPrefill, odi_disability_percent, parse_payload
from intake_workflow.models.views import (
    ConsentRecord,
    DashboardStats,
    Eq5dRecord,
    IfcRecord,
    IfcTemplate,
    OdiRecord,
    PatientDetail,
    PatientRecord,
    PatientSummary,
    SessionRecord,
    SuccessResult,
    VasRecord,
)
from intake_workflow.state import progress_of
from intake_workflow.workflow import require_session

logger = logging.getLogger(__name__)


def utc_day_bounds(now: datetime) -> tuple[datetime, datetime]:
    """Return ``[midnight, next midnight)`` of ``now``'s UTC calendar day."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    start = datetime.combine(now.astimezone(timezone.utc).date(), time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


class AdminService:
    """Staff-facing queries over patients, sessions and responses."""

    def __init__(self) -> None:
        self._repo = IntakeRepository()

    async def list_patients(
        self,
        db: AsyncSession,
        *,
        status: SessionStatus | str | None = None,
        q: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[PatientSummary]:
        """One summary per patient, newest first, with their latest session.

        ``status`` filters on session status and ``q`` searches name, email
        and hospital.  Every matching patient is returned unless ``limit``
        is given.

        Raises:
            ValidationError: ``status`` is not a known session status.
        """
        if status is not None:
            try:
                status = SessionStatus(status)
            except ValueError as exc:
                raise ValidationError(f"Unknown session status: {status!r}") from exc
        search = q.strip() if q else None

        patients = await self._repo.list_patients(
            db, status=status, search=search or None, limit=limit, offset=offset,
        )
        summaries = []
        for patient in patients:
            summary = PatientRecord.model_validate(patient).model_dump()
            if patient.sessions:
                # sessions are ordered newest first
                session = patient.sessions[0]
                progress = progress_of(session)
                summary.update(
                    session_token=session.session_token,
                    current_step=progress.current_step,
                    completed_steps=sorted(progress.completed_steps),
                    status=progress.status.value,
                    session_created_at=session.created_at,
                )
            summaries.append(PatientSummary(**summary))
        return summaries

    async def get_patient_detail(self, db: AsyncSession, patient_id: int) -> PatientDetail:
        """Patient, their latest session, and each step's response (or null).

        Raises:
            NotFound: if no patient has ``patient_id``.
        """
        patient = await self._repo.get_patient(db, patient_id)
        if patient is None:
            raise NotFound(f"Patient not found: id={patient_id}")

        detail = PatientDetail(patient=PatientRecord.model_validate(patient))
        if not patient.sessions:
            return detail

        # sessions are ordered newest first
        session = patient.sessions[0]
        detail.session = self._to_session_record(session)

        odi = await self._repo.get_response(db, 1, session.id)
        if odi is not None:
            detail.odi = OdiRecord.model_validate(odi).model_copy(
                update={"disability_percent": odi_disability_percent(odi.total_score)}
            )
        vas = await self._repo.get_response(db, 2, session.id)
        if vas is not None:
            detail.vas = VasRecord.model_validate(vas)
        eq5d = await self._repo.get_response(db, 3, session.id)
        if eq5d is not None:
            detail.eq5d = Eq5dRecord.model_validate(eq5d)
        consent = await self._repo.get_response(db, 4, session.id)
        if consent is not None:
            detail.consent = ConsentRecord.model_validate(consent)
        ifc = await self._repo.get_response(db, 5, session.id)
        if ifc is not None:
            detail.ifc = IfcRecord.model_validate(ifc)
        return detail

    async def get_stats(
        self, db: AsyncSession, *, now: datetime | None = None
    ) -> DashboardStats:
        """Dashboard counts.  "Today" is the current UTC calendar day."""
        start, end = utc_day_bounds(now or datetime.now(timezone.utc))
        return DashboardStats(
            total_patients=await self._repo.count_patients(db),
            completed_sessions=await self._repo.count_sessions(db, SessionStatus.COMPLETED),
            in_progress_sessions=await self._repo.count_sessions(db, SessionStatus.IN_PROGRESS),
            today_patients=await self._repo.count_patients(
                db, created_from=start, created_before=end,
            ),
        )

    # ------------------------------------------------------------------
    # IFC pre-fill
    # ------------------------------------------------------------------

    async def get_ifc_template(self, db: AsyncSession, *, session_token: str) -> IfcTemplate:
        """Patient identity plus any financial fields already on file."""
        session = await require_session(self._repo, db, session_token)
        template: dict[str, Any] = {
            "session_token": session.session_token,
            "patient_name": session.patient.name,
            "date_of_birth": session.patient.date_of_birth,
        }
        existing = await self._repo.get_response(db, 5, session.id)
        if existing is not None:
            template.update({name: getattr(existing, name) for name in IFC_FINANCIAL_FIELDS})
        return IfcTemplate(**template)

    async def upsert_ifc(
        self,
        db: AsyncSession,
        *,
        session_token: str,
        prefill: IfcPrefill | dict[str, Any],
    ) -> SuccessResult:
        """Write the six financial fields onto the session's IFC row.

        Updates the row in place when one exists, otherwise inserts it.
        Session progress is never touched: the patient still has to sign.

        Raises:
            ValidationError: malformed financial fields.
            NotFound: unknown token.
        """
        data = parse_payload(IfcPrefill, prefill)
        session = await require_session(self._repo, db, session_token)
        await self._repo.save_response(
            db, 5, session.id, data.model_dump(include=set(IFC_FINANCIAL_FIELDS)),
        )
        logger.info("IFC financial fields saved for session id=%s", session.id)
        return SuccessResult()

    @staticmethod
    def _to_session_record(session: IntakeSession) -> SessionRecord:
        progress = progress_of(session)
        return SessionRecord(
            session_token=session.session_token,
            current_step=progress.current_step,
            completed_steps=sorted(progress.completed_steps),
            status=progress.status.value,
            created_at=session.created_at,
            updated_at=session.updated_at,
            completed_at=session.completed_at,
        )
