"""Async CRUD repository for patients, intake sessions and step responses.

All public methods accept an ``AsyncSession`` so the caller controls
transaction boundaries.  Writes ``flush()`` but never ``commit()``: the
server's ``get_db`` dependency commits once per request, which is what
makes "insert response row + advance session" a single atomic unit.

The repository does no business-logic validation: step
ordering and payload rules belong in ``intake_workflow``.  It *does* rely
on DB constraints for structural invariants (one response row per session
per step, step range, completed sessions carry a timestamp).
"""

from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from intake_db.models.enums import SessionStatus
from intake_db.models.patient import Patient
from intake_db.models.responses import RESPONSE_MODELS
from intake_db.models.session import IntakeSession


def _escape_like(text: str) -> str:
    """Escape LIKE wildcards so user input matches literally."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class IntakeRepository:
    """Async read/write operations on the intake tables."""

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create_patient(
        self,
        db: AsyncSession,
        *,
        name: str,
        date_of_birth: date,
        hospital: str | None = None,
        email: str | None = None,
        phone: str | None = None,
    ) -> Patient:
        """Insert a new patient row and return it (id populated)."""
        patient = Patient(
            name=name,
            date_of_birth=date_of_birth,
            hospital=hospital,
            email=email,
            phone=phone,
        )
        db.add(patient)
        await db.flush()
        return patient

    async def create_session(
        self,
        db: AsyncSession,
        *,
        patient: Patient,
        session_token: str,
    ) -> IntakeSession:
        """Insert a fresh session (step 1, nothing completed) for ``patient``."""
        session = IntakeSession(
            patient_id=patient.id,
            patient=patient,
            session_token=session_token,
            current_step=1,
            completed_steps=[],
            status=SessionStatus.IN_PROGRESS,
        )
        db.add(session)
        await db.flush()
        return session

    # ------------------------------------------------------------------
    # Read — single row
    # ------------------------------------------------------------------

    async def get_by_token(
        self, db: AsyncSession, session_token: str
    ) -> IntakeSession | None:
        """Fetch a session (with its patient) by its bearer token."""
        stmt = select(IntakeSession).where(IntakeSession.session_token == session_token)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_patient(self, db: AsyncSession, patient_id: int) -> Patient | None:
        """Fetch a patient by id; ``sessions`` is loaded alongside."""
        return await db.get(Patient, patient_id)

    async def get_response(self, db: AsyncSession, step: int, session_pk: int) -> Any | None:
        """Return the response row for ``step`` belonging to a session, if any."""
        model = RESPONSE_MODELS[step]
        stmt = select(model).where(model.session_id == session_pk)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    # ------------------------------------------------------------------
    # Read — multiple rows
    # ------------------------------------------------------------------

    async def list_patients(
        self,
        db: AsyncSession,
        *,
        status: SessionStatus | None = None,
        search: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Patient]:
        """Patients newest first, ``sessions`` loaded alongside.

        ``status`` keeps patients owning a session in that status; ``search``
        is a case-insensitive substring match on name, email or hospital.
        Pagination counts patients, never sessions.  ``limit=None`` returns
        every match.
        """
        stmt = select(Patient).order_by(Patient.created_at.desc(), Patient.id.desc())
        if status is not None:
            stmt = stmt.where(Patient.sessions.any(IntakeSession.status == status))
        if search:
            pattern = f"%{_escape_like(search)}%"
            stmt = stmt.where(
                or_(
                    Patient.name.ilike(pattern, escape="\\"),
                    Patient.email.ilike(pattern, escape="\\"),
                    Patient.hospital.ilike(pattern, escape="\\"),
                )
            )
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def count_patients(
        self,
        db: AsyncSession,
        *,
        created_from: datetime | None = None,
        created_before: datetime | None = None,
    ) -> int:
        """Count patients, optionally within ``[created_from, created_before)``."""
        stmt = select(func.count()).select_from(Patient)
        if created_from is not None:
            stmt = stmt.where(Patient.created_at >= created_from)
        if created_before is not None:
            stmt = stmt.where(Patient.created_at < created_before)
        result = await db.execute(stmt)
        return int(result.scalar_one())

    async def count_sessions(self, db: AsyncSession, status: SessionStatus) -> int:
        """Count sessions in the given status."""
        stmt = (
            select(func.count())
            .select_from(IntakeSession)
            .where(IntakeSession.status == status)
        )
        result = await db.execute(stmt)
        return int(result.scalar_one())

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    async def save_progress(
        self,
        db: AsyncSession,
        session: IntakeSession,
        *,
        current_step: int,
        completed_steps: list[int],
        status: SessionStatus,
    ) -> IntakeSession:
        """Write the state machine's output onto the session row.

        ``completed_at`` is stamped the first time status becomes completed.
        """
        now = datetime.now(timezone.utc)
        session.current_step = current_step
        # New list object so SQLAlchemy detects the JSONB change
        session.completed_steps = list(completed_steps)
        if status == SessionStatus.COMPLETED and session.completed_at is None:
            session.completed_at = now
        session.status = status
        session.updated_at = now
        await db.flush()
        return session

    async def save_response(
        self,
        db: AsyncSession,
        step: int,
        session_pk: int,
        values: dict[str, Any],
    ) -> Any:
        """Update the session's row for ``step`` in place, or insert one.

        Only the keys present in ``values`` are written on update, so a staff
        pre-fill never clears the patient's signature and vice versa.
        """
        row = await self.get_response(db, step, session_pk)
        if row is None:
            row = RESPONSE_MODELS[step](session_id=session_pk, **values)
            db.add(row)
        else:
            for column, value in values.items():
                setattr(row, column, value)
        await db.flush()
        return row
