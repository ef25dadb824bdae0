"""In-memory IntakeRepository replacement.

Rows are real ORM instances (``Patient``, ``IntakeSession``, the step
response models) left transient: they are never attached to a SQLAlchemy
session, so attribute access works without a database.  Each method
mirrors the real repository's interface and side effects so the workflow
and admin services behave identically.
"""

import itertools
from datetime import datetime, timezone
from typing import Any

from intake_db.models.enums import SessionStatus
from intake_db.models.patient import Patient
from intake_db.models.responses import RESPONSE_MODELS
from intake_db.models.session import IntakeSession


class MockRepository:
    """Stores patients by id, sessions by token, responses by (step, session pk)."""

    def __init__(self):
        self.patients: dict[int, Patient] = {}
        self.sessions: dict[str, IntakeSession] = {}
        self.responses: dict[int, dict[int, Any]] = {step: {} for step in RESPONSE_MODELS}
        # Number of response rows ever inserted (updates don't count)
        self.response_inserts = 0
        # Tests overwrite this to backdate created_at
        self.clock = lambda: datetime.now(timezone.utc)
        self._patient_ids = itertools.count(1)
        self._session_ids = itertools.count(1)
        self._response_ids = itertools.count(1)

    # --- Create ---

    async def create_patient(
        self, db, *, name, date_of_birth, hospital=None, email=None, phone=None,
    ):
        now = self.clock()
        patient = Patient(
            id=next(self._patient_ids),
            name=name,
            date_of_birth=date_of_birth,
            hospital=hospital,
            email=email,
            phone=phone,
            created_at=now,
            updated_at=now,
        )
        self.patients[patient.id] = patient
        return patient

    async def create_session(self, db, *, patient, session_token):
        now = self.clock()
        row = IntakeSession(
            id=next(self._session_ids),
            patient_id=patient.id,
            patient=patient,
            session_token=session_token,
            current_step=1,
            completed_steps=[],
            status=SessionStatus.IN_PROGRESS,
            created_at=now,
            updated_at=now,
        )
        self.sessions[session_token] = row
        return row

    # --- Read ---

    async def get_by_token(self, db, session_token):
        return self.sessions.get(session_token)

    async def get_patient(self, db, patient_id):
        return self.patients.get(patient_id)

    async def get_response(self, db, step, session_pk):
        return self.responses[step].get(session_pk)

    async def list_patients(self, db, *, status=None, search=None, limit=None, offset=0):
        rows = sorted(
            self.patients.values(), key=lambda p: (p.created_at, p.id), reverse=True,
        )
        if status is not None:
            rows = [p for p in rows if any(s.status == status for s in p.sessions)]
        if search:
            needle = search.casefold()
            rows = [
                p for p in rows
                if any(needle in (value or "").casefold() for value in (p.name, p.email, p.hospital))
            ]
        rows = rows[offset:]
        return rows if limit is None else rows[:limit]

    async def count_patients(self, db, *, created_from=None, created_before=None):
        return sum(
            1 for p in self.patients.values()
            if (created_from is None or p.created_at >= created_from)
            and (created_before is None or p.created_at < created_before)
        )

    async def count_sessions(self, db, status):
        return sum(1 for s in self.sessions.values() if s.status == status)

    # --- Update ---

    async def save_progress(self, db, session, *, current_step, completed_steps, status):
        now = datetime.now(timezone.utc)
        session.current_step = current_step
        session.completed_steps = list(completed_steps)
        if status == SessionStatus.COMPLETED and session.completed_at is None:
            session.completed_at = now
        session.status = status
        session.updated_at = now
        return session

    async def save_response(self, db, step, session_pk, values):
        row = self.responses[step].get(session_pk)
        if row is None:
            row = RESPONSE_MODELS[step](
                id=next(self._response_ids), session_id=session_pk, **values,
            )
            self.responses[step][session_pk] = row
            self.response_inserts += 1
        else:
            for column, value in values.items():
                setattr(row, column, value)
        return row
