"""intake_db — PostgreSQL persistence layer for patient intake sessions.

This package provides the ORM models, async engine factory, and repository
for patients, their intake sessions, and one response table per
questionnaire step.  It is consumed by the workflow SDK and the FastAPI
server.
"""

from intake_db.engine import dispose_engine, get_engine, get_session_factory
from intake_db.models import (
    IfcResponse,
    IntakeSession,
    Patient,
    SessionStatus,
    SurgicalConsent,
)
from intake_db.repository import IntakeRepository

__all__ = [
    "IfcResponse",
    "IntakeSession",
    "Patient",
    "SessionStatus",
    "SurgicalConsent",
    "dispose_engine",
    "get_engine",
    "get_session_factory",
    "IntakeRepository",
]
