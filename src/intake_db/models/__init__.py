"""ORM models for intake_db."""

from intake_db.models.base import Base
from intake_db.models.enums import SessionStatus
from intake_db.models.patient import Patient
from intake_db.models.responses import (
    Eq5dResponse,
    IfcResponse,
    OdiResponse,
    SurgicalConsent,
    VasResponse,
)
from intake_db.models.session import IntakeSession

__all__ = [
    "Base",
    "SessionStatus",
    "Patient",
    "IntakeSession",
    "OdiResponse",
    "VasResponse",
    "Eq5dResponse",
    "SurgicalConsent",
    "IfcResponse",
]
