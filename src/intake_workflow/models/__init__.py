"""Public model re-exports for intake_workflow.

Consumers should import from ``intake_workflow.models`` rather than
reaching into sub-modules directly.
"""

# --- Inbound ---
from intake_workflow.models.answers import (
    ANSWER_MODELS,
    odi_disability_percent,
    parse_payload,
    ConsentAnswers,
    Eq5dAnswers,
    IfcAnswers,
    IfcPrefill,
    OdiAnswers,
    PatientCreate,
    StepAnswers,
    VasAnswers,
)

# --- Outbound ---
from intake_workflow.models.views import (
    ConsentRecord,
    CreateSessionResult,
    DashboardStats,
    Eq5dRecord,
    IfcRecord,
    IfcTemplate,
    OdiRecord,
    PatientDetail,
    PatientRecord,
    PatientSummary,
    SessionInfo,
    SessionRecord,
    SubmissionResult,
    SuccessResult,
    VasRecord,
)

__all__ = [
    # Inbound
    "ANSWER_MODELS",
    "odi_disability_percent",
    "parse_payload",
    "ConsentAnswers",
    "Eq5dAnswers",
    "IfcAnswers",
    "IfcPrefill",
    "OdiAnswers",
    "PatientCreate",
    "StepAnswers",
    "VasAnswers",
    # Outbound
    "ConsentRecord",
    "CreateSessionResult",
    "DashboardStats",
    "Eq5dRecord",
    "IfcRecord",
    "IfcTemplate",
    "OdiRecord",
    "PatientDetail",
    "PatientRecord",
    "PatientSummary",
    "SessionInfo",
    "SessionRecord",
    "SubmissionResult",
    "SuccessResult",
    "VasRecord",
]
