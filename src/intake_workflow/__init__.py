"""intake_workflow — the five-step patient intake SDK.

Public API:
    IntakeWorkflow   — create sessions, resolve tokens, submit steps 1-5
    AdminService     — staff queries, dashboard stats, IFC pre-fill
    SessionProgress  — immutable (current_step, completed_steps, status)
    advance          — the state machine's single transition

Errors:
    ValidationError  — missing/malformed field or unknown step
    NotFound         — unknown session token or patient id
    StorageFailure   — the database failed the operation
"""

from intake_workflow.admin import AdminService
from intake_workflow.errors import IntakeError, NotFound, StorageFailure, ValidationError
from intake_workflow.models import (
    ConsentAnswers,
    Eq5dAnswers,
    IfcAnswers,
    IfcPrefill,
    OdiAnswers,
    PatientCreate,
    SessionInfo,
    SubmissionResult,
    VasAnswers,
)
from intake_workflow.state import SessionProgress, advance, initial_progress
from intake_workflow.workflow import IntakeWorkflow

__all__ = [
    "AdminService",
    "IntakeWorkflow",
    # State machine
    "SessionProgress",
    "advance",
    "initial_progress",
    # Errors
    "IntakeError",
    "NotFound",
    "StorageFailure",
    "ValidationError",
    # Payloads / results
    "ConsentAnswers",
    "Eq5dAnswers",
    "IfcAnswers",
    "IfcPrefill",
    "OdiAnswers",
    "PatientCreate",
    "SessionInfo",
    "SubmissionResult",
    "VasAnswers",
]
