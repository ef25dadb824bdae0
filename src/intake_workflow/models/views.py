"""Outbound models — the contract between the workflow and API callers.

These are decoupled from the ORM models in ``intake_db`` so callers never
see database internals: the integer session id stays server-side and only
the token identifies a session externally.  Record models read straight off
ORM rows via ``from_attributes``.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict


class CreateSessionResult(BaseModel):
    """Result of creating a patient + session pair."""

    success: bool = True
    session_token: str
    patient_id: int


class SessionInfo(BaseModel):
    """Public view of a session joined with its patient."""

    session_token: str
    patient_id: int
    name: str
    date_of_birth: date
    hospital: str | None = None
    current_step: int
    current_step_name: str
    completed_steps: list[int]
    status: str
    created_at: datetime
    updated_at: datetime
    completed_at: datetime | None = None


class SubmissionResult(BaseModel):
    """Result of submitting one questionnaire step.

    ``next_step`` is the step the patient should see next; ``completed``
    turns true once step 5 has been submitted.
    """

    success: bool = True
    step: int
    next_step: int
    completed: bool


class SuccessResult(BaseModel):
    success: bool = True


# ------------------------------------------------------------------
# Admin views
# ------------------------------------------------------------------

class PatientRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    date_of_birth: date
    hospital: str | None = None
    email: str | None = None
    phone: str | None = None
    created_at: datetime
    updated_at: datetime


class PatientSummary(PatientRecord):
    """One row of the admin patient list (session fields null if none)."""

    session_token: str | None = None
    current_step: int | None = None
    completed_steps: list[int] | None = None
    status: str | None = None
    session_created_at: datetime | None = None


class SessionRecord(BaseModel):
    session_token: str
    current_step: int
    completed_steps: list[int]
    status: str
    created_at: datetime
    updated_at: datetime
    completed_at: datetime | None = None


class OdiRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    pain_intensity: int
    personal_care: int
    lifting: int
    walking: int
    sitting: int
    standing: int
    sleeping: int
    sex_life: int
    social_life: int
    travelling: int
    total_score: int
    disability_percent: float = 0.0
    completed_at: datetime | None = None


class VasRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    neck_pain: float
    right_arm: float
    left_arm: float
    back_pain: float
    right_leg: float
    left_leg: float
    completed_at: datetime | None = None


class Eq5dRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    mobility: int
    personal_care: int
    usual_activities: int
    pain_discomfort: int
    anxiety_depression: int
    health_scale: int
    completed_at: datetime | None = None


class ConsentRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    procedure_name: str
    consent_items: dict[str, str]
    patient_signature: str
    witness_signature: str | None = None
    signed_at: datetime
    completed_at: datetime | None = None


class IfcRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    quote_number: str
    item_number: str
    description: str
    fee: float
    rebate: float
    gap: float
    patient_signature: str | None = None
    signed_at: datetime | None = None
    completed_at: datetime | None = None


class PatientDetail(BaseModel):
    """Everything staff see for one patient; absent steps are null."""

    patient: PatientRecord
    session: SessionRecord | None = None
    odi: OdiRecord | None = None
    vas: VasRecord | None = None
    eq5d: Eq5dRecord | None = None
    consent: ConsentRecord | None = None
    ifc: IfcRecord | None = None


class DashboardStats(BaseModel):
    total_patients: int
    completed_sessions: int
    in_progress_sessions: int
    today_patients: int


class IfcTemplate(BaseModel):
    """What staff need to fill in a patient's financial consent."""

    session_token: str
    patient_name: str
    date_of_birth: date
    quote_number: str | None = None
    item_number: str | None = None
    description: str | None = None
    fee: float | None = None
    rebate: float | None = None
    gap: float | None = None
