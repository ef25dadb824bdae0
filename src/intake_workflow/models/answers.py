"""Inbound payload schemas — one model per questionnaire step, plus intake.

Every model is validated before the store is touched.  Validation is
structural: required fields present, numbers parse and sit in range, text
is non-empty where the form requires it.  No cross-field checks are made;
in particular the IFC ``gap`` is stored exactly as the client computed it.

``to_columns()`` returns the dict written to the step's response table.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Annotated, Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from intake_workflow.constants import ODI_MAX_TOTAL, ODI_SECTIONS
from intake_workflow.errors import ValidationError

# Reusable constrained types
OdiScore = Annotated[int, Field(ge=0, le=5)]
VasScore = Annotated[float, Field(ge=0.0, le=10.0)]
Eq5dCode = Annotated[int, Field(ge=0, le=2)]
RequiredText = Annotated[str, Field(min_length=1)]
Money = Annotated[float, Field(ge=0.0)]


def odi_disability_percent(total_score: int) -> float:
    """ODI total (0-50) as a percentage, one decimal place."""
    return round(total_score * 100 / ODI_MAX_TOTAL, 1)


# --- Intake ---

class PatientCreate(BaseModel):
    """Body for session creation: who the patient is."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: RequiredText
    date_of_birth: date
    hospital: str | None = None
    email: str | None = None
    phone: str | None = None

    @field_validator("hospital", "email", "phone", mode="after")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        return value or None


# --- Step answers ---

class StepAnswers(BaseModel):
    """Base for the five step payloads."""

    model_config = ConfigDict(str_strip_whitespace=True)

    step: ClassVar[int]

    def to_columns(self) -> dict[str, Any]:
        return self.model_dump()


class OdiAnswers(StepAnswers):
    """Step 1 — Oswestry Disability Index.

    Any ``total_score`` sent by the client is ignored; the server sums the
    ten sections itself.
    """

    step: ClassVar[int] = 1

    pain_intensity: OdiScore
    personal_care: OdiScore
    lifting: OdiScore
    walking: OdiScore
    sitting: OdiScore
    standing: OdiScore
    sleeping: OdiScore
    sex_life: OdiScore
    social_life: OdiScore
    travelling: OdiScore

    @property
    def total_score(self) -> int:
        return sum(getattr(self, section) for section in ODI_SECTIONS)

    def to_columns(self) -> dict[str, Any]:
        return {**self.model_dump(), "total_score": self.total_score}


class VasAnswers(StepAnswers):
    """Step 2 — Visual Analogue Scale pain ratings."""

    step: ClassVar[int] = 2

    neck_pain: VasScore
    right_arm: VasScore
    left_arm: VasScore
    back_pain: VasScore
    right_leg: VasScore
    left_leg: VasScore


class Eq5dAnswers(StepAnswers):
    """Step 3 — EQ-5D-3L health state."""

    step: ClassVar[int] = 3

    mobility: Eq5dCode
    personal_care: Eq5dCode
    usual_activities: Eq5dCode
    pain_discomfort: Eq5dCode
    anxiety_depression: Eq5dCode
    health_scale: int = Field(ge=0, le=100)


class ConsentAnswers(StepAnswers):
    """Step 4 — surgical consent.

    ``consent_items`` maps each consent statement's key to the initials the
    patient wrote beside it.
    """

    step: ClassVar[int] = 4

    procedure_name: RequiredText
    consent_items: dict[str, str]
    patient_signature: RequiredText
    witness_signature: str | None = None
    signed_at: datetime | None = None

    @field_validator("consent_items", mode="after")
    @classmethod
    def _check_items(cls, items: dict[str, str]) -> dict[str, str]:
        if not items:
            raise ValueError("at least one consent item is required")
        cleaned: dict[str, str] = {}
        for key, initials in items.items():
            key, initials = key.strip(), initials.strip()
            if not key:
                raise ValueError("consent item keys must be non-empty")
            if not initials:
                raise ValueError(f"initials missing for consent item {key!r}")
            cleaned[key] = initials
        return cleaned

    @field_validator("witness_signature", mode="after")
    @classmethod
    def _blank_witness(cls, value: str | None) -> str | None:
        return value or None

    def to_columns(self) -> dict[str, Any]:
        columns = self.model_dump()
        columns["signed_at"] = self.signed_at or datetime.now(timezone.utc)
        return columns


class IfcPrefill(BaseModel):
    """The six financial fields staff may write ahead of the patient."""

    model_config = ConfigDict(str_strip_whitespace=True)

    quote_number: str
    item_number: str
    description: str
    fee: Money
    rebate: Money
    # Expected to be fee - rebate; stored as given
    gap: Money


class IfcAnswers(IfcPrefill, StepAnswers):
    """Step 5 — Informed Financial Consent, signed by the patient."""

    step: ClassVar[int] = 5

    patient_signature: RequiredText
    signed_at: datetime | None = None

    def to_columns(self) -> dict[str, Any]:
        columns = self.model_dump()
        columns["signed_at"] = self.signed_at or datetime.now(timezone.utc)
        return columns


# Step number → answer model
ANSWER_MODELS: dict[int, type[StepAnswers]] = {
    model.step: model
    for model in (OdiAnswers, VasAnswers, Eq5dAnswers, ConsentAnswers, IfcAnswers)
}


def parse_payload(model: type[BaseModel], payload: Any) -> Any:
    """Validate ``payload`` against ``model``, raising the workflow's error.

    Accepts an instance of ``model`` (returned unchanged), any other pydantic
    model (re-validated from its dump) or a plain mapping.
    """
    if isinstance(payload, model):
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump()
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(_describe(exc)) from exc


def _describe(exc: PydanticValidationError) -> str:
    """Flatten pydantic's error list into one readable message."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "body"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)
