"""Questionnaire response ORM models — one table per workflow step.

Every table carries ``session_id`` (FK to ``intake_sessions.id``) with a
UNIQUE constraint: a session owns at most one row per step, and a repeated
submission overwrites that row in place.  ``completed_at`` records when the
patient submitted the step.

Step → table:
    1  ODI      odi_responses
    2  VAS      vas_responses
    3  EQ5D     eq5d_responses
    4  Consent  surgical_consents
    5  IFC      ifc_responses
"""

from datetime import datetime

from sqlalchemy import Float, ForeignKey, Integer, SmallInteger, Text, text
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from intake_db.models.base import Base


class _StepResponseMixin:
    """Columns shared by every step table."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    @declared_attr
    def session_id(cls) -> Mapped[int]:
        return mapped_column(
            ForeignKey("intake_sessions.id"), nullable=False, unique=True,
        )

    # Set by the workflow on patient submission; null on staff pre-fill
    completed_at: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True
    )


class OdiResponse(_StepResponseMixin, Base):
    """Step 1 — Oswestry Disability Index, ten sections scored 0-5."""

    __tablename__ = "odi_responses"
    step = 1

    pain_intensity: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    personal_care: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    lifting: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    walking: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    sitting: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    standing: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    sleeping: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    sex_life: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    social_life: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    travelling: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    # Sum of the ten sections (0-50), computed server-side
    total_score: Mapped[int] = mapped_column(SmallInteger, nullable=False)


class VasResponse(_StepResponseMixin, Base):
    """Step 2 — Visual Analogue Scale, six pain sites rated 0.0-10.0."""

    __tablename__ = "vas_responses"
    step = 2

    neck_pain: Mapped[float] = mapped_column(Float, nullable=False)
    right_arm: Mapped[float] = mapped_column(Float, nullable=False)
    left_arm: Mapped[float] = mapped_column(Float, nullable=False)
    back_pain: Mapped[float] = mapped_column(Float, nullable=False)
    right_leg: Mapped[float] = mapped_column(Float, nullable=False)
    left_leg: Mapped[float] = mapped_column(Float, nullable=False)


class Eq5dResponse(_StepResponseMixin, Base):
    """Step 3 — EQ-5D-3L, five dimensions coded 0-2 plus a 0-100 scale."""

    __tablename__ = "eq5d_responses"
    step = 3

    mobility: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    personal_care: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    usual_activities: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    pain_discomfort: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    anxiety_depression: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    health_scale: Mapped[int] = mapped_column(SmallInteger, nullable=False)


class SurgicalConsent(_StepResponseMixin, Base):
    """Step 4 — surgical consent with per-item patient initials."""

    __tablename__ = "surgical_consents"
    step = 4

    procedure_name: Mapped[str] = mapped_column(Text, nullable=False)
    # {"item1": "JD", "item2": "JD", ...}
    consent_items: Mapped[dict[str, str]] = mapped_column(
        JSONB,
        nullable=False,
        server_default=text("'{}'::jsonb"),
    )
    patient_signature: Mapped[str] = mapped_column(Text, nullable=False)
    witness_signature: Mapped[str | None] = mapped_column(Text, nullable=True)
    signed_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)


class IfcResponse(_StepResponseMixin, Base):
    """Step 5 — Informed Financial Consent.

    Staff may pre-fill the financial columns before the patient reaches
    step 5, so the signature columns and ``completed_at`` stay null until
    the patient submits.
    """

    __tablename__ = "ifc_responses"
    step = 5

    quote_number: Mapped[str] = mapped_column(Text, nullable=False)
    item_number: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    fee: Mapped[float] = mapped_column(Float, nullable=False)
    rebate: Mapped[float] = mapped_column(Float, nullable=False)
    # Client-computed fee - rebate, stored exactly as submitted
    gap: Mapped[float] = mapped_column(Float, nullable=False)
    patient_signature: Mapped[str | None] = mapped_column(Text, nullable=True)
    signed_at: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True
    )


# Step number → response model, used by the repository and admin queries.
RESPONSE_MODELS: dict[int, type[_StepResponseMixin]] = {
    model.step: model
    for model in (OdiResponse, VasResponse, Eq5dResponse, SurgicalConsent, IfcResponse)
}
