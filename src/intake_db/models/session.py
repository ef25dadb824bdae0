"""IntakeSession ORM model — one patient's progress through the 5 steps.

The external identifier is ``session_token``; the integer ``id`` never
leaves the server.  ``completed_steps`` is a JSONB array of step numbers
(kept duplicate-free by the workflow's state machine).
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column, relationship

from intake_db.models.base import Base, utcnow
from intake_db.models.enums import SessionStatus

if TYPE_CHECKING:
    from intake_db.models.patient import Patient


class IntakeSession(Base):
    """One row per intake workflow instance."""

    __tablename__ = "intake_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    patient_id: Mapped[int] = mapped_column(
        ForeignKey("patients.id"), nullable=False, index=True,
    )
    # Bearer credential handed to the patient
    session_token: Mapped[str] = mapped_column(Text, nullable=False, unique=True)

    # --- Progress ---
    current_step: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=1)
    completed_steps: Mapped[list[int]] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
        server_default=text("'[]'::jsonb"),
    )
    status: Mapped[SessionStatus] = mapped_column(
        # Stored as the lowercase string value, not the Python name
        String(20),
        nullable=False,
        default=SessionStatus.IN_PROGRESS,
        index=True,
    )

    # --- Timestamps ---
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True
    )

    patient: Mapped[Patient] = relationship(back_populates="sessions", lazy="joined")

    __table_args__ = (
        CheckConstraint("current_step BETWEEN 1 AND 5", name="ck_current_step_range"),
        CheckConstraint(
            "status IN ('in_progress', 'completed')",
            name="ck_session_status",
        ),
        CheckConstraint(
            "status != 'completed' OR completed_at IS NOT NULL",
            name="ck_completed_has_timestamp",
        ),
        Index("ix_intake_sessions_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<IntakeSession(id={self.id}, patient_id={self.patient_id}, "
            f"status={self.status!r}, step={self.current_step})>"
        )
