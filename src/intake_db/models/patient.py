"""Patient ORM model — identity record created once at intake."""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Date, Index, Integer, Text
from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column, relationship

from intake_db.models.base import Base, utcnow

if TYPE_CHECKING:
    from intake_db.models.session import IntakeSession


class Patient(Base):
    """One row per patient.

    Never edited after creation.  A patient normally owns exactly one
    intake session, but the schema allows several.
    """

    __tablename__ = "patients"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(Text, nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    hospital: Mapped[str | None] = mapped_column(Text, nullable=True)
    email: Mapped[str | None] = mapped_column(Text, nullable=True)
    phone: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )

    # selectin keeps lazy loads out of async code paths
    sessions: Mapped[list[IntakeSession]] = relationship(
        back_populates="patient",
        lazy="selectin",
        order_by="IntakeSession.created_at.desc()",
    )

    __table_args__ = (
        CheckConstraint("length(name) > 0", name="ck_patient_name_not_empty"),
        Index("ix_patients_email", "email"),
        # Admin list is newest-first; the stats query filters by day
        Index("ix_patients_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Patient(id={self.id}, name={self.name!r})>"
