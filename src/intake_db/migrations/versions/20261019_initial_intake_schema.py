"""Create the patient intake schema.

Tables:
  - patients
  - intake_sessions (token, progress, status)
  - odi_responses, vas_responses, eq5d_responses, surgical_consents,
    ifc_responses — one row per session per step, enforced by a UNIQUE
    constraint on ``session_id``

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP

# revision identifiers, used by Alembic.
revision = "20261019_initial"
down_revision = None
branch_labels = None
depends_on = None

_RESPONSE_TABLES = (
    "odi_responses",
    "vas_responses",
    "eq5d_responses",
    "surgical_consents",
    "ifc_responses",
)


def _response_columns() -> list[sa.Column]:
    """id / session_id / completed_at, shared by every step table."""
    return [
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "session_id",
            sa.Integer,
            sa.ForeignKey("intake_sessions.id"),
            nullable=False,
            unique=True,
        ),
        sa.Column("completed_at", TIMESTAMP(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    # --- Patients ---
    op.create_table(
        "patients",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("date_of_birth", sa.Date, nullable=False),
        sa.Column("hospital", sa.Text, nullable=True),
        sa.Column("email", sa.Text, nullable=True),
        sa.Column("phone", sa.Text, nullable=True),
        sa.Column(
            "created_at",
            TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.CheckConstraint("length(name) > 0", name="ck_patient_name_not_empty"),
    )
    op.create_index("ix_patients_email", "patients", ["email"])
    op.create_index("ix_patients_created_at", "patients", ["created_at"])

    # --- Sessions ---
    op.create_table(
        "intake_sessions",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "patient_id", sa.Integer, sa.ForeignKey("patients.id"), nullable=False,
        ),
        sa.Column("session_token", sa.Text, nullable=False, unique=True),
        sa.Column(
            "current_step",
            sa.SmallInteger,
            nullable=False,
            server_default=sa.text("1"),
        ),
        sa.Column(
            "completed_steps",
            JSONB,
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column(
            "status",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'in_progress'"),
        ),
        sa.Column(
            "created_at",
            TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column("completed_at", TIMESTAMP(timezone=True), nullable=True),
        sa.CheckConstraint("current_step BETWEEN 1 AND 5", name="ck_current_step_range"),
        sa.CheckConstraint(
            "status IN ('in_progress', 'completed')", name="ck_session_status",
        ),
        sa.CheckConstraint(
            "status != 'completed' OR completed_at IS NOT NULL",
            name="ck_completed_has_timestamp",
        ),
    )
    op.create_index("ix_intake_sessions_patient_id", "intake_sessions", ["patient_id"])
    op.create_index("ix_intake_sessions_status", "intake_sessions", ["status"])
    op.create_index("ix_intake_sessions_created_at", "intake_sessions", ["created_at"])

    # --- Step 1: ODI ---
    odi_sections = (
        "pain_intensity", "personal_care", "lifting", "walking", "sitting",
        "standing", "sleeping", "sex_life", "social_life", "travelling",
    )
    op.create_table(
        "odi_responses",
        *_response_columns(),
        *[sa.Column(name, sa.SmallInteger, nullable=False) for name in odi_sections],
        sa.Column("total_score", sa.SmallInteger, nullable=False),
    )

    # --- Step 2: VAS ---
    vas_sites = ("neck_pain", "right_arm", "left_arm", "back_pain", "right_leg", "left_leg")
    op.create_table(
        "vas_responses",
        *_response_columns(),
        *[sa.Column(name, sa.Float, nullable=False) for name in vas_sites],
    )

    # --- Step 3: EQ-5D ---
    eq5d_columns = (
        "mobility", "personal_care", "usual_activities", "pain_discomfort",
        "anxiety_depression", "health_scale",
    )
    op.create_table(
        "eq5d_responses",
        *_response_columns(),
        *[sa.Column(name, sa.SmallInteger, nullable=False) for name in eq5d_columns],
    )

    # --- Step 4: Surgical consent ---
    op.create_table(
        "surgical_consents",
        *_response_columns(),
        sa.Column("procedure_name", sa.Text, nullable=False),
        sa.Column(
            "consent_items",
            JSONB,
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("patient_signature", sa.Text, nullable=False),
        sa.Column("witness_signature", sa.Text, nullable=True),
        sa.Column("signed_at", TIMESTAMP(timezone=True), nullable=False),
    )

    # --- Step 5: IFC (signature columns nullable for staff pre-fill) ---
    op.create_table(
        "ifc_responses",
        *_response_columns(),
        sa.Column("quote_number", sa.Text, nullable=False),
        sa.Column("item_number", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("fee", sa.Float, nullable=False),
        sa.Column("rebate", sa.Float, nullable=False),
        sa.Column("gap", sa.Float, nullable=False),
        sa.Column("patient_signature", sa.Text, nullable=True),
        sa.Column("signed_at", TIMESTAMP(timezone=True), nullable=True),
    )


def downgrade() -> None:
    for table in reversed(_RESPONSE_TABLES):
        op.drop_table(table)
    op.drop_index("ix_intake_sessions_created_at", table_name="intake_sessions")
    op.drop_index("ix_intake_sessions_status", table_name="intake_sessions")
    op.drop_index("ix_intake_sessions_patient_id", table_name="intake_sessions")
    op.drop_table("intake_sessions")
    op.drop_index("ix_patients_created_at", table_name="patients")
    op.drop_index("ix_patients_email", table_name="patients")
    op.drop_table("patients")
