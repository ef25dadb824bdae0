"""Admin endpoints — patient review, dashboard stats and IFC pre-fill.

These endpoints are unauthenticated; deploy them behind the clinic's
network boundary or an authenticating proxy.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from intake_db.models.enums import SessionStatus
from intake_workflow.admin import AdminService
from intake_workflow.models import (
    DashboardStats,
    IfcPrefill,
    IfcTemplate,
    PatientDetail,
    PatientSummary,
    SuccessResult,
)

from intake_server.config import MAX_PAGE_LIMIT
from intake_server.dependencies import get_admin, get_db

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/patients")
async def list_patients(
    db: AsyncSession = Depends(get_db, scope="function"),
    admin: AdminService = Depends(get_admin),
    status: SessionStatus | None = Query(None),
    q: str | None = Query(None, max_length=200, description="Search name, email or hospital"),
    limit: int | None = Query(None, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
) -> list[PatientSummary]:
    """Every patient with their latest session, newest first.

    Unpaginated unless ``limit`` is given.
    """
    return await admin.list_patients(db, status=status, q=q, limit=limit, offset=offset)


@router.get("/patients/{patient_id}")
async def get_patient_detail(
    patient_id: int,
    db: AsyncSession = Depends(get_db, scope="function"),
    admin: AdminService = Depends(get_admin),
) -> PatientDetail:
    """One patient with every questionnaire response (null when absent)."""
    return await admin.get_patient_detail(db, patient_id)


@router.get("/stats")
async def get_stats(
    db: AsyncSession = Depends(get_db, scope="function"),
    admin: AdminService = Depends(get_admin),
) -> DashboardStats:
    """Total patients, completed/in-progress sessions, patients created today (UTC)."""
    return await admin.get_stats(db)


@router.get("/ifc/{session_token}")
async def get_ifc_template(
    session_token: str,
    db: AsyncSession = Depends(get_db, scope="function"),
    admin: AdminService = Depends(get_admin),
) -> IfcTemplate:
    """Patient identity and any financial fields already entered."""
    return await admin.get_ifc_template(db, session_token=session_token)


@router.put("/ifc/{session_token}")
async def upsert_ifc(
    session_token: str,
    body: IfcPrefill,
    db: AsyncSession = Depends(get_db, scope="function"),
    admin: AdminService = Depends(get_admin),
) -> SuccessResult:
    """Create or update the session's IFC financial fields ahead of the patient."""
    return await admin.upsert_ifc(db, session_token=session_token, prefill=body)
