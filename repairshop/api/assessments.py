"""Assessment API: diagnosis, proposed tasks, and client responses per task."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from repairshop.api.common import ensure_record_access, respond, staff_workshop
from repairshop.db import crud
from repairshop.db.engine import get_db
from repairshop.dependencies import require_auth, require_role
from repairshop.schemas import (
    AssessmentClaim, AssessmentCreate, AssessmentRead, AssessmentUpdate,
    TaskCreate, TaskRead, TaskResponse, WorkOrderRead,
)
from repairshop.services import assessments, work_orders
from repairshop.services.auth import AuthContext

router = APIRouter(prefix="/api/assessments", tags=["assessments"])

staff = require_role("web_owner", "workshop_owner", "mechanic")
owners = require_role("web_owner", "workshop_owner")


async def _check(db: AsyncSession, auth: AuthContext, assessment_id: str) -> None:
    await ensure_record_access(db, auth, await crud.get_assessment(db, assessment_id))


# ── Creation and listings ─────────────────────────────────

@router.post("", status_code=201)
async def create_assessment(
    body: AssessmentCreate,
    auth: AuthContext = Depends(owners),
    db: AsyncSession = Depends(get_db),
):
    workshop_id = body.workshop_id if auth.role == "web_owner" else auth.workshop_id
    if not workshop_id:
        raise HTTPException(400, "workshop_id is required")
    result = await assessments.create_assessment(
        db, vehicle_id=body.vehicle_id, owner_id=auth.user_id,
        workshop_id=workshop_id, mechanic_id=body.mechanic_id,
    )
    return respond(result, AssessmentRead, status_code=201)


@router.get("")
async def list_assessments(
    vehicle_id: str | None = None,
    workshop_id: str | None = None,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    """Assessments visible to the caller, newest assignment first."""
    if vehicle_id:
        await ensure_record_access(db, auth, await crud.get_vehicle(db, vehicle_id))
        result = await assessments.list_by_vehicle(db, vehicle_id, workshop_id=staff_workshop(auth))
    elif auth.role == "client":
        result = await assessments.list_by_client(db, auth.user_id)
    elif auth.role == "mechanic":
        result = await assessments.list_by_mechanic(db, auth.user_id)
    elif auth.role == "workshop_owner":
        result = await assessments.list_by_workshop(db, auth.workshop_id)
    elif workshop_id:
        result = await assessments.list_by_workshop(db, workshop_id)
    else:
        raise HTTPException(400, "workshop_id or vehicle_id is required")
    return respond(result, AssessmentRead)


@router.get("/available")
async def list_available(
    workshop_id: str | None = None,
    auth: AuthContext = Depends(staff),
    db: AsyncSession = Depends(get_db),
):
    """Unassigned assessments of the caller's workshop."""
    workshop_id = workshop_id if auth.role == "web_owner" else auth.workshop_id
    if not workshop_id:
        raise HTTPException(400, "workshop_id is required")
    return respond(await assessments.list_available(db, workshop_id), AssessmentRead)


# ── Single assessment ─────────────────────────────────────

@router.get("/{assessment_id}")
async def get_assessment(
    assessment_id: str,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    await _check(db, auth, assessment_id)
    return respond(await assessments.get_assessment(db, assessment_id), AssessmentRead)


@router.put("/{assessment_id}")
async def update_assessment(
    assessment_id: str,
    body: AssessmentUpdate,
    auth: AuthContext = Depends(staff),
    db: AsyncSession = Depends(get_db),
):
    await _check(db, auth, assessment_id)
    result = await assessments.update_assessment(db, assessment_id, **body.model_dump(exclude_none=True))
    return respond(result, AssessmentRead)


@router.delete("/{assessment_id}")
async def delete_assessment(
    assessment_id: str,
    auth: AuthContext = Depends(require_role("web_owner")),
    db: AsyncSession = Depends(get_db),
):
    return respond(await assessments.delete_assessment(db, assessment_id))


@router.post("/{assessment_id}/claim")
async def claim_assessment(
    assessment_id: str,
    body: AssessmentClaim | None = None,
    auth: AuthContext = Depends(staff),
    db: AsyncSession = Depends(get_db),
):
    await _check(db, auth, assessment_id)
    mechanic_id = auth.user_id if auth.role == "mechanic" else (body.mechanic_id if body else None)
    if not mechanic_id:
        raise HTTPException(400, "mechanic_id is required")
    return respond(await assessments.claim_assessment(db, assessment_id, mechanic_id), AssessmentRead)


@router.post("/{assessment_id}/finalize")
async def finalize_assessment(
    assessment_id: str,
    auth: AuthContext = Depends(staff),
    db: AsyncSession = Depends(get_db),
):
    await _check(db, auth, assessment_id)
    return respond(await assessments.finalize_assessment(db, assessment_id), AssessmentRead)


@router.post("/{assessment_id}/send-to-client")
async def send_to_client(
    assessment_id: str,
    auth: AuthContext = Depends(staff),
    db: AsyncSession = Depends(get_db),
):
    await _check(db, auth, assessment_id)
    return respond(await assessments.send_to_client(db, assessment_id), AssessmentRead)


# ── Tasks ─────────────────────────────────────────────────

@router.post("/{assessment_id}/tasks", status_code=201)
async def add_task(
    assessment_id: str,
    body: TaskCreate,
    auth: AuthContext = Depends(staff),
    db: AsyncSession = Depends(get_db),
):
    await _check(db, auth, assessment_id)
    result = await assessments.add_task(db, assessment_id, **body.model_dump())
    return respond(result, TaskRead, status_code=201)


@router.delete("/{assessment_id}/tasks/{task_id}")
async def remove_task(
    assessment_id: str,
    task_id: str,
    auth: AuthContext = Depends(staff),
    db: AsyncSession = Depends(get_db),
):
    await _check(db, auth, assessment_id)
    return respond(await assessments.remove_task(db, assessment_id, task_id), AssessmentRead)


@router.post("/{assessment_id}/tasks/{task_id}/respond")
async def respond_task(
    assessment_id: str,
    task_id: str,
    body: TaskResponse,
    auth: AuthContext = Depends(require_role("client", "web_owner")),
    db: AsyncSession = Depends(get_db),
):
    """Client accepts or rejects one task; the last answer may generate the work order."""
    await _check(db, auth, assessment_id)
    result = await assessments.respond_task(db, assessment_id, task_id, body.accepted)
    return respond(result, {"assessment": AssessmentRead, "work_order": WorkOrderRead})


@router.post("/{assessment_id}/work-order", status_code=201)
async def create_automatic_work_order(
    assessment_id: str,
    auth: AuthContext = Depends(owners),
    db: AsyncSession = Depends(get_db),
):
    await _check(db, auth, assessment_id)
    result = await work_orders.create_automatic_work_order(db, assessment_id)
    return respond(result, WorkOrderRead, status_code=201)
