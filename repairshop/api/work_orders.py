"""Work order API: manual creation, mechanic assignment, progress updates."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from repairshop.api.common import ensure_record_access, respond, staff_workshop
from repairshop.db import crud
from repairshop.db.engine import get_db
from repairshop.dependencies import require_auth, require_role
from repairshop.schemas import (
    MechanicAssignment, WorkOrderCreate, WorkOrderFromAssessment, WorkOrderRead, WorkOrderUpdate,
)
from repairshop.services import work_orders
from repairshop.services.auth import AuthContext

router = APIRouter(prefix="/api/work-orders", tags=["work-orders"])

staff = require_role("web_owner", "workshop_owner", "mechanic")
owners = require_role("web_owner", "workshop_owner")


async def _check(db: AsyncSession, auth: AuthContext, order_id: str) -> None:
    order = await crud.get_work_order(db, order_id)
    await ensure_record_access(db, auth, order)
    if order and auth.role == "mechanic" and order.mechanic_id != auth.user_id:
        raise HTTPException(403, "Order assigned to another mechanic")


# ── Creation ──────────────────────────────────────────────

@router.post("", status_code=201)
async def create_work_order(
    body: WorkOrderCreate,
    auth: AuthContext = Depends(owners),
    db: AsyncSession = Depends(get_db),
):
    workshop_id = body.workshop_id if auth.role == "web_owner" else auth.workshop_id
    if not workshop_id:
        raise HTTPException(400, "workshop_id is required")
    result = await work_orders.create_work_order(
        db, vehicle_id=body.vehicle_id, owner_id=auth.user_id, workshop_id=workshop_id,
        description=body.description, priority=body.priority, mechanic_id=body.mechanic_id,
    )
    return respond(result, WorkOrderRead, status_code=201)


@router.post("/from-assessment", status_code=201)
async def create_from_assessment(
    body: WorkOrderFromAssessment,
    auth: AuthContext = Depends(owners),
    db: AsyncSession = Depends(get_db),
):
    await ensure_record_access(db, auth, await crud.get_assessment(db, body.assessment_id))
    result = await work_orders.create_work_order_from_assessment(db, **body.model_dump())
    return respond(result, WorkOrderRead, status_code=201)


# ── Listings ──────────────────────────────────────────────

@router.get("")
async def list_work_orders(
    vehicle_id: str | None = None,
    workshop_id: str | None = None,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    if vehicle_id:
        await ensure_record_access(db, auth, await crud.get_vehicle(db, vehicle_id))
        result = await work_orders.list_by_vehicle(db, vehicle_id, workshop_id=staff_workshop(auth))
    elif auth.role == "client":
        result = await work_orders.list_by_client(db, auth.user_id)
    elif auth.role == "mechanic":
        result = await work_orders.list_by_mechanic(db, auth.user_id)
    elif auth.role == "workshop_owner":
        result = await work_orders.list_by_workshop(db, auth.workshop_id)
    elif workshop_id:
        result = await work_orders.list_by_workshop(db, workshop_id)
    else:
        raise HTTPException(400, "workshop_id or vehicle_id is required")
    return respond(result, WorkOrderRead)


@router.get("/pending")
async def list_pending_assignment(
    workshop_id: str | None = None,
    auth: AuthContext = Depends(owners),
    db: AsyncSession = Depends(get_db),
):
    workshop_id = workshop_id if auth.role == "web_owner" else auth.workshop_id
    if not workshop_id:
        raise HTTPException(400, "workshop_id is required")
    return respond(await work_orders.list_pending_assignment(db, workshop_id), WorkOrderRead)


# ── Single order ──────────────────────────────────────────

@router.get("/{order_id}")
async def get_work_order(
    order_id: str,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    await _check(db, auth, order_id)
    return respond(await work_orders.get_work_order(db, order_id), WorkOrderRead)


@router.put("/{order_id}")
async def update_work_order(
    order_id: str,
    body: WorkOrderUpdate,
    auth: AuthContext = Depends(staff),
    db: AsyncSession = Depends(get_db),
):
    await _check(db, auth, order_id)
    result = await work_orders.update_work_order(db, order_id, **body.model_dump(exclude_none=True))
    return respond(result, WorkOrderRead)


@router.post("/{order_id}/assign")
async def assign_mechanic(
    order_id: str,
    body: MechanicAssignment,
    auth: AuthContext = Depends(owners),
    db: AsyncSession = Depends(get_db),
):
    await _check(db, auth, order_id)
    result = await work_orders.assign_mechanic(db, order_id, **body.model_dump())
    return respond(result, WorkOrderRead)


@router.post("/{order_id}/tasks/{task_id}/complete")
async def complete_task(
    order_id: str,
    task_id: str,
    auth: AuthContext = Depends(staff),
    db: AsyncSession = Depends(get_db),
):
    await _check(db, auth, order_id)
    return respond(await work_orders.complete_task(db, order_id, task_id), WorkOrderRead)


@router.delete("/{order_id}")
async def delete_work_order(
    order_id: str,
    auth: AuthContext = Depends(owners),
    db: AsyncSession = Depends(get_db),
):
    await _check(db, auth, order_id)
    return respond(await work_orders.delete_work_order(db, order_id))
