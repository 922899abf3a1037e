"""Role dashboards: JSON summaries of the work waiting for each kind of user."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.encoders import jsonable_encoder
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from repairshop.db import crud
from repairshop.db.engine import get_db
from repairshop.dependencies import require_auth
from repairshop.models import User, Vehicle, WorkOrder, Workshop
from repairshop.models.enums import (
    AssessmentStatus, ClientStatus, InvoiceStatus, QuotationStatus, WorkOrderStatus,
)
from repairshop.schemas import AssessmentRead, InvoiceRead, QuotationRead, VehicleRead, WorkOrderRead
from repairshop.services.auth import AuthContext

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


def _rows(schema, records) -> list[dict]:
    return [schema.model_validate(r).model_dump(mode="json") for r in records]


async def _count_by(db: AsyncSession, column) -> dict[str, int]:
    result = await db.execute(select(column, func.count()).group_by(column))
    return {key: count for key, count in result.all()}


# ── Per-role summaries ────────────────────────────────────

async def _admin_summary(db: AsyncSession) -> dict:
    workshops = await db.scalar(select(func.count()).select_from(Workshop))
    vehicles = await db.scalar(select(func.count()).select_from(Vehicle))
    return {
        "workshops": workshops or 0,
        "users_by_role": await _count_by(db, User.role),
        "vehicles": vehicles or 0,
        "work_orders_by_status": await _count_by(db, WorkOrder.status),
    }


async def _owner_summary(db: AsyncSession, workshop_id: str) -> dict:
    available = await crud.list_assessments(
        db, workshop_id=workshop_id, status=AssessmentStatus.PENDING.value,
    )
    quotations = await crud.list_quotations(
        db, workshop_id=workshop_id, status=QuotationStatus.PENDING_CLIENT_APPROVAL.value,
    )
    pending = await crud.list_work_orders(
        db, workshop_id=workshop_id, status=WorkOrderStatus.PENDING_ASSIGNMENT.value,
    )
    in_progress = await crud.list_work_orders(
        db, workshop_id=workshop_id, status=WorkOrderStatus.IN_PROGRESS.value,
    )
    issued = await crud.list_invoices(db, workshop_id=workshop_id, status=InvoiceStatus.ISSUED.value)
    return {
        "available_assessments": _rows(AssessmentRead, available),
        "quotations_awaiting_client": _rows(QuotationRead, quotations),
        "orders_pending_assignment": _rows(WorkOrderRead, pending),
        "orders_in_progress": _rows(WorkOrderRead, in_progress),
        "issued_invoices": _rows(InvoiceRead, issued),
    }


async def _mechanic_summary(db: AsyncSession, mechanic_id: str) -> dict:
    assessments = await crud.list_assessments(
        db, mechanic_id=mechanic_id, status=AssessmentStatus.IN_PROGRESS.value,
    )
    orders = [
        o for o in await crud.list_work_orders(db, mechanic_id=mechanic_id)
        if o.status not in (WorkOrderStatus.COMPLETED.value, WorkOrderStatus.CANCELLED.value)
    ]
    invoices = await crud.list_invoices(db, mechanic_id=mechanic_id)
    return {
        "assessments_in_progress": _rows(AssessmentRead, assessments),
        "assigned_orders": _rows(WorkOrderRead, orders),
        "invoices": _rows(InvoiceRead, invoices),
    }


async def _client_summary(db: AsyncSession, client_id: str) -> dict:
    vehicles = await crud.list_vehicles(db, client_id=client_id)
    vehicle_ids = [v.id for v in vehicles]
    assessments, orders = [], []
    if vehicle_ids:
        assessments = [
            a for a in await crud.list_assessments(db, vehicle_id=vehicle_ids)
            if a.status == AssessmentStatus.AWAITING_CLIENT.value
            and a.client_status in (ClientStatus.PENDING_REVIEW.value, ClientStatus.REVIEWED.value)
        ]
        for vehicle_id in vehicle_ids:
            orders.extend(await crud.list_work_orders(db, vehicle_id=vehicle_id))
    return {
        "vehicles": _rows(VehicleRead, vehicles),
        "assessments_awaiting_review": _rows(AssessmentRead, assessments),
        "quotations": _rows(QuotationRead, await crud.list_quotations(db, client_id=client_id)),
        "work_orders": _rows(WorkOrderRead, orders),
        "invoices": _rows(InvoiceRead, await crud.list_invoices(db, client_id=client_id)),
    }


@router.get("")
async def dashboard(
    workshop_id: str | None = None,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    """Summary for the caller's role. A site admin may pass a workshop to see its owner view."""
    if auth.role == "web_owner":
        summary = await _owner_summary(db, workshop_id) if workshop_id else await _admin_summary(db)
    elif auth.role == "workshop_owner":
        if not auth.workshop_id:
            raise HTTPException(400, "No workshop linked to this account")
        summary = await _owner_summary(db, auth.workshop_id)
    elif auth.role == "mechanic":
        summary = await _mechanic_summary(db, auth.user_id)
    else:
        summary = await _client_summary(db, auth.user_id)
    return jsonable_encoder({"role": auth.role, **summary})
