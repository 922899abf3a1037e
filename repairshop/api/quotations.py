"""Quotation API: owners price an assessment, clients approve or reject."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from repairshop.api.common import ensure_record_access, respond
from repairshop.db import crud
from repairshop.db.engine import get_db
from repairshop.dependencies import require_auth, require_role
from repairshop.schemas import QuotationCreate, QuotationRead, QuotationResponse, WorkOrderRead
from repairshop.services import quotations, work_orders
from repairshop.services.auth import AuthContext
from repairshop.services.result import ServiceResult

router = APIRouter(prefix="/api/quotations", tags=["quotations"])

owners = require_role("web_owner", "workshop_owner")


@router.post("", status_code=201)
async def create_quotation(
    body: QuotationCreate,
    auth: AuthContext = Depends(owners),
    db: AsyncSession = Depends(get_db),
):
    assessment = await crud.get_assessment(db, body.assessment_id)
    if not assessment:
        return respond(ServiceResult.fail("assessment not found", "ASSESSMENT_NOT_FOUND"))
    await ensure_record_access(db, auth, assessment)
    vehicle = await crud.get_vehicle(db, assessment.vehicle_id)
    if not vehicle:
        return respond(ServiceResult.fail("vehicle not found", "VEHICLE_NOT_FOUND"))

    result = await quotations.create_quotation(
        db,
        vehicle_id=vehicle.id,
        client_id=vehicle.client_id,
        assessment_id=assessment.id,
        owner_id=auth.user_id,
        workshop_id=assessment.workshop_id,
        items=[it.model_dump() for it in body.items],
        parts=[p.model_dump() for p in body.parts],
    )
    return respond(result, QuotationRead, status_code=201)


@router.get("")
async def list_quotations(
    workshop_id: str | None = None,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    if auth.role == "client":
        return respond(await quotations.list_by_client(db, auth.user_id), QuotationRead)
    workshop_id = workshop_id if auth.role == "web_owner" else auth.workshop_id
    if not workshop_id:
        raise HTTPException(400, "workshop_id is required")
    return respond(await quotations.list_by_workshop(db, workshop_id), QuotationRead)


@router.get("/{quotation_id}")
async def get_quotation(
    quotation_id: str,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    await ensure_record_access(db, auth, await crud.get_quotation(db, quotation_id))
    return respond(await quotations.get_quotation(db, quotation_id), QuotationRead)


@router.post("/{quotation_id}/respond")
async def respond_quotation(
    quotation_id: str,
    body: QuotationResponse,
    auth: AuthContext = Depends(require_role("client", "web_owner")),
    db: AsyncSession = Depends(get_db),
):
    await ensure_record_access(db, auth, await crud.get_quotation(db, quotation_id))
    result = await quotations.respond_quotation(
        db, quotation_id, body.accepted, body.selected_optional_ids,
    )
    return respond(result, {"quotation": QuotationRead, "work_order": WorkOrderRead})


@router.post("/{quotation_id}/work-order", status_code=201)
async def create_work_order_from_quotation(
    quotation_id: str,
    auth: AuthContext = Depends(owners),
    db: AsyncSession = Depends(get_db),
):
    await ensure_record_access(db, auth, await crud.get_quotation(db, quotation_id))
    result = await work_orders.create_work_order_from_quotation(db, quotation_id)
    return respond(result, WorkOrderRead, status_code=201)
