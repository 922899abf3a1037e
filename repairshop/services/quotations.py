"""Quotation service: the owner prices an assessment, the client approves or rejects it."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from repairshop.db import crud
from repairshop.models import Quotation
from repairshop.models.base import new_id
from repairshop.models.enums import AssessmentStatus, QuotationStatus
from repairshop.services import work_orders
from repairshop.services.guards import require_assessment
from repairshop.services.result import OperationFailed, ServiceResult, service_operation

logger = logging.getLogger(__name__)


def quotation_total(items: list[dict], parts: list[dict]) -> float:
    items_total = sum(float(it.get("price") or 0) for it in items)
    parts_total = sum(float(p.get("unit_price") or 0) * float(p.get("quantity") or 0) for p in parts)
    return items_total + parts_total


def _with_ids(rows: list[dict]) -> list[dict]:
    return [{**row, "id": row.get("id") or new_id()} for row in rows]


@service_operation("error creating quotation")
async def create_quotation(
    db: AsyncSession,
    vehicle_id: str,
    client_id: str,
    assessment_id: str,
    owner_id: str,
    workshop_id: str,
    items: list[dict] | None = None,
    parts: list[dict] | None = None,
) -> ServiceResult:
    if not all((vehicle_id, client_id, assessment_id, owner_id, workshop_id)):
        raise OperationFailed("missing required fields", "MISSING_FIELDS")
    assessment = await require_assessment(db, assessment_id)

    items = _with_ids(items or [])
    parts = _with_ids(parts or [])
    quotation = Quotation(
        vehicle_id=vehicle_id,
        client_id=client_id,
        assessment_id=assessment_id,
        owner_id=owner_id,
        workshop_id=workshop_id,
        status=QuotationStatus.PENDING_CLIENT_APPROVAL.value,
        items=items,
        parts=parts,
        estimated_total=quotation_total(items, parts),
    )
    db.add(quotation)
    assessment.status = AssessmentStatus.QUOTED.value
    await db.commit()
    await db.refresh(quotation)
    logger.info("Quotation %s created for assessment %s", quotation.id, assessment_id)
    return ServiceResult.ok("Quotation created", quotation)


@service_operation("error responding to quotation")
async def respond_quotation(
    db: AsyncSession,
    quotation_id: str,
    accepted: bool,
    selected_optional_ids: list[str] | None = None,
) -> ServiceResult:
    """Approve (creating the work order) or reject a pending quotation.

    Returns ``{"quotation": ..., "work_order": ... | None}``.
    """
    quotation = await crud.get_quotation(db, quotation_id)
    if not quotation:
        raise OperationFailed("quotation not found", "QUOTATION_NOT_FOUND")
    if quotation.status != QuotationStatus.PENDING_CLIENT_APPROVAL.value:
        raise OperationFailed("the quotation was already answered", "ALREADY_RESPONDED")

    quotation.responded_at = datetime.now(timezone.utc)
    if not accepted:
        quotation.status = QuotationStatus.REJECTED.value
        quotation.selected_optional_ids = []
        await db.commit()
        await db.refresh(quotation)
        return ServiceResult.ok("Quotation rejected", {"quotation": quotation, "work_order": None})

    quotation.status = QuotationStatus.APPROVED.value
    quotation.selected_optional_ids = list(selected_optional_ids or [])
    order = await work_orders.build_quotation_order(db, quotation)
    await work_orders.commit_order(db)
    await db.refresh(quotation)
    await db.refresh(order)
    return ServiceResult.ok(
        f"Quotation approved. Work order {order.number} generated.",
        {"quotation": quotation, "work_order": order},
    )


@service_operation("error fetching quotation")
async def get_quotation(db: AsyncSession, quotation_id: str) -> ServiceResult:
    quotation = await crud.get_quotation(db, quotation_id)
    if not quotation:
        raise OperationFailed("quotation not found", "QUOTATION_NOT_FOUND")
    return ServiceResult.ok("Quotation found", quotation)


@service_operation("error fetching quotations")
async def list_by_client(db: AsyncSession, client_id: str) -> ServiceResult:
    return ServiceResult.ok("Quotations fetched", await crud.list_quotations(db, client_id=client_id))


@service_operation("error fetching quotations")
async def list_by_workshop(db: AsyncSession, workshop_id: str) -> ServiceResult:
    return ServiceResult.ok("Quotations fetched", await crud.list_quotations(db, workshop_id=workshop_id))
