"""Invoice API: bill completed work orders."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from repairshop.api.common import ensure_record_access, respond
from repairshop.db import crud
from repairshop.db.engine import get_db
from repairshop.dependencies import require_auth, require_role
from repairshop.schemas import InvoiceCreate, InvoiceRead
from repairshop.services import invoices
from repairshop.services.auth import AuthContext

router = APIRouter(prefix="/api/invoices", tags=["invoices"])

owners = require_role("web_owner", "workshop_owner")


@router.post("", status_code=201)
async def create_invoice(
    body: InvoiceCreate,
    auth: AuthContext = Depends(require_role("web_owner", "workshop_owner", "mechanic")),
    db: AsyncSession = Depends(get_db),
):
    await ensure_record_access(db, auth, await crud.get_work_order(db, body.work_order_id))
    result = await invoices.create_invoice(
        db, body.work_order_id, payment_method=body.payment_method, observations=body.observations,
    )
    return respond(result, InvoiceRead, status_code=201)


@router.get("")
async def list_invoices(
    workshop_id: str | None = None,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    if auth.role == "client":
        result = await invoices.list_by_client(db, auth.user_id)
    elif auth.role == "mechanic":
        result = await invoices.list_by_mechanic(db, auth.user_id)
    elif auth.role == "workshop_owner":
        result = await invoices.list_by_workshop(db, auth.workshop_id)
    elif workshop_id:
        result = await invoices.list_by_workshop(db, workshop_id)
    else:
        raise HTTPException(400, "workshop_id is required")
    return respond(result, InvoiceRead)


@router.get("/by-work-order/{work_order_id}")
async def get_invoice_by_work_order(
    work_order_id: str,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    await ensure_record_access(db, auth, await crud.get_invoice_by_work_order(db, work_order_id))
    return respond(await invoices.get_invoice_by_work_order(db, work_order_id), InvoiceRead)


@router.get("/{invoice_id}")
async def get_invoice(
    invoice_id: str,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    await ensure_record_access(db, auth, await crud.get_invoice(db, invoice_id))
    return respond(await invoices.get_invoice(db, invoice_id), InvoiceRead)


@router.post("/{invoice_id}/pay")
async def mark_paid(
    invoice_id: str,
    auth: AuthContext = Depends(owners),
    db: AsyncSession = Depends(get_db),
):
    await ensure_record_access(db, auth, await crud.get_invoice(db, invoice_id))
    return respond(await invoices.mark_paid(db, invoice_id), InvoiceRead)


@router.post("/{invoice_id}/void")
async def void_invoice(
    invoice_id: str,
    auth: AuthContext = Depends(owners),
    db: AsyncSession = Depends(get_db),
):
    await ensure_record_access(db, auth, await crud.get_invoice(db, invoice_id))
    return respond(await invoices.void_invoice(db, invoice_id), InvoiceRead)
