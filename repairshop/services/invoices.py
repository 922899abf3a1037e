"""Invoice service: bill a completed work order."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from repairshop.config import get_settings
from repairshop.db import crud
from repairshop.models import Invoice, WorkOrder
from repairshop.models.enums import InvoiceStatus, WorkOrderStatus
from repairshop.services.guards import require_work_order
from repairshop.services.numbering import next_document_number
from repairshop.services.result import OperationFailed, ServiceResult, service_operation

logger = logging.getLogger(__name__)

_settings = get_settings()


def build_lines(order: WorkOrder) -> list[dict]:
    """Detail lines: approved tasks, labour (when recorded), then parts used."""
    lines = []
    for task in order.approved_tasks or []:
        price = float(task.get("estimated_price") or 0)
        lines.append({
            "description": f"{task.get('name', '')} - {task.get('description', '')}",
            "quantity": 1,
            "unit_price": price,
            "total": price,
        })

    if order.hours_worked and order.hours_worked > 0 and order.labour_cost:
        lines.append({
            "description": f"Labour ({order.hours_worked:g}h)",
            "quantity": order.hours_worked,
            "unit_price": order.labour_cost / order.hours_worked,
            "total": order.labour_cost,
        })

    for part in order.parts_used or []:
        price = float(part.get("price") or 0)
        quantity = float(part.get("quantity") or 0)
        lines.append({
            "description": f"Part: {part.get('name', '')}",
            "quantity": quantity,
            "unit_price": price,
            "total": price * quantity,
        })
    return lines


async def generate_number(db: AsyncSession, workshop_id: str) -> str:
    numbers = await crud.list_invoice_numbers(db, workshop_id)
    return next_document_number("FACT", numbers, 5)


@service_operation("error generating invoice")
async def create_invoice(
    db: AsyncSession,
    work_order_id: str,
    payment_method: str | None = None,
    observations: str | None = None,
) -> ServiceResult:
    order = await require_work_order(db, work_order_id)
    if order.status != WorkOrderStatus.COMPLETED.value:
        raise OperationFailed(
            "the work order must be completed before invoicing", "OT_NOT_COMPLETED",
        )

    existing = await crud.get_invoice_by_work_order(db, work_order_id)
    if existing:
        return ServiceResult.fail(
            "an invoice already exists for this work order", "INVOICE_ALREADY_EXISTS", data=existing,
        )

    vehicle = await crud.get_vehicle(db, order.vehicle_id)
    if not vehicle:
        raise OperationFailed("vehicle not found", "VEHICLE_NOT_FOUND")
    client = await crud.get_user(db, vehicle.client_id)
    if not client:
        raise OperationFailed("client not found", "CLIENT_NOT_FOUND")
    mechanic = await crud.get_user(db, order.mechanic_id) if order.mechanic_id else None
    if not mechanic:
        raise OperationFailed("mechanic not found", "MECHANIC_NOT_FOUND")
    workshop = await crud.get_workshop(db, order.workshop_id)

    lines = build_lines(order)
    subtotal = sum(line["total"] for line in lines)
    tax = subtotal * _settings.invoice.tax_rate

    invoice = Invoice(
        number=await generate_number(db, order.workshop_id),
        work_order_id=order.id,
        work_order_number=order.number,
        mechanic_id=mechanic.id,
        mechanic_name=mechanic.full_name,
        client_id=client.id,
        client_name=client.full_name,
        client_national_id=client.national_id or "",
        client_email=client.email or "",
        client_phone=client.phone or "",
        vehicle_id=vehicle.id,
        vehicle_info=vehicle.describe(),
        workshop_id=order.workshop_id,
        workshop_name=workshop.name if workshop else _settings.invoice.default_workshop_name,
        workshop_address=workshop.address if workshop else "",
        workshop_phone=workshop.phone if workshop else "",
        workshop_email=workshop.email if workshop else "",
        lines=lines,
        subtotal=subtotal,
        tax=tax,
        total=subtotal + tax,
        payment_method=payment_method or _settings.invoice.default_payment_method,
        observations=observations or "",
        status=InvoiceStatus.ISSUED.value,
    )
    db.add(invoice)
    await db.commit()
    await db.refresh(invoice)
    logger.info("Invoice %s issued for order %s, total %.2f", invoice.number, order.number, invoice.total)
    return ServiceResult.ok(f"Invoice {invoice.number} generated", invoice)


async def _require_invoice(db: AsyncSession, invoice_id: str) -> Invoice:
    invoice = await crud.get_invoice(db, invoice_id)
    if not invoice:
        raise OperationFailed("invoice not found", "INVOICE_NOT_FOUND")
    return invoice


@service_operation("error fetching invoice")
async def get_invoice(db: AsyncSession, invoice_id: str) -> ServiceResult:
    return ServiceResult.ok("Invoice found", await _require_invoice(db, invoice_id))


@service_operation("error fetching invoice")
async def get_invoice_by_work_order(db: AsyncSession, work_order_id: str) -> ServiceResult:
    invoice = await crud.get_invoice_by_work_order(db, work_order_id)
    if not invoice:
        raise OperationFailed("no invoice exists for this work order", "INVOICE_NOT_FOUND")
    return ServiceResult.ok("Invoice found", invoice)


@service_operation("error fetching invoices")
async def list_by_mechanic(db: AsyncSession, mechanic_id: str) -> ServiceResult:
    return ServiceResult.ok("Invoices fetched", await crud.list_invoices(db, mechanic_id=mechanic_id))


@service_operation("error fetching invoices")
async def list_by_workshop(db: AsyncSession, workshop_id: str) -> ServiceResult:
    return ServiceResult.ok("Invoices fetched", await crud.list_invoices(db, workshop_id=workshop_id))


@service_operation("error fetching invoices")
async def list_by_client(db: AsyncSession, client_id: str) -> ServiceResult:
    return ServiceResult.ok("Invoices fetched", await crud.list_invoices(db, client_id=client_id))


@service_operation("error updating invoice")
async def mark_paid(db: AsyncSession, invoice_id: str) -> ServiceResult:
    invoice = await _require_invoice(db, invoice_id)
    if invoice.status == InvoiceStatus.VOID.value:
        raise OperationFailed("a void invoice cannot be paid", "INVOICE_VOID")
    invoice = await crud.update_record(db, invoice, status=InvoiceStatus.PAID.value)
    return ServiceResult.ok("Invoice marked as paid", invoice)


@service_operation("error voiding invoice")
async def void_invoice(db: AsyncSession, invoice_id: str) -> ServiceResult:
    invoice = await _require_invoice(db, invoice_id)
    invoice = await crud.update_record(db, invoice, status=InvoiceStatus.VOID.value)
    return ServiceResult.ok("Invoice voided", invoice)
