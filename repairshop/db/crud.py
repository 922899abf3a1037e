"""CRUD operations for the store collections."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from repairshop.models import (
    User, Workshop, Vehicle, Assessment, Quotation, WorkOrder, Invoice,
)


# ── Generic ───────────────────────────────────────────────

async def update_record(db: AsyncSession, record, **kwargs):
    for k, v in kwargs.items():
        setattr(record, k, v)
    await db.commit()
    await db.refresh(record)
    return record


async def delete_record(db: AsyncSession, record) -> None:
    await db.delete(record)
    await db.commit()


async def count_references(db: AsyncSession, column: str, value: str) -> int:
    """Assessments, quotations, work orders and invoices whose ``column`` equals ``value``."""
    total = 0
    for model in (Assessment, Quotation, WorkOrder, Invoice):
        attr = getattr(model, column, None)
        if attr is None:
            continue
        result = await db.execute(select(func.count()).select_from(model).where(attr == value))
        total += result.scalar_one()
    return total


# ── User ──────────────────────────────────────────────────

async def create_user(db: AsyncSession, **fields) -> User:
    user = User(**fields)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def get_user(db: AsyncSession, user_id: str) -> User | None:
    return await db.get(User, user_id)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalars().first()


async def list_users(
    db: AsyncSession, role: str | None = None, workshop_id: str | None = None,
) -> list[User]:
    query = select(User)
    if role:
        query = query.where(User.role == role)
    if workshop_id:
        query = query.where(User.workshop_id == workshop_id)
    result = await db.execute(query.order_by(User.created_at.desc()))
    return list(result.scalars().all())


async def get_web_owner(db: AsyncSession) -> User | None:
    result = await db.execute(select(User).where(User.role == "web_owner").order_by(User.created_at))
    return result.scalars().first()


# ── Workshop ──────────────────────────────────────────────

async def get_workshop(db: AsyncSession, workshop_id: str) -> Workshop | None:
    return await db.get(Workshop, workshop_id)


async def get_workshop_by_email(db: AsyncSession, email: str) -> Workshop | None:
    result = await db.execute(select(Workshop).where(Workshop.email == email))
    return result.scalars().first()


async def list_workshops(db: AsyncSession) -> list[Workshop]:
    result = await db.execute(select(Workshop).order_by(Workshop.created_at))
    return list(result.scalars().all())


# ── Vehicle ───────────────────────────────────────────────

async def create_vehicle(
    db: AsyncSession, plate: str, make: str, model: str, year: int,
    client_id: str, color: str = "",
) -> Vehicle:
    vehicle = Vehicle(plate=plate, make=make, model=model, year=year, client_id=client_id, color=color)
    db.add(vehicle)
    await db.commit()
    await db.refresh(vehicle)
    return vehicle


async def get_vehicle(db: AsyncSession, vehicle_id: str) -> Vehicle | None:
    return await db.get(Vehicle, vehicle_id)


async def get_vehicle_by_plate(db: AsyncSession, plate: str) -> Vehicle | None:
    result = await db.execute(select(Vehicle).where(Vehicle.plate == plate))
    return result.scalars().first()


async def list_vehicles(db: AsyncSession, client_id: str | None = None) -> list[Vehicle]:
    query = select(Vehicle)
    if client_id:
        query = query.where(Vehicle.client_id == client_id)
    result = await db.execute(query.order_by(Vehicle.created_at))
    return list(result.scalars().all())


# ── Assessment ────────────────────────────────────────────

async def get_assessment(db: AsyncSession, assessment_id: str) -> Assessment | None:
    return await db.get(Assessment, assessment_id)


async def list_assessments(db: AsyncSession, **filters) -> list[Assessment]:
    """List assessments matching column filters, newest assignment first.

    A filter value that is a list/tuple matches any of its members.
    """
    query = select(Assessment)
    for column, value in filters.items():
        attr = getattr(Assessment, column)
        if isinstance(value, (list, tuple)):
            query = query.where(attr.in_(value))
        else:
            query = query.where(attr == value)
    result = await db.execute(query.order_by(Assessment.assigned_at.desc(), Assessment.id.desc()))
    return list(result.scalars().all())


# ── Quotation ─────────────────────────────────────────────

async def get_quotation(db: AsyncSession, quotation_id: str) -> Quotation | None:
    return await db.get(Quotation, quotation_id)


async def list_quotations(db: AsyncSession, **filters) -> list[Quotation]:
    query = select(Quotation)
    for column, value in filters.items():
        query = query.where(getattr(Quotation, column) == value)
    result = await db.execute(query.order_by(Quotation.created_at.desc(), Quotation.id.desc()))
    return list(result.scalars().all())


# ── WorkOrder ─────────────────────────────────────────────

async def get_work_order(db: AsyncSession, order_id: str) -> WorkOrder | None:
    return await db.get(WorkOrder, order_id)


async def get_work_order_by_assessment(db: AsyncSession, assessment_id: str) -> WorkOrder | None:
    result = await db.execute(select(WorkOrder).where(WorkOrder.assessment_id == assessment_id))
    return result.scalars().first()


async def get_work_order_by_quotation(db: AsyncSession, quotation_id: str) -> WorkOrder | None:
    result = await db.execute(select(WorkOrder).where(WorkOrder.quotation_id == quotation_id))
    return result.scalars().first()


async def list_work_orders(db: AsyncSession, **filters) -> list[WorkOrder]:
    query = select(WorkOrder)
    for column, value in filters.items():
        query = query.where(getattr(WorkOrder, column) == value)
    result = await db.execute(query.order_by(WorkOrder.created_at.desc(), WorkOrder.id.desc()))
    return list(result.scalars().all())


async def list_work_order_numbers(db: AsyncSession, workshop_id: str) -> list[str]:
    result = await db.execute(select(WorkOrder.number).where(WorkOrder.workshop_id == workshop_id))
    return list(result.scalars().all())


# ── Invoice ───────────────────────────────────────────────

async def get_invoice(db: AsyncSession, invoice_id: str) -> Invoice | None:
    return await db.get(Invoice, invoice_id)


async def get_invoice_by_work_order(db: AsyncSession, work_order_id: str) -> Invoice | None:
    result = await db.execute(select(Invoice).where(Invoice.work_order_id == work_order_id))
    return result.scalars().first()


async def list_invoices(db: AsyncSession, **filters) -> list[Invoice]:
    query = select(Invoice)
    for column, value in filters.items():
        query = query.where(getattr(Invoice, column) == value)
    result = await db.execute(query.order_by(Invoice.created_at.desc(), Invoice.id.desc()))
    return list(result.scalars().all())


async def list_invoice_numbers(db: AsyncSession, workshop_id: str) -> list[str]:
    result = await db.execute(select(Invoice.number).where(Invoice.workshop_id == workshop_id))
    return list(result.scalars().all())
