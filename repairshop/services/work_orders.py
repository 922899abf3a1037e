"""Work order service: automatic, quotation-based and manual creation, assignment, progress."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from repairshop.db import crud
from repairshop.models import Assessment, Quotation, WorkOrder
from repairshop.models.enums import Priority, WorkOrderStatus
from repairshop.services.guards import (
    require_assessment, require_mechanic, require_vehicle, require_work_order,
)
from repairshop.services.numbering import next_document_number
from repairshop.services.result import OperationFailed, ServiceResult, service_operation
from repairshop.services.workflow import accepted_tasks, all_resolved

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "status", "priority", "work_performed", "parts_used",
    "hours_worked", "labour_cost", "parts_cost", "observations",
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _order_task(task: dict, price_key: str = "estimated_price") -> dict:
    return {
        "id": task["id"],
        "name": task.get("name", ""),
        "description": task.get("description", ""),
        "estimated_price": float(task.get(price_key) or 0),
        "completed": False,
        "completed_at": None,
    }


def _check_priority(priority: str) -> str:
    if priority not in {p.value for p in Priority}:
        raise OperationFailed(f"invalid priority: {priority}", "INVALID_PRIORITY")
    return priority


async def generate_number(db: AsyncSession, workshop_id: str) -> str:
    numbers = await crud.list_work_order_numbers(db, workshop_id)
    return next_document_number("OT", numbers, 4)


async def commit_order(db: AsyncSession) -> None:
    """Commit a staged order. The unique source columns turn a racing duplicate into a failure."""
    try:
        await db.commit()
    except IntegrityError:
        raise OperationFailed("a work order already exists for this source", "OT_ALREADY_EXISTS")


async def build_automatic_order(db: AsyncSession, assessment: Assessment) -> WorkOrder:
    """Stage (without committing) the order generated from an assessment's accepted tasks."""
    accepted = accepted_tasks(assessment.tasks or [])
    await require_vehicle(db, assessment.vehicle_id)
    order = WorkOrder(
        number=await generate_number(db, assessment.workshop_id),
        vehicle_id=assessment.vehicle_id,
        mechanic_assigned=False,
        owner_id=assessment.owner_id,
        workshop_id=assessment.workshop_id,
        assessment_id=assessment.id,
        approved_tasks=[_order_task(t) for t in accepted],
        status=WorkOrderStatus.PENDING_ASSIGNMENT.value,
        priority=Priority.MEDIUM.value,
        description=(
            f"Generated automatically. Client accepted {len(accepted)} of "
            f"{len(assessment.tasks or [])} proposed tasks."
        ),
        total_cost=sum(float(t.get("estimated_price") or 0) for t in accepted),
    )
    db.add(order)
    logger.info(
        "Work order %s staged for assessment %s (%d tasks, total %.2f)",
        order.number, assessment.id, len(accepted), order.total_cost,
    )
    return order


async def build_quotation_order(db: AsyncSession, quotation: Quotation) -> WorkOrder:
    """Stage the order for an approved quotation: mandatory + selected optional items."""
    await require_vehicle(db, quotation.vehicle_id)
    if await crud.get_work_order_by_quotation(db, quotation.id):
        raise OperationFailed("a work order already exists for this quotation", "OT_ALREADY_EXISTS")
    if await crud.get_work_order_by_assessment(db, quotation.assessment_id):
        raise OperationFailed("a work order already exists for this assessment", "OT_ALREADY_EXISTS")

    selected = set(quotation.selected_optional_ids or [])
    included = [it for it in quotation.items or [] if it.get("mandatory") or it.get("id") in selected]
    if not included:
        raise OperationFailed("no repairs selected", "NO_SELECTED_ITEMS")

    items_total = sum(float(it.get("price") or 0) for it in included)
    parts_total = sum(
        float(p.get("unit_price") or 0) * float(p.get("quantity") or 0) for p in quotation.parts or []
    )
    order = WorkOrder(
        number=await generate_number(db, quotation.workshop_id),
        vehicle_id=quotation.vehicle_id,
        mechanic_assigned=False,
        owner_id=quotation.owner_id,
        workshop_id=quotation.workshop_id,
        assessment_id=quotation.assessment_id,
        quotation_id=quotation.id,
        approved_tasks=[_order_task(it, price_key="price") for it in included],
        status=WorkOrderStatus.PENDING_ASSIGNMENT.value,
        priority=Priority.MEDIUM.value,
        description=f"Generated from quotation. Includes {len(included)} repairs.",
        total_cost=items_total + parts_total,
    )
    db.add(order)
    return order


# ── Creation ──────────────────────────────────────────────

@service_operation("error generating automatic work order")
async def create_automatic_work_order(db: AsyncSession, assessment_id: str) -> ServiceResult:
    """Create the order for a fully reviewed assessment. Never creates a second one."""
    assessment = await require_assessment(db, assessment_id)

    existing = await crud.get_work_order_by_assessment(db, assessment_id)
    if existing:
        return ServiceResult.fail(
            "a work order already exists for this assessment", "OT_ALREADY_EXISTS", data=existing,
        )
    if not accepted_tasks(assessment.tasks or []):
        return ServiceResult.fail("the client has not accepted any task", "NO_ACCEPTED_TASKS")
    if not all_resolved(assessment.tasks or []):
        return ServiceResult.fail("the client has not reviewed every task yet", "ASSESSMENT_INCOMPLETE")

    order = await build_automatic_order(db, assessment)
    await commit_order(db)
    await db.refresh(order)
    return ServiceResult.ok(
        f"Work order {order.number} generated automatically. Pending mechanic assignment.", order,
    )


@service_operation("error creating work order from quotation")
async def create_work_order_from_quotation(db: AsyncSession, quotation_id: str) -> ServiceResult:
    quotation = await crud.get_quotation(db, quotation_id)
    if not quotation:
        raise OperationFailed("quotation not found", "QUOTATION_NOT_FOUND")
    order = await build_quotation_order(db, quotation)
    await commit_order(db)
    await db.refresh(order)
    return ServiceResult.ok("Work order created", order)


@service_operation("error creating work order")
async def create_work_order(
    db: AsyncSession,
    vehicle_id: str,
    owner_id: str,
    workshop_id: str,
    description: str = "",
    priority: str = "medium",
    mechanic_id: str | None = None,
    assessment_id: str | None = None,
    approved_tasks: list[dict] | None = None,
    total_cost: float = 0.0,
) -> ServiceResult:
    """Manual creation by a workshop owner, optionally assigning a mechanic right away."""
    await require_vehicle(db, vehicle_id)
    _check_priority(priority)

    if assessment_id and await crud.get_work_order_by_assessment(db, assessment_id):
        raise OperationFailed("a work order already exists for this assessment", "OT_ALREADY_EXISTS")
    if mechanic_id:
        await require_mechanic(db, mechanic_id)

    now = _now()
    order = WorkOrder(
        number=await generate_number(db, workshop_id),
        vehicle_id=vehicle_id,
        mechanic_id=mechanic_id,
        mechanic_assigned=bool(mechanic_id),
        owner_id=owner_id,
        workshop_id=workshop_id,
        assessment_id=assessment_id,
        approved_tasks=list(approved_tasks or []),
        status=(WorkOrderStatus.ASSIGNED if mechanic_id else WorkOrderStatus.PENDING_ASSIGNMENT).value,
        priority=priority,
        description=description,
        total_cost=total_cost,
        assigned_at=now if mechanic_id else None,
    )
    db.add(order)
    await commit_order(db)
    await db.refresh(order)
    logger.info("Manual work order %s created (assigned=%s)", order.number, order.mechanic_assigned)

    suffix = " and assigned to the mechanic" if mechanic_id else ""
    return ServiceResult.ok(f"Work order {order.number} created{suffix}.", order)


@service_operation("error creating work order from assessment")
async def create_work_order_from_assessment(
    db: AsyncSession,
    assessment_id: str,
    mechanic_id: str,
    priority: str = "medium",
    observations: str = "",
) -> ServiceResult:
    """Owner shortcut: order from the accepted tasks of an assessment, assigned at once."""
    assessment = await crud.get_assessment(db, assessment_id)
    if not assessment:
        return ServiceResult.fail("assessment not found", "ASSESSMENT_NOT_FOUND")
    if await crud.get_work_order_by_assessment(db, assessment_id):
        return ServiceResult.fail("a work order already exists for this assessment", "OT_ALREADY_EXISTS")

    accepted = accepted_tasks(assessment.tasks or [])
    if not accepted:
        return ServiceResult.fail("the client has not accepted any task", "NO_ACCEPTED_TASKS")

    return await create_work_order(
        db,
        vehicle_id=assessment.vehicle_id,
        owner_id=assessment.owner_id,
        workshop_id=assessment.workshop_id,
        description=f"Order created from assessment. {observations}".strip(),
        priority=priority,
        mechanic_id=mechanic_id,
        assessment_id=assessment_id,
        approved_tasks=[_order_task(t) for t in accepted],
        total_cost=sum(float(t.get("estimated_price") or 0) for t in accepted),
    )


# ── Assignment and progress ───────────────────────────────

@service_operation("error assigning mechanic")
async def assign_mechanic(
    db: AsyncSession,
    order_id: str,
    mechanic_id: str,
    priority: str = "medium",
    observations: str = "",
) -> ServiceResult:
    order = await require_work_order(db, order_id)
    if order.mechanic_assigned:
        raise OperationFailed("this order already has a mechanic assigned", "ALREADY_ASSIGNED")
    await require_mechanic(db, mechanic_id)
    _check_priority(priority)

    order.mechanic_id = mechanic_id
    order.mechanic_assigned = True
    order.assigned_at = _now()
    order.status = WorkOrderStatus.ASSIGNED.value
    order.priority = priority
    if observations and observations.strip():
        order.observations = observations
    await db.commit()
    await db.refresh(order)
    logger.info("Work order %s assigned to mechanic %s", order.number, mechanic_id)
    return ServiceResult.ok(f"Order {order.number} assigned to the mechanic", order)


@service_operation("error updating work order")
async def update_work_order(db: AsyncSession, order_id: str, **changes) -> ServiceResult:
    order = await require_work_order(db, order_id)

    unknown = set(changes) - set(UPDATABLE_FIELDS)
    if unknown:
        raise OperationFailed(f"fields cannot be updated: {', '.join(sorted(unknown))}", "INVALID_FIELDS")
    status = changes.get("status")
    if status is not None and status not in {s.value for s in WorkOrderStatus}:
        raise OperationFailed(f"invalid status: {status}", "INVALID_STATUS")
    if changes.get("priority") is not None:
        _check_priority(changes["priority"])

    for field, value in changes.items():
        if value is not None:
            setattr(order, field, value)

    if status == WorkOrderStatus.IN_PROGRESS.value and order.started_at is None:
        order.started_at = _now()
    if status == WorkOrderStatus.COMPLETED.value:
        order.finished_at = _now()
        order.total_cost = (order.labour_cost or 0) + (order.parts_cost or 0)

    await db.commit()
    await db.refresh(order)
    return ServiceResult.ok("Order updated", order)


@service_operation("error completing task")
async def complete_task(db: AsyncSession, order_id: str, task_id: str) -> ServiceResult:
    order = await require_work_order(db, order_id)
    tasks = [dict(t) for t in order.approved_tasks or []]
    for task in tasks:
        if task.get("id") == task_id:
            task["completed"] = True
            task["completed_at"] = _now().isoformat()
            break
    else:
        raise OperationFailed("task not found", "TASK_NOT_FOUND")

    order.approved_tasks = tasks
    await db.commit()
    await db.refresh(order)
    return ServiceResult.ok("Task completed", order)


# ── Queries ───────────────────────────────────────────────

@service_operation("error fetching work order")
async def get_work_order(db: AsyncSession, order_id: str) -> ServiceResult:
    order = await require_work_order(db, order_id)
    return ServiceResult.ok("Order found", order)


@service_operation("error fetching orders")
async def list_pending_assignment(db: AsyncSession, workshop_id: str) -> ServiceResult:
    orders = await crud.list_work_orders(
        db, workshop_id=workshop_id, status=WorkOrderStatus.PENDING_ASSIGNMENT.value,
    )
    return ServiceResult.ok("Pending orders fetched", orders)


@service_operation("error fetching orders")
async def list_by_mechanic(db: AsyncSession, mechanic_id: str) -> ServiceResult:
    return ServiceResult.ok("Orders fetched", await crud.list_work_orders(db, mechanic_id=mechanic_id))


@service_operation("error fetching orders")
async def list_by_workshop(db: AsyncSession, workshop_id: str) -> ServiceResult:
    return ServiceResult.ok("Orders fetched", await crud.list_work_orders(db, workshop_id=workshop_id))


@service_operation("error fetching orders")
async def list_by_vehicle(
    db: AsyncSession, vehicle_id: str, workshop_id: str | None = None,
) -> ServiceResult:
    """Orders for a vehicle, optionally limited to one workshop."""
    filters = {"vehicle_id": vehicle_id}
    if workshop_id is not None:
        filters["workshop_id"] = workshop_id
    return ServiceResult.ok("Orders fetched", await crud.list_work_orders(db, **filters))


@service_operation("error fetching orders")
async def list_by_client(db: AsyncSession, client_id: str) -> ServiceResult:
    orders = []
    for vehicle in await crud.list_vehicles(db, client_id=client_id):
        orders.extend(await crud.list_work_orders(db, vehicle_id=vehicle.id))
    orders.sort(key=lambda o: (o.created_at, o.id), reverse=True)
    return ServiceResult.ok("Orders fetched", orders)


@service_operation("error deleting work order")
async def delete_work_order(db: AsyncSession, order_id: str) -> ServiceResult:
    order = await require_work_order(db, order_id)
    await crud.delete_record(db, order)
    return ServiceResult.ok("Order deleted")
