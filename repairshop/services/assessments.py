"""Assessment service: diagnosis lifecycle and the per-task client approval flow.

A client answers each proposed task. When the last proposed task is resolved
and at least one task was accepted, the work order is staged in the same
transaction as the response, so the two are stored together or not at all.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from repairshop.db import crud
from repairshop.models import Assessment
from repairshop.models.base import new_id
from repairshop.models.enums import AssessmentStatus, TaskStatus
from repairshop.services import work_orders
from repairshop.services.guards import require_assessment, require_mechanic, require_vehicle
from repairshop.services.result import OperationFailed, ServiceResult, service_operation
from repairshop.services.workflow import all_resolved, derive_client_status, should_create_work_order

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "status", "diagnosis", "problems_found", "parts_needed", "estimated_hours", "estimated_cost",
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


async def _ensure_no_work_order(db: AsyncSession, assessment_id: str) -> None:
    """The task list is frozen once a work order was generated from the assessment."""
    if await crud.get_work_order_by_assessment(db, assessment_id):
        raise OperationFailed("a work order already exists for this assessment", "OT_ALREADY_EXISTS")


@service_operation("error creating assessment")
async def create_assessment(
    db: AsyncSession,
    vehicle_id: str,
    owner_id: str,
    workshop_id: str,
    mechanic_id: str | None = None,
) -> ServiceResult:
    """Open an assessment for a vehicle; with a mechanic it starts in progress."""
    await require_vehicle(db, vehicle_id)
    if mechanic_id:
        await require_mechanic(db, mechanic_id)

    assessment = Assessment(
        vehicle_id=vehicle_id,
        mechanic_id=mechanic_id,
        owner_id=owner_id,
        workshop_id=workshop_id,
        assigned_at=_now(),
        status=(AssessmentStatus.IN_PROGRESS if mechanic_id else AssessmentStatus.PENDING).value,
        tasks=[],
    )
    db.add(assessment)
    await db.commit()
    await db.refresh(assessment)
    logger.info("Assessment %s created for vehicle %s", assessment.id, vehicle_id)
    return ServiceResult.ok("Assessment assigned", assessment)


@service_operation("error adding task")
async def add_task(
    db: AsyncSession,
    assessment_id: str,
    name: str,
    description: str = "",
    estimated_price: float = 0.0,
    mandatory: bool = False,
) -> ServiceResult:
    assessment = await require_assessment(db, assessment_id)
    await _ensure_no_work_order(db, assessment_id)
    task = {
        "id": new_id(),
        "name": name,
        "description": description,
        "estimated_price": float(estimated_price or 0),
        "mandatory": mandatory,
        "status": TaskStatus.PROPOSED.value,
        "responded_at": None,
        "created_at": _now().isoformat(),
    }
    tasks = [*(assessment.tasks or []), task]
    assessment.tasks = tasks
    assessment.client_status = derive_client_status(tasks).value
    await db.commit()
    await db.refresh(assessment)
    return ServiceResult.ok("Task added", task)


@service_operation("error removing task")
async def remove_task(db: AsyncSession, assessment_id: str, task_id: str) -> ServiceResult:
    assessment = await require_assessment(db, assessment_id)
    if assessment.find_task(task_id) is None:
        raise OperationFailed("task not found", "TASK_NOT_FOUND")
    await _ensure_no_work_order(db, assessment_id)

    tasks = [t for t in assessment.tasks if t.get("id") != task_id]
    assessment.tasks = tasks
    assessment.client_status = derive_client_status(tasks).value
    await db.commit()
    await db.refresh(assessment)
    return ServiceResult.ok("Task removed", assessment)


@service_operation("error recording the client response")
async def respond_task(
    db: AsyncSession, assessment_id: str, task_id: str, accepted: bool,
) -> ServiceResult:
    """Record the client's accept/reject for one task.

    Returns ``{"assessment": ..., "work_order": ... | None}``.
    """
    assessment = await require_assessment(db, assessment_id)
    before = [dict(t) for t in assessment.tasks or []]
    after = [dict(t) for t in before]

    task = next((t for t in after if t.get("id") == task_id), None)
    if task is None:
        raise OperationFailed("task not found", "TASK_NOT_FOUND")
    if task.get("status") != TaskStatus.PROPOSED.value:
        raise OperationFailed("task was already answered", "TASK_ALREADY_RESOLVED")
    await _ensure_no_work_order(db, assessment_id)

    now = _now()
    task["status"] = (TaskStatus.ACCEPTED if accepted else TaskStatus.REJECTED).value
    task["responded_at"] = now.isoformat()

    assessment.tasks = after
    assessment.client_status = derive_client_status(after).value
    if all_resolved(after):
        assessment.client_reviewed_at = now

    order = None
    if should_create_work_order(before, after):
        order = await work_orders.build_automatic_order(db, assessment)

    await work_orders.commit_order(db)
    await db.refresh(assessment)
    if order is not None:
        await db.refresh(order)

    verb = "accepted" if accepted else "rejected"
    message = f"Task {verb}"
    if order is not None:
        message += f". Work order {order.number} generated, pending mechanic assignment."
    return ServiceResult.ok(message, {"assessment": assessment, "work_order": order})


@service_operation("error finalizing assessment")
async def finalize_assessment(db: AsyncSession, assessment_id: str) -> ServiceResult:
    """Mark the diagnosis complete so the owner can quote it."""
    assessment = await require_assessment(db, assessment_id)
    if not assessment.tasks:
        raise OperationFailed("add at least one task before finalizing", "NO_TASKS")

    assessment.status = AssessmentStatus.COMPLETED.value
    assessment.completed_at = _now()
    await db.commit()
    await db.refresh(assessment)
    return ServiceResult.ok("Assessment finalized. Ready for quotation.", assessment)


@service_operation("error sending assessment to client")
async def send_to_client(db: AsyncSession, assessment_id: str) -> ServiceResult:
    """Expose the proposed tasks to the client for per-task review."""
    assessment = await require_assessment(db, assessment_id)
    if not assessment.tasks:
        raise OperationFailed("add at least one task before sending", "NO_TASKS")

    assessment.status = AssessmentStatus.AWAITING_CLIENT.value
    assessment.client_status = derive_client_status(assessment.tasks).value
    if assessment.completed_at is None:
        assessment.completed_at = _now()
    await db.commit()
    await db.refresh(assessment)
    return ServiceResult.ok("Assessment sent to the client", assessment)


@service_operation("error claiming assessment")
async def claim_assessment(db: AsyncSession, assessment_id: str, mechanic_id: str) -> ServiceResult:
    """A mechanic takes an unassigned assessment of their workshop."""
    assessment = await require_assessment(db, assessment_id)
    if assessment.status != AssessmentStatus.PENDING.value:
        raise OperationFailed("this assessment was already taken by another mechanic", "ALREADY_TAKEN")
    await require_mechanic(db, mechanic_id)

    assessment.mechanic_id = mechanic_id
    assessment.status = AssessmentStatus.IN_PROGRESS.value
    await db.commit()
    await db.refresh(assessment)
    return ServiceResult.ok("Assessment taken", assessment)


@service_operation("error updating assessment")
async def update_assessment(db: AsyncSession, assessment_id: str, **changes) -> ServiceResult:
    assessment = await require_assessment(db, assessment_id)

    unknown = set(changes) - set(UPDATABLE_FIELDS)
    if unknown:
        raise OperationFailed(f"fields cannot be updated: {', '.join(sorted(unknown))}", "INVALID_FIELDS")
    status = changes.get("status")
    if status is not None and status not in {s.value for s in AssessmentStatus}:
        raise OperationFailed(f"invalid status: {status}", "INVALID_STATUS")

    for field, value in changes.items():
        if value is not None:
            setattr(assessment, field, value)
    if status == AssessmentStatus.COMPLETED.value:
        assessment.completed_at = _now()

    await db.commit()
    await db.refresh(assessment)
    return ServiceResult.ok("Assessment updated", assessment)


@service_operation("error fetching assessment")
async def get_assessment(db: AsyncSession, assessment_id: str) -> ServiceResult:
    return ServiceResult.ok("Assessment found", await require_assessment(db, assessment_id))


@service_operation("error deleting assessment")
async def delete_assessment(db: AsyncSession, assessment_id: str) -> ServiceResult:
    assessment = await require_assessment(db, assessment_id)
    await crud.delete_record(db, assessment)
    logger.info("Assessment %s deleted", assessment_id)
    return ServiceResult.ok("Assessment deleted")


# ── Listings (newest assignment first) ────────────────────

@service_operation("error fetching assessments")
async def list_by_mechanic(db: AsyncSession, mechanic_id: str) -> ServiceResult:
    return ServiceResult.ok("Assessments fetched", await crud.list_assessments(db, mechanic_id=mechanic_id))


@service_operation("error fetching assessments")
async def list_by_workshop(db: AsyncSession, workshop_id: str) -> ServiceResult:
    return ServiceResult.ok("Assessments fetched", await crud.list_assessments(db, workshop_id=workshop_id))


@service_operation("error fetching available assessments")
async def list_available(db: AsyncSession, workshop_id: str) -> ServiceResult:
    items = await crud.list_assessments(
        db, workshop_id=workshop_id, status=AssessmentStatus.PENDING.value,
    )
    return ServiceResult.ok("Available assessments", items)


@service_operation("error fetching assessments")
async def list_by_vehicle(
    db: AsyncSession, vehicle_id: str, workshop_id: str | None = None,
) -> ServiceResult:
    filters = {"vehicle_id": vehicle_id}
    if workshop_id is not None:
        filters["workshop_id"] = workshop_id
    return ServiceResult.ok("Assessments fetched", await crud.list_assessments(db, **filters))


@service_operation("error fetching assessments")
async def list_by_client(db: AsyncSession, client_id: str) -> ServiceResult:
    vehicles = await crud.list_vehicles(db, client_id=client_id)
    if not vehicles:
        return ServiceResult.ok("No registered vehicles", [])
    items = await crud.list_assessments(db, vehicle_id=[v.id for v in vehicles])
    return ServiceResult.ok("Assessments fetched", items)
