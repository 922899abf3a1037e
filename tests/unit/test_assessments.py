from sqlalchemy import text

from repairshop.db import crud
from repairshop.services import assessments, work_orders


async def _assessment(db, shop, mechanic=True):
    result = await assessments.create_assessment(
        db, vehicle_id=shop.vehicle.id, owner_id=shop.owner.id,
        workshop_id=shop.workshop.id, mechanic_id=shop.mechanic.id if mechanic else None,
    )
    assert result.success, result.message
    return result.data


async def test_create_assessment_status_depends_on_mechanic(db, shop):
    assigned = await _assessment(db, shop)
    assert assigned.status == "in_progress"
    assert assigned.client_status == "pending_review"
    assert assigned.tasks == []

    unassigned = await _assessment(db, shop, mechanic=False)
    assert unassigned.status == "pending"
    assert unassigned.mechanic_id is None


async def test_create_assessment_requires_vehicle_and_mechanic(db, shop):
    result = await assessments.create_assessment(
        db, vehicle_id="missing", owner_id=shop.owner.id, workshop_id=shop.workshop.id,
    )
    assert not result.success
    assert result.error == "VEHICLE_NOT_FOUND"

    result = await assessments.create_assessment(
        db, vehicle_id=shop.vehicle.id, owner_id=shop.owner.id,
        workshop_id=shop.workshop.id, mechanic_id=shop.client.id,
    )
    assert not result.success
    assert result.error == "MECHANIC_NOT_FOUND"


async def test_add_task_to_missing_assessment(db):
    result = await assessments.add_task(db, "nope", "Brakes", "Pads", 80.0)
    assert not result.success
    assert result.message == "assessment not found"
    assert result.error == "ASSESSMENT_NOT_FOUND"


async def test_add_and_remove_task(db, shop):
    assessment = await _assessment(db, shop)
    added = await assessments.add_task(db, assessment.id, "Brakes", "Front pads", 80.0, mandatory=True)
    assert added.success
    task = added.data
    assert task["status"] == "proposed"
    assert task["mandatory"] is True
    assert task["estimated_price"] == 80.0

    fetched = await crud.get_assessment(db, assessment.id)
    assert [t["id"] for t in fetched.tasks] == [task["id"]]

    removed = await assessments.remove_task(db, assessment.id, task["id"])
    assert removed.success
    assert removed.data.tasks == []
    assert removed.data.client_status == "pending_review"


async def test_remove_unknown_task(db, shop):
    assessment = await _assessment(db, shop)
    result = await assessments.remove_task(db, assessment.id, "ghost")
    assert not result.success
    assert result.message == "task not found"
    assert result.error == "TASK_NOT_FOUND"


async def test_accept_then_reject_generates_order_with_accepted_task_only(db, shop):
    assessment = await _assessment(db, shop)
    task_a = (await assessments.add_task(db, assessment.id, "A", "first", 120.0)).data
    task_b = (await assessments.add_task(db, assessment.id, "B", "second", 60.0)).data

    first = await assessments.respond_task(db, assessment.id, task_a["id"], True)
    assert first.success
    assert first.data["assessment"].client_status == "reviewed"
    assert first.data["work_order"] is None
    assert await crud.list_work_orders(db, assessment_id=assessment.id) == []

    second = await assessments.respond_task(db, assessment.id, task_b["id"], False)
    assert second.success
    updated = second.data["assessment"]
    assert updated.client_status == "partially_accepted"
    assert updated.client_reviewed_at is not None

    order = second.data["work_order"]
    assert order is not None
    assert [t["id"] for t in order.approved_tasks] == [task_a["id"]]
    assert order.total_cost == 120.0
    assert order.status == "pending_assignment"
    assert order.mechanic_assigned is False
    assert order.mechanic_id is None
    assert order.number.startswith("OT-")
    assert order.description == "Generated automatically. Client accepted 1 of 2 proposed tasks."

    # The assessment is kept
    assert await crud.get_assessment(db, assessment.id) is not None


async def test_all_rejected_creates_no_order(db, shop):
    assessment = await _assessment(db, shop)
    task = (await assessments.add_task(db, assessment.id, "A", "", 50.0)).data

    result = await assessments.respond_task(db, assessment.id, task["id"], False)
    assert result.success
    assert result.data["assessment"].client_status == "rejected"
    assert result.data["work_order"] is None
    assert await crud.list_work_orders(db, workshop_id=shop.workshop.id) == []


async def test_order_is_created_at_most_once(db, shop):
    assessment = await _assessment(db, shop)
    task = (await assessments.add_task(db, assessment.id, "A", "", 50.0)).data
    result = await assessments.respond_task(db, assessment.id, task["id"], True)
    created = result.data["work_order"]
    assert created is not None

    again = await work_orders.create_automatic_work_order(db, assessment.id)
    assert not again.success
    assert again.error == "OT_ALREADY_EXISTS"
    assert again.data.id == created.id
    assert len(await crud.list_work_orders(db, assessment_id=assessment.id)) == 1


async def test_answered_task_cannot_be_answered_again(db, shop):
    assessment = await _assessment(db, shop)
    assessment_id = assessment.id
    task = (await assessments.add_task(db, assessment.id, "A", "", 50.0)).data
    await assessments.respond_task(db, assessment.id, task["id"], True)

    result = await assessments.respond_task(db, assessment.id, task["id"], False)
    assert not result.success
    assert result.error == "TASK_ALREADY_RESOLVED"
    fetched = await crud.get_assessment(db, assessment_id)
    assert fetched.tasks[0]["status"] == "accepted"


async def test_respond_to_unknown_task(db, shop):
    assessment = await _assessment(db, shop)
    result = await assessments.respond_task(db, assessment.id, "ghost", True)
    assert not result.success
    assert result.message == "task not found"


async def test_stale_assessment_write_is_rejected(db, shop):
    assessment = await _assessment(db, shop)
    assessment_id = assessment.id
    task = (await assessments.add_task(db, assessment.id, "A", "", 50.0)).data

    # Another writer bumps the row version behind this session's back
    await db.execute(
        text("UPDATE valoraciones SET version = version + 1 WHERE id = :id"), {"id": assessment.id},
    )
    await db.commit()

    result = await assessments.respond_task(db, assessment.id, task["id"], True)
    assert not result.success
    assert result.error == "CONFLICT"

    fresh = await crud.get_assessment(db, assessment_id)
    assert fresh.tasks[0]["status"] == "proposed"
    assert await crud.list_work_orders(db, assessment_id=assessment_id) == []


async def test_finalize_and_send_require_tasks(db, shop):
    assessment_id = (await _assessment(db, shop)).id
    assert (await assessments.finalize_assessment(db, assessment_id)).error == "NO_TASKS"
    assert (await assessments.send_to_client(db, assessment_id)).error == "NO_TASKS"

    await assessments.add_task(db, assessment_id, "A", "", 10.0)
    finalized = await assessments.finalize_assessment(db, assessment_id)
    assert finalized.success
    assert finalized.data.status == "completed"
    assert finalized.data.completed_at is not None

    sent = await assessments.send_to_client(db, assessment_id)
    assert sent.data.status == "awaiting_client"


async def test_claim_only_pending_assessments(db, shop):
    assessment = await _assessment(db, shop, mechanic=False)
    available = await assessments.list_available(db, shop.workshop.id)
    assert [a.id for a in available.data] == [assessment.id]

    claimed = await assessments.claim_assessment(db, assessment.id, shop.mechanic.id)
    assert claimed.success
    assert claimed.data.status == "in_progress"
    assert claimed.data.mechanic_id == shop.mechanic.id

    again = await assessments.claim_assessment(db, assessment.id, shop.mechanic.id)
    assert again.error == "ALREADY_TAKEN"
    assert (await assessments.list_available(db, shop.workshop.id)).data == []


async def test_update_assessment_rejects_unknown_fields(db, shop):
    assessment_id = (await _assessment(db, shop)).id
    bad = await assessments.update_assessment(db, assessment_id, vehicle_id="other")
    assert bad.error == "INVALID_FIELDS"

    ok = await assessments.update_assessment(
        db, assessment_id, diagnosis="Worn pads", problems_found=["squeal"], estimated_hours=2.5,
    )
    assert ok.success
    assert ok.data.diagnosis == "Worn pads"
    assert ok.data.problems_found == ["squeal"]


async def test_listings(db, shop):
    first = await _assessment(db, shop)
    second = await _assessment(db, shop)

    by_client = await assessments.list_by_client(db, shop.client.id)
    assert {a.id for a in by_client.data} == {first.id, second.id}

    by_mechanic = await assessments.list_by_mechanic(db, shop.mechanic.id)
    assert len(by_mechanic.data) == 2

    other_client = await crud.create_user(
        db, national_id="9", full_name="No Car", email="nocar@example.com",
        password_hash="x", role="client",
    )
    empty = await assessments.list_by_client(db, other_client.id)
    assert empty.success
    assert empty.data == []


async def test_delete_assessment(db, shop):
    assessment = await _assessment(db, shop)
    assert (await assessments.delete_assessment(db, assessment.id)).success
    assert (await assessments.get_assessment(db, assessment.id)).error == "ASSESSMENT_NOT_FOUND"


async def test_tasks_are_frozen_once_the_order_exists(db, shop):
    assessment_id = (await _assessment(db, shop)).id
    task = (await assessments.add_task(db, assessment_id, "A", "", 10.0)).data
    order_id = (await assessments.respond_task(db, assessment_id, task["id"], True)).data["work_order"].id

    added = await assessments.add_task(db, assessment_id, "B", "", 20.0)
    assert not added.success
    assert added.error == "OT_ALREADY_EXISTS"
    removed = await assessments.remove_task(db, assessment_id, task["id"])
    assert removed.error == "OT_ALREADY_EXISTS"

    fresh = await crud.get_assessment(db, assessment_id)
    assert [t["id"] for t in fresh.tasks] == [task["id"]]
    assert fresh.client_status == "fully_accepted"
    order = await crud.get_work_order(db, order_id)
    assert [t["id"] for t in order.approved_tasks] == [task["id"]]
    assert order.total_cost == 10.0


async def test_racing_order_creation_is_reported_not_crashed(db, shop, monkeypatch):
    assessment_id = (await _assessment(db, shop)).id
    task = (await assessments.add_task(db, assessment_id, "A", "", 10.0)).data
    # Another request stores an order for the assessment between our check and our commit
    await work_orders.create_work_order(
        db, vehicle_id=shop.vehicle.id, owner_id=shop.owner.id, workshop_id=shop.workshop.id,
        assessment_id=assessment_id,
    )

    async def not_seen_yet(db, assessment_id):
        return None

    monkeypatch.setattr(crud, "get_work_order_by_assessment", not_seen_yet)
    result = await assessments.respond_task(db, assessment_id, task["id"], True)
    assert not result.success
    assert result.error == "OT_ALREADY_EXISTS"

    fresh = await crud.get_assessment(db, assessment_id)
    assert fresh.tasks[0]["status"] == "proposed"
    assert len(await crud.list_work_orders(db, assessment_id=assessment_id)) == 1
