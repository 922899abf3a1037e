from repairshop.db import crud
from repairshop.services import assessments, quotations, work_orders


async def _quotation(db, shop, items=None, parts=None):
    assessment = (await assessments.create_assessment(
        db, vehicle_id=shop.vehicle.id, owner_id=shop.owner.id,
        workshop_id=shop.workshop.id, mechanic_id=shop.mechanic.id,
    )).data
    result = await quotations.create_quotation(
        db, vehicle_id=shop.vehicle.id, client_id=shop.client.id, assessment_id=assessment.id,
        owner_id=shop.owner.id, workshop_id=shop.workshop.id,
        items=items if items is not None else [
            {"name": "Pads", "description": "Front", "mandatory": True, "price": 80.0},
            {"name": "Wipers", "description": "", "mandatory": False, "price": 20.0},
            {"name": "Wax", "description": "", "mandatory": False, "price": 15.0},
        ],
        parts=parts if parts is not None else [{"name": "Pad set", "quantity": 2, "unit_price": 12.5}],
    )
    assert result.success, result.message
    return result.data


def test_quotation_total():
    items = [{"price": 10}, {"price": 5.5}]
    parts = [{"unit_price": 3, "quantity": 2}, {"unit_price": 1.5, "quantity": 4}]
    assert quotations.quotation_total(items, parts) == 27.5


async def test_create_quotation_marks_assessment_quoted(db, shop):
    quotation = await _quotation(db, shop)
    assert quotation.status == "pending_client_approval"
    assert quotation.estimated_total == 140.0
    assert all(item["id"] for item in quotation.items)

    assessment = await crud.get_assessment(db, quotation.assessment_id)
    assert assessment.status == "quoted"


async def test_create_quotation_validates(db, shop):
    result = await quotations.create_quotation(
        db, vehicle_id="", client_id=shop.client.id, assessment_id="x",
        owner_id=shop.owner.id, workshop_id=shop.workshop.id,
    )
    assert result.error == "MISSING_FIELDS"

    result = await quotations.create_quotation(
        db, vehicle_id=shop.vehicle.id, client_id=shop.client.id, assessment_id="ghost",
        owner_id=shop.owner.id, workshop_id=shop.workshop.id,
    )
    assert result.error == "ASSESSMENT_NOT_FOUND"


async def test_approve_builds_order_from_mandatory_and_selected(db, shop):
    quotation = await _quotation(db, shop)
    wipers = next(it for it in quotation.items if it["name"] == "Wipers")

    result = await quotations.respond_quotation(db, quotation.id, True, [wipers["id"]])
    assert result.success
    assert result.data["quotation"].status == "approved"
    assert result.data["quotation"].responded_at is not None

    order = result.data["work_order"]
    assert {t["name"] for t in order.approved_tasks} == {"Pads", "Wipers"}
    assert order.total_cost == 80.0 + 20.0 + 25.0
    assert order.quotation_id == quotation.id

    again = await quotations.respond_quotation(db, quotation.id, False)
    assert again.error == "ALREADY_RESPONDED"


async def test_reject_creates_no_order(db, shop):
    quotation = await _quotation(db, shop)
    result = await quotations.respond_quotation(db, quotation.id, False)
    assert result.success
    assert result.data["quotation"].status == "rejected"
    assert result.data["work_order"] is None
    assert await crud.get_work_order_by_quotation(db, quotation.id) is None


async def test_approve_without_any_item_fails(db, shop):
    quotation = await _quotation(db, shop, items=[
        {"name": "Wax", "description": "", "mandatory": False, "price": 15.0},
    ], parts=[])
    quotation_id = quotation.id
    result = await quotations.respond_quotation(db, quotation_id, True, [])
    assert result.error == "NO_SELECTED_ITEMS"

    fresh = await crud.get_quotation(db, quotation_id)
    assert fresh.status == "pending_client_approval"


async def test_listings(db, shop):
    quotation = await _quotation(db, shop)
    assert [q.id for q in (await quotations.list_by_client(db, shop.client.id)).data] == [quotation.id]
    assert [q.id for q in (await quotations.list_by_workshop(db, shop.workshop.id)).data] == [quotation.id]
    assert (await quotations.get_quotation(db, "ghost")).error == "QUOTATION_NOT_FOUND"


async def test_racing_order_for_the_same_assessment_is_reported(db, shop, monkeypatch):
    quotation = await _quotation(db, shop)
    quotation_id = quotation.id
    # Another request already turned the assessment into an order
    await work_orders.create_work_order(
        db, vehicle_id=shop.vehicle.id, owner_id=shop.owner.id, workshop_id=shop.workshop.id,
        assessment_id=quotation.assessment_id,
    )

    async def not_seen_yet(db, assessment_id):
        return None

    monkeypatch.setattr(crud, "get_work_order_by_assessment", not_seen_yet)
    result = await quotations.respond_quotation(db, quotation_id, True, [])
    assert not result.success
    assert result.error == "OT_ALREADY_EXISTS"

    fresh = await crud.get_quotation(db, quotation_id)
    assert fresh.status == "pending_client_approval"
    assert await crud.get_work_order_by_quotation(db, quotation_id) is None
