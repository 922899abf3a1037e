import pytest
from pydantic import ValidationError

from repairshop.models import Vehicle
from repairshop.schemas import (
    AssessmentUpdate,
    ClientCreate,
    QuotationCreate,
    TaskCreate,
    TaskRead,
    VehicleRead,
    WorkshopWithOwnerCreate,
)


def test_task_create_defaults():
    task = TaskCreate(name="Brakes")
    assert task.description == ""
    assert task.estimated_price == 0.0
    assert task.mandatory is False


def test_task_read_parses_iso_timestamps():
    task = TaskRead(
        id="t1", name="Brakes", status="accepted",
        responded_at="2025-03-14T10:00:00+00:00", created_at=None,
    )
    assert task.responded_at.year == 2025


def test_client_create_with_vehicle():
    client = ClientCreate(
        national_id="1", full_name="Carla", email="c@example.com", password="secret1",
        vehicle={"plate": "ABC123", "make": "Toyota", "model": "Corolla", "year": 2018},
    )
    assert client.vehicle.color == ""


def test_client_vehicle_year_must_be_numeric():
    with pytest.raises(ValidationError):
        ClientCreate(
            national_id="1", full_name="Carla", email="c@example.com", password="secret1",
            vehicle={"plate": "ABC123", "make": "Toyota", "model": "Corolla", "year": "old"},
        )


def test_workshop_with_owner_allows_missing_fields():
    # Missing fields are reported by the service, not rejected as 422
    body = WorkshopWithOwnerCreate(name="Garage")
    assert body.email == ""


def test_assessment_update_dumps_only_given_fields():
    body = AssessmentUpdate(diagnosis="Worn pads", parts_needed=[{"name": "Pads", "price": 30}])
    assert body.model_dump(exclude_none=True) == {
        "diagnosis": "Worn pads",
        "parts_needed": [{"name": "Pads", "quantity": 1, "price": 30.0}],
    }


def test_quotation_create_items():
    body = QuotationCreate(assessment_id="a1", items=[{"name": "Pads", "price": 80}])
    assert body.items[0].mandatory is False
    assert body.parts == []


def test_vehicle_read_from_orm():
    from datetime import datetime, timezone

    vehicle = Vehicle(
        id="v1", plate="ABC123", make="Toyota", model="Corolla", year=2018,
        color="Blue", client_id="c1", created_at=datetime.now(timezone.utc),
    )
    read = VehicleRead.model_validate(vehicle)
    assert read.plate == "ABC123"
