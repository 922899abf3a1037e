"""Vehicle service: client vehicles."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from repairshop.db import crud
from repairshop.models.enums import UserRole
from repairshop.services.guards import require_vehicle
from repairshop.services.result import OperationFailed, ServiceResult, service_operation

logger = logging.getLogger(__name__)


@service_operation("error registering vehicle")
async def create_vehicle(
    db: AsyncSession,
    client_id: str,
    plate: str,
    make: str,
    model: str,
    year: int,
    color: str = "",
) -> ServiceResult:
    plate = (plate or "").strip().upper()
    if not all((client_id, plate, make, model)):
        raise OperationFailed("missing required fields", "MISSING_FIELDS")

    client = await crud.get_user(db, client_id)
    if not client or client.role != UserRole.CLIENT.value:
        raise OperationFailed("client not found", "CLIENT_NOT_FOUND")
    if await crud.get_vehicle_by_plate(db, plate):
        raise OperationFailed("a vehicle with that plate already exists", "DUPLICATE_PLATE")

    vehicle = await crud.create_vehicle(
        db, plate=plate, make=make, model=model, year=year, client_id=client_id, color=color or "",
    )
    logger.info("Vehicle %s registered for client %s", vehicle.plate, client_id)
    return ServiceResult.ok("Vehicle registered", vehicle)


@service_operation("error fetching vehicles")
async def list_vehicles(db: AsyncSession, client_id: str | None = None) -> ServiceResult:
    return ServiceResult.ok("Vehicles fetched", await crud.list_vehicles(db, client_id=client_id))


@service_operation("error fetching vehicle")
async def get_vehicle(db: AsyncSession, vehicle_id: str) -> ServiceResult:
    return ServiceResult.ok("Vehicle found", await require_vehicle(db, vehicle_id))


@service_operation("error deleting vehicle")
async def delete_vehicle(db: AsyncSession, vehicle_id: str) -> ServiceResult:
    vehicle = await require_vehicle(db, vehicle_id)
    if await crud.count_references(db, "vehicle_id", vehicle_id):
        raise OperationFailed("the vehicle has assessments, quotations, orders or invoices", "VEHICLE_HAS_RECORDS")
    await crud.delete_record(db, vehicle)
    logger.info("Vehicle %s deleted", vehicle.plate)
    return ServiceResult.ok("Vehicle deleted")
