"""Vehicle API: clients manage their own vehicles, staff manage any."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from repairshop.api.common import respond
from repairshop.db.engine import get_db
from repairshop.dependencies import require_auth, require_role
from repairshop.schemas import VehicleCreate, VehicleRead
from repairshop.services import vehicles
from repairshop.services.auth import AuthContext

router = APIRouter(prefix="/api/vehicles", tags=["vehicles"])


@router.post("", status_code=201)
async def create_vehicle(
    body: VehicleCreate,
    auth: AuthContext = Depends(require_role("web_owner", "workshop_owner", "client")),
    db: AsyncSession = Depends(get_db),
):
    client_id = auth.user_id if auth.role == "client" else body.client_id
    if not client_id:
        raise HTTPException(400, "client_id is required")
    result = await vehicles.create_vehicle(
        db, client_id=client_id, plate=body.plate, make=body.make,
        model=body.model, year=body.year, color=body.color,
    )
    return respond(result, VehicleRead, status_code=201)


@router.get("")
async def list_vehicles(
    client_id: str | None = None,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    if auth.role == "client":
        client_id = auth.user_id
    return respond(await vehicles.list_vehicles(db, client_id=client_id), VehicleRead)


@router.get("/{vehicle_id}")
async def get_vehicle(
    vehicle_id: str,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    result = await vehicles.get_vehicle(db, vehicle_id)
    if result.success and auth.role == "client" and result.data.client_id != auth.user_id:
        raise HTTPException(403, "Not your vehicle")
    return respond(result, VehicleRead)


@router.delete("/{vehicle_id}")
async def delete_vehicle(
    vehicle_id: str,
    auth: AuthContext = Depends(require_role("web_owner", "workshop_owner")),
    db: AsyncSession = Depends(get_db),
):
    return respond(await vehicles.delete_vehicle(db, vehicle_id))
