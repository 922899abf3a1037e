"""User management API: mechanics, clients, and the site admin's user list."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from repairshop.api.common import ensure_workshop_access, respond
from repairshop.db import crud
from repairshop.db.engine import get_db
from repairshop.dependencies import require_role
from repairshop.schemas import ClientCreate, MechanicCreate, RegisterRequest, UserRead, VehicleRead
from repairshop.services import accounts
from repairshop.services.auth import AuthContext

router = APIRouter(prefix="/api", tags=["users"])

staff = require_role("web_owner", "workshop_owner")


def _scope(auth: AuthContext, workshop_id: str | None) -> str | None:
    """Workshop owners are pinned to their own workshop."""
    if auth.role == "web_owner":
        return workshop_id
    return auth.workshop_id


# ── Site admin ────────────────────────────────────────────

@router.get("/users")
async def list_users(
    role: str | None = None,
    workshop_id: str | None = None,
    auth: AuthContext = Depends(require_role("web_owner")),
    db: AsyncSession = Depends(get_db),
):
    return respond(await accounts.list_users(db, role=role, workshop_id=workshop_id), UserRead)


@router.post("/users", status_code=201)
async def create_user(
    body: RegisterRequest,
    auth: AuthContext = Depends(require_role("web_owner")),
    db: AsyncSession = Depends(get_db),
):
    return respond(await accounts.register(db, **body.model_dump()), UserRead, status_code=201)


# ── Mechanics ─────────────────────────────────────────────

@router.post("/mechanics", status_code=201)
async def create_mechanic(
    body: MechanicCreate,
    auth: AuthContext = Depends(staff),
    db: AsyncSession = Depends(get_db),
):
    workshop_id = _scope(auth, body.workshop_id)
    if not workshop_id:
        raise HTTPException(400, "workshop_id is required")
    fields = body.model_dump(exclude={"workshop_id"})
    result = await accounts.create_mechanic(db, workshop_id, **fields)
    return respond(result, UserRead, status_code=201)


@router.get("/mechanics")
async def list_mechanics(
    workshop_id: str | None = None,
    auth: AuthContext = Depends(staff),
    db: AsyncSession = Depends(get_db),
):
    workshop_id = _scope(auth, workshop_id)
    if not workshop_id:
        raise HTTPException(400, "workshop_id is required")
    return respond(await accounts.list_mechanics(db, workshop_id), UserRead)


@router.delete("/mechanics/{mechanic_id}")
async def delete_mechanic(
    mechanic_id: str,
    auth: AuthContext = Depends(staff),
    db: AsyncSession = Depends(get_db),
):
    mechanic = await crud.get_user(db, mechanic_id)
    if mechanic:
        ensure_workshop_access(auth, mechanic.workshop_id)
    return respond(await accounts.delete_mechanic(db, mechanic_id))


# ── Clients ───────────────────────────────────────────────

@router.post("/clients", status_code=201)
async def create_client(
    body: ClientCreate,
    auth: AuthContext = Depends(staff),
    db: AsyncSession = Depends(get_db),
):
    fields = body.model_dump(exclude={"vehicle"})
    vehicle = body.vehicle.model_dump() if body.vehicle else None
    result = await accounts.create_client(db, **fields, vehicle=vehicle)
    return respond(result, {"user": UserRead, "vehicle": VehicleRead}, status_code=201)


@router.get("/clients")
async def list_clients(
    auth: AuthContext = Depends(staff),
    db: AsyncSession = Depends(get_db),
):
    return respond(await accounts.list_clients(db), UserRead)


@router.delete("/clients/{client_id}")
async def delete_client(
    client_id: str,
    auth: AuthContext = Depends(staff),
    db: AsyncSession = Depends(get_db),
):
    return respond(await accounts.delete_client(db, client_id))
