"""Workshop API: site-admin registration and maintenance of workshops."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from repairshop.api.common import ensure_workshop_access, respond
from repairshop.db.engine import get_db
from repairshop.dependencies import require_auth, require_role
from repairshop.schemas import UserRead, WorkshopRead, WorkshopUpdate, WorkshopWithOwnerCreate
from repairshop.services import accounts, workshops
from repairshop.services.auth import AuthContext

router = APIRouter(prefix="/api", tags=["workshops"])


@router.post("/create-workshop-with-owner", status_code=201)
async def create_workshop_with_owner(
    body: WorkshopWithOwnerCreate,
    auth: AuthContext = Depends(require_role("web_owner")),
    db: AsyncSession = Depends(get_db),
):
    result = await accounts.create_workshop_with_owner(db, **body.model_dump())
    failure = 500 if result.error == "SERVER_ERROR" else 400
    return respond(
        result, {"workshop": WorkshopRead, "user": UserRead},
        status_code=201, failure_status=failure,
    )


@router.get("/workshops")
async def list_workshops(
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    result = await workshops.list_workshops(db)
    if not result.success:
        return respond(result)
    return [WorkshopRead.model_validate(w).model_dump(mode="json") for w in result.data]


@router.get("/workshops/{workshop_id}")
async def get_workshop(
    workshop_id: str,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    ensure_workshop_access(auth, workshop_id)
    return respond(await workshops.get_workshop(db, workshop_id), WorkshopRead)


@router.put("/workshops/{workshop_id}")
async def update_workshop(
    workshop_id: str,
    body: WorkshopUpdate,
    auth: AuthContext = Depends(require_role("web_owner", "workshop_owner")),
    db: AsyncSession = Depends(get_db),
):
    ensure_workshop_access(auth, workshop_id)
    result = await workshops.update_workshop(db, workshop_id, **body.model_dump(exclude_none=True))
    return respond(result, WorkshopRead)


@router.delete("/workshops/{workshop_id}")
async def delete_workshop(
    workshop_id: str,
    auth: AuthContext = Depends(require_role("web_owner")),
    db: AsyncSession = Depends(get_db),
):
    return respond(await workshops.delete_workshop(db, workshop_id))
