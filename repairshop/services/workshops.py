"""Workshop service: listing and maintenance of registered workshops."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from repairshop.db import crud
from repairshop.models import Workshop
from repairshop.services.result import OperationFailed, ServiceResult, service_operation

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "owner_national_id", "owner_name", "email", "phone", "address")


async def _require_workshop(db: AsyncSession, workshop_id: str) -> Workshop:
    workshop = await crud.get_workshop(db, workshop_id)
    if not workshop:
        raise OperationFailed("workshop not found", "WORKSHOP_NOT_FOUND")
    return workshop


@service_operation("error fetching workshops")
async def list_workshops(db: AsyncSession) -> ServiceResult:
    return ServiceResult.ok("Workshops fetched", await crud.list_workshops(db))


@service_operation("error fetching workshop")
async def get_workshop(db: AsyncSession, workshop_id: str) -> ServiceResult:
    return ServiceResult.ok("Workshop found", await _require_workshop(db, workshop_id))


@service_operation("error updating workshop")
async def update_workshop(db: AsyncSession, workshop_id: str, **changes) -> ServiceResult:
    workshop = await _require_workshop(db, workshop_id)
    unknown = set(changes) - set(UPDATABLE_FIELDS)
    if unknown:
        raise OperationFailed(f"fields cannot be updated: {', '.join(sorted(unknown))}", "INVALID_FIELDS")

    updates = {k: v for k, v in changes.items() if v is not None}
    email = updates.get("email")
    if email:
        email = email.strip().lower()
        other = await crud.get_workshop_by_email(db, email)
        if other and other.id != workshop.id:
            raise OperationFailed("a workshop with that email already exists", "DUPLICATE_EMAIL")
        updates["email"] = email

    workshop = await crud.update_record(db, workshop, **updates)
    return ServiceResult.ok("Workshop updated", workshop)


@service_operation("error deleting workshop")
async def delete_workshop(db: AsyncSession, workshop_id: str) -> ServiceResult:
    """Delete a workshop and drop it from the site admin's workshop list."""
    workshop = await _require_workshop(db, workshop_id)
    web_owner = await crud.get_web_owner(db)
    if web_owner and workshop_id in (web_owner.workshop_ids or []):
        web_owner.workshop_ids = [w for w in web_owner.workshop_ids if w != workshop_id]
    await crud.delete_record(db, workshop)
    logger.info("Workshop %s deleted", workshop_id)
    return ServiceResult.ok("Workshop deleted")
