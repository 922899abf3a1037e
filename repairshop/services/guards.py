"""Lookups that raise OperationFailed when a referenced record is missing."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from repairshop.db import crud
from repairshop.models import User, Vehicle, Assessment, WorkOrder
from repairshop.models.enums import UserRole
from repairshop.services.result import OperationFailed


async def require_vehicle(db: AsyncSession, vehicle_id: str) -> Vehicle:
    vehicle = await crud.get_vehicle(db, vehicle_id) if vehicle_id else None
    if not vehicle:
        raise OperationFailed("vehicle not found", "VEHICLE_NOT_FOUND")
    return vehicle


async def require_mechanic(db: AsyncSession, mechanic_id: str) -> User:
    user = await crud.get_user(db, mechanic_id) if mechanic_id else None
    if not user or user.role != UserRole.MECHANIC.value:
        raise OperationFailed("mechanic not found", "MECHANIC_NOT_FOUND")
    return user


async def require_assessment(db: AsyncSession, assessment_id: str) -> Assessment:
    assessment = await crud.get_assessment(db, assessment_id)
    if not assessment:
        raise OperationFailed("assessment not found", "ASSESSMENT_NOT_FOUND")
    return assessment


async def require_work_order(db: AsyncSession, order_id: str) -> WorkOrder:
    order = await crud.get_work_order(db, order_id)
    if not order:
        raise OperationFailed("work order not found", "OT_NOT_FOUND")
    return order
