"""Account service: registration, login, and per-role user management."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from repairshop.config import get_settings
from repairshop.db import crud
from repairshop.models import User, UserSession, Vehicle, Workshop
from repairshop.models.enums import UserRole
from repairshop.services.auth import (
    create_session, hash_password, remove_session, verify_password,
)
from repairshop.services.result import OperationFailed, ServiceResult, service_operation

logger = logging.getLogger(__name__)

_settings = get_settings()


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _check_password(password: str) -> None:
    minimum = _settings.accounts.min_password_length
    if not password or len(password) < minimum:
        raise OperationFailed(
            f"password must be at least {minimum} characters", "WEAK_PASSWORD",
        )


async def _ensure_email_free(db: AsyncSession, email: str) -> None:
    if await crud.get_user_by_email(db, email) or await crud.get_workshop_by_email(db, email):
        raise OperationFailed(
            "a workshop or user with that email already exists", "DUPLICATE_EMAIL",
        )


async def _stage_user(
    db: AsyncSession,
    *,
    national_id: str,
    full_name: str,
    email: str,
    password: str,
    role: str,
    workshop_id: str | None = None,
    phone: str = "",
    address: str = "",
    specialty: str = "",
) -> User:
    """Validate and add (without committing) a new user."""
    email = _normalize_email(email)
    if not all((national_id, full_name, email, password)):
        raise OperationFailed("missing required fields", "MISSING_FIELDS")
    if role not in {r.value for r in UserRole}:
        raise OperationFailed(f"invalid role: {role}", "INVALID_ROLE")
    _check_password(password)
    await _ensure_email_free(db, email)

    user = User(
        national_id=national_id,
        full_name=full_name,
        email=email,
        password_hash=hash_password(password),
        role=role,
        workshop_id=workshop_id,
        workshop_ids=[],
        phone=phone or "",
        address=address or "",
        specialty=specialty or "",
    )
    db.add(user)
    return user


async def _require_user(db: AsyncSession, user_id: str, role: UserRole, error: str) -> User:
    user = await crud.get_user(db, user_id)
    if not user or user.role != role.value:
        raise OperationFailed(f"{role.value.replace('_', ' ')} not found", error)
    return user


async def _delete_user(db: AsyncSession, user: User) -> None:
    await db.execute(delete(UserSession).where(UserSession.user_id == user.id))
    await db.delete(user)
    await db.commit()


# ── Registration / login ──────────────────────────────────

@service_operation("error registering user")
async def register(
    db: AsyncSession,
    national_id: str,
    full_name: str,
    email: str,
    password: str,
    role: str = UserRole.CLIENT.value,
    workshop_id: str | None = None,
    phone: str = "",
    address: str = "",
    specialty: str = "",
) -> ServiceResult:
    user = await _stage_user(
        db, national_id=national_id, full_name=full_name, email=email, password=password,
        role=role, workshop_id=workshop_id, phone=phone, address=address, specialty=specialty,
    )
    await db.commit()
    await db.refresh(user)
    logger.info("User %s registered with role %s", user.id, user.role)
    return ServiceResult.ok("User registered", user)


@service_operation("error logging in")
async def login(db: AsyncSession, email: str, password: str, ip_address: str = "") -> ServiceResult:
    """Verify credentials and open a session. Data is ``{"token": ..., "user": ...}``."""
    user = await crud.get_user_by_email(db, _normalize_email(email))
    if not user or not user.is_active or not verify_password(password or "", user.password_hash):
        raise OperationFailed("invalid credentials", "INVALID_CREDENTIALS")

    token = await create_session(user, db, ip_address=ip_address)
    user.last_login_at = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(user)
    return ServiceResult.ok("Login successful", {"token": token, "user": user})


@service_operation("error logging out")
async def logout(db: AsyncSession, token: str) -> ServiceResult:
    await remove_session(token, db)
    return ServiceResult.ok("Logged out")


async def email_exists(db: AsyncSession, email: str) -> bool:
    return await crud.get_user_by_email(db, _normalize_email(email)) is not None


@service_operation("error fetching users")
async def list_users(
    db: AsyncSession, role: str | None = None, workshop_id: str | None = None,
) -> ServiceResult:
    return ServiceResult.ok("Users fetched", await crud.list_users(db, role=role, workshop_id=workshop_id))


# ── Workshop owners ───────────────────────────────────────

@service_operation("server error")
async def create_workshop_with_owner(
    db: AsyncSession,
    name: str,
    owner_national_id: str,
    owner_name: str,
    email: str,
    password: str,
    phone: str = "",
    address: str = "",
) -> ServiceResult:
    """Register a workshop together with its owner account.

    The new workshop id is appended to the site admin's workshop list.
    Data is ``{"workshop": ..., "user": ...}``.
    """
    if not all((name, owner_national_id, owner_name, email, password)):
        raise OperationFailed("missing required fields", "MISSING_FIELDS")

    workshop = Workshop(
        name=name,
        owner_national_id=owner_national_id,
        owner_name=owner_name,
        email=_normalize_email(email),
        phone=phone or "",
        address=address or "",
    )
    user = await _stage_user(
        db, national_id=owner_national_id, full_name=owner_name, email=email,
        password=password, role=UserRole.WORKSHOP_OWNER.value,
        phone=phone, address=address,
    )
    db.add(workshop)
    await db.flush()
    user.workshop_id = workshop.id
    workshop.owner_id = user.id

    web_owner = await crud.get_web_owner(db)
    if web_owner:
        web_owner.workshop_ids = [*(web_owner.workshop_ids or []), workshop.id]

    await db.commit()
    await db.refresh(workshop)
    await db.refresh(user)
    logger.info("Workshop %s created with owner %s", workshop.name, user.full_name)
    return ServiceResult.ok(
        "Workshop and owner created", {"workshop": workshop, "user": user},
    )


# ── Mechanics ─────────────────────────────────────────────

@service_operation("error creating mechanic")
async def create_mechanic(
    db: AsyncSession,
    workshop_id: str,
    national_id: str,
    full_name: str,
    email: str,
    password: str,
    phone: str = "",
    specialty: str = "",
) -> ServiceResult:
    if not await crud.get_workshop(db, workshop_id):
        raise OperationFailed("workshop not found", "WORKSHOP_NOT_FOUND")
    user = await _stage_user(
        db, national_id=national_id, full_name=full_name, email=email, password=password,
        role=UserRole.MECHANIC.value, workshop_id=workshop_id, phone=phone, specialty=specialty,
    )
    await db.commit()
    await db.refresh(user)
    logger.info("Mechanic %s added to workshop %s", user.id, workshop_id)
    return ServiceResult.ok("Mechanic created", user)


@service_operation("error fetching mechanics")
async def list_mechanics(db: AsyncSession, workshop_id: str) -> ServiceResult:
    mechanics = await crud.list_users(db, role=UserRole.MECHANIC.value, workshop_id=workshop_id)
    return ServiceResult.ok("Mechanics fetched", mechanics)


@service_operation("error deleting mechanic")
async def delete_mechanic(db: AsyncSession, mechanic_id: str) -> ServiceResult:
    user = await _require_user(db, mechanic_id, UserRole.MECHANIC, "MECHANIC_NOT_FOUND")
    if await crud.count_references(db, "mechanic_id", mechanic_id):
        raise OperationFailed("the mechanic has assessments, orders or invoices", "MECHANIC_HAS_RECORDS")
    await _delete_user(db, user)
    logger.info("Mechanic %s deleted", mechanic_id)
    return ServiceResult.ok("Mechanic deleted")


# ── Clients ───────────────────────────────────────────────

@service_operation("error creating client")
async def create_client(
    db: AsyncSession,
    national_id: str,
    full_name: str,
    email: str,
    password: str,
    phone: str = "",
    address: str = "",
    vehicle: dict | None = None,
) -> ServiceResult:
    """Create a client account, optionally registering their first vehicle.

    Data is ``{"user": ..., "vehicle": ... | None}``.
    """
    user = await _stage_user(
        db, national_id=national_id, full_name=full_name, email=email, password=password,
        role=UserRole.CLIENT.value, phone=phone, address=address,
    )
    await db.flush()

    record = None
    if vehicle:
        plate = (vehicle.get("plate") or "").strip().upper()
        if not plate or not vehicle.get("make") or not vehicle.get("model"):
            raise OperationFailed("vehicle plate, make and model are required", "MISSING_FIELDS")
        if await crud.get_vehicle_by_plate(db, plate):
            raise OperationFailed("a vehicle with that plate already exists", "DUPLICATE_PLATE")
        record = Vehicle(
            plate=plate,
            make=vehicle["make"],
            model=vehicle["model"],
            year=int(vehicle.get("year") or 0),
            color=vehicle.get("color") or "",
            client_id=user.id,
        )
        db.add(record)

    await db.commit()
    await db.refresh(user)
    if record is not None:
        await db.refresh(record)
    message = "Client and vehicle created" if record is not None else "Client created"
    return ServiceResult.ok(message, {"user": user, "vehicle": record})


@service_operation("error fetching clients")
async def list_clients(db: AsyncSession) -> ServiceResult:
    return ServiceResult.ok("Clients fetched", await crud.list_users(db, role=UserRole.CLIENT.value))


@service_operation("error deleting client")
async def delete_client(db: AsyncSession, client_id: str) -> ServiceResult:
    user = await _require_user(db, client_id, UserRole.CLIENT, "CLIENT_NOT_FOUND")
    if await crud.list_vehicles(db, client_id=client_id):
        raise OperationFailed("delete the client's vehicles first", "CLIENT_HAS_VEHICLES")
    await _delete_user(db, user)
    logger.info("Client %s deleted", client_id)
    return ServiceResult.ok("Client deleted")
