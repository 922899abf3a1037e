"""Shared helpers turning a ServiceResult into a JSON response."""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from repairshop.db import crud
from repairshop.services.auth import AuthContext
from repairshop.services.result import ServiceResult


def status_for(error: str | None) -> int:
    """HTTP status for a failed result's error code."""
    code = error or ""
    if code.endswith("_NOT_FOUND"):
        return 404
    if code == "SERVER_ERROR":
        return 500
    if code == "CONFLICT" or code.startswith(("DUPLICATE_", "ALREADY_")) or "_ALREADY_" in code:
        return 409
    return 400


def dump(value: Any, schema: type[BaseModel] | dict[str, type[BaseModel]] | None = None) -> Any:
    """Serialize service data through a read schema (or a key -> schema mapping)."""
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return [dump(v, schema) for v in value]
    if isinstance(schema, dict) and isinstance(value, dict):
        return {k: dump(v, schema.get(k)) for k, v in value.items()}
    if isinstance(schema, type) and issubclass(schema, BaseModel):
        return schema.model_validate(value).model_dump(mode="json")
    return jsonable_encoder(value)


def respond(
    result: ServiceResult,
    schema: type[BaseModel] | dict[str, type[BaseModel]] | None = None,
    status_code: int = 200,
    failure_status: int | None = None,
) -> JSONResponse:
    if result.success:
        code = status_code
    else:
        code = failure_status or status_for(result.error)
    # Failures may carry the already existing record, same shape as success data
    content = {"success": result.success, "message": result.message, "data": dump(result.data, schema)}
    if result.error:
        content["error"] = result.error
    return JSONResponse(status_code=code, content=content)


def ensure_workshop_access(auth: AuthContext, workshop_id: str | None) -> None:
    """Workshop-scoped users may only touch their own workshop's records."""
    if auth.role == "web_owner":
        return
    if auth.workshop_id is None or auth.workshop_id != workshop_id:
        raise HTTPException(403, "Not allowed for this workshop")


def staff_workshop(auth: AuthContext) -> str | None:
    """Workshop that limits what a mechanic or owner sees; None for clients and the site admin."""
    if auth.role in ("mechanic", "workshop_owner"):
        return auth.workshop_id or ""
    return None


async def ensure_record_access(db: AsyncSession, auth: AuthContext, record) -> None:
    """Clients see records about their own vehicles; staff see their workshop's records.

    A missing record passes through so the service reports it as not found.
    """
    if record is None or auth.role == "web_owner":
        return
    if auth.role == "client":
        client_id = getattr(record, "client_id", None)
        if client_id is None:
            vehicle = await crud.get_vehicle(db, record.vehicle_id)
            client_id = vehicle.client_id if vehicle else None
        if client_id != auth.user_id:
            raise HTTPException(403, "Not allowed for this record")
        return
    if hasattr(record, "workshop_id"):
        ensure_workshop_access(auth, record.workshop_id)
