"""Auth API: register, login, logout, current user."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from repairshop.api.common import respond
from repairshop.db import crud
from repairshop.db.engine import get_db
from repairshop.dependencies import require_auth
from repairshop.schemas import LoginRequest, RegisterRequest, UserRead
from repairshop.services import accounts
from repairshop.services.auth import (
    AuthContext, SESSION_COOKIE_NAME, SESSION_MAX_AGE_DAYS, token_from_request,
)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", status_code=201)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Self-registration is limited to client accounts."""
    result = await accounts.register(
        db, national_id=body.national_id, full_name=body.full_name, email=body.email,
        password=body.password, phone=body.phone, address=body.address,
    )
    return respond(result, UserRead, status_code=201)


@router.post("/login")
async def login(body: LoginRequest, request: Request, db: AsyncSession = Depends(get_db)):
    ip = request.client.host if request.client else ""
    result = await accounts.login(db, body.email, body.password, ip_address=ip)
    if not result.success:
        return respond(result, failure_status=401 if result.error == "INVALID_CREDENTIALS" else None)

    response = respond(result, {"user": UserRead})
    response.set_cookie(
        SESSION_COOKIE_NAME, result.data["token"],
        httponly=True, samesite="lax",
        max_age=86400 * SESSION_MAX_AGE_DAYS,
    )
    return response


@router.post("/logout")
async def logout(
    request: Request,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    result = await accounts.logout(db, token_from_request(request))
    response = respond(result)
    response.delete_cookie(SESSION_COOKIE_NAME)
    return response


@router.get("/me")
async def get_me(auth: AuthContext = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    user = await crud.get_user(db, auth.user_id)
    return UserRead.model_validate(user).model_dump(mode="json")


@router.get("/email-exists")
async def email_exists(email: str, db: AsyncSession = Depends(get_db)):
    return {"exists": await accounts.email_exists(db, email)}
