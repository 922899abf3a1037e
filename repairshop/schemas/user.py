from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel


class UserRead(BaseModel):
    id: str
    national_id: str
    full_name: str
    email: str
    role: str
    workshop_id: str | None = None
    workshop_ids: list[str] = []
    phone: str = ""
    address: str = ""
    specialty: str = ""
    is_active: bool = True
    created_at: datetime

    model_config = {"from_attributes": True}


class RegisterRequest(BaseModel):
    national_id: str
    full_name: str
    email: str
    password: str
    role: str = "client"
    workshop_id: str | None = None
    phone: str = ""
    address: str = ""
    specialty: str = ""


class LoginRequest(BaseModel):
    email: str
    password: str


class MechanicCreate(BaseModel):
    national_id: str
    full_name: str
    email: str
    password: str
    phone: str = ""
    specialty: str = ""
    # Defaults to the caller's workshop for workshop owners
    workshop_id: str | None = None


class ClientVehicle(BaseModel):
    plate: str
    make: str
    model: str
    year: int
    color: str = ""


class ClientCreate(BaseModel):
    national_id: str
    full_name: str
    email: str
    password: str
    phone: str = ""
    address: str = ""
    vehicle: ClientVehicle | None = None
