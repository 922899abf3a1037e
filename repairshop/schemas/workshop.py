from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel


class WorkshopRead(BaseModel):
    id: str
    name: str
    owner_national_id: str
    owner_name: str
    email: str
    phone: str = ""
    address: str = ""
    owner_id: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class WorkshopWithOwnerCreate(BaseModel):
    name: str = ""
    owner_national_id: str = ""
    owner_name: str = ""
    email: str = ""
    password: str = ""
    phone: str = ""
    address: str = ""


class WorkshopUpdate(BaseModel):
    name: str | None = None
    owner_national_id: str | None = None
    owner_name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
