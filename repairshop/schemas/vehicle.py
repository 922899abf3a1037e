from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel


class VehicleCreate(BaseModel):
    plate: str
    make: str
    model: str
    year: int
    color: str = ""
    # Required when a workshop owner registers the vehicle for a client
    client_id: str | None = None


class VehicleRead(BaseModel):
    id: str
    plate: str
    make: str
    model: str
    year: int
    color: str = ""
    client_id: str
    created_at: datetime

    model_config = {"from_attributes": True}
