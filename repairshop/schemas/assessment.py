from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel


class TaskCreate(BaseModel):
    name: str
    description: str = ""
    estimated_price: float = 0.0
    mandatory: bool = False


class TaskRead(BaseModel):
    id: str
    name: str
    description: str = ""
    estimated_price: float = 0.0
    mandatory: bool = False
    status: str  # proposed | accepted | rejected
    responded_at: datetime | None = None
    created_at: datetime | None = None


class TaskResponse(BaseModel):
    accepted: bool


class PartNeeded(BaseModel):
    name: str
    quantity: float = 1
    price: float = 0.0


class AssessmentCreate(BaseModel):
    vehicle_id: str
    mechanic_id: str | None = None
    # Site admin only; workshop owners always create in their own workshop
    workshop_id: str | None = None


class AssessmentUpdate(BaseModel):
    status: str | None = None
    diagnosis: str | None = None
    problems_found: list[str] | None = None
    parts_needed: list[PartNeeded] | None = None
    estimated_hours: float | None = None
    estimated_cost: float | None = None


class AssessmentClaim(BaseModel):
    mechanic_id: str | None = None


class AssessmentRead(BaseModel):
    id: str
    vehicle_id: str
    mechanic_id: str | None = None
    owner_id: str
    workshop_id: str
    assigned_at: datetime
    status: str
    client_status: str
    tasks: list[TaskRead] = []
    diagnosis: str = ""
    problems_found: list[str] = []
    parts_needed: list[PartNeeded] = []
    estimated_hours: float | None = None
    estimated_cost: float | None = None
    completed_at: datetime | None = None
    client_reviewed_at: datetime | None = None
    version: int
    created_at: datetime

    model_config = {"from_attributes": True}
