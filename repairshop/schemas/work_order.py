from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel


class OrderTask(BaseModel):
    id: str
    name: str
    description: str = ""
    estimated_price: float = 0.0
    completed: bool = False
    completed_at: datetime | None = None


class PartUsed(BaseModel):
    name: str
    quantity: float = 1
    price: float = 0.0


class WorkOrderCreate(BaseModel):
    vehicle_id: str
    description: str = ""
    priority: str = "medium"
    mechanic_id: str | None = None
    workshop_id: str | None = None


class WorkOrderFromAssessment(BaseModel):
    assessment_id: str
    mechanic_id: str
    priority: str = "medium"
    observations: str = ""


class MechanicAssignment(BaseModel):
    mechanic_id: str
    priority: str = "medium"
    observations: str = ""


class WorkOrderUpdate(BaseModel):
    status: str | None = None
    priority: str | None = None
    work_performed: list[str] | None = None
    parts_used: list[PartUsed] | None = None
    hours_worked: float | None = None
    labour_cost: float | None = None
    parts_cost: float | None = None
    observations: str | None = None


class WorkOrderRead(BaseModel):
    id: str
    number: str
    vehicle_id: str
    mechanic_id: str | None = None
    mechanic_assigned: bool
    owner_id: str
    workshop_id: str
    assessment_id: str | None = None
    quotation_id: str | None = None
    approved_tasks: list[OrderTask] = []
    status: str
    priority: str
    description: str = ""
    work_performed: list[str] = []
    parts_used: list[PartUsed] = []
    hours_worked: float = 0.0
    labour_cost: float = 0.0
    parts_cost: float = 0.0
    total_cost: float = 0.0
    observations: str = ""
    assigned_at: datetime | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    created_at: datetime

    model_config = {"from_attributes": True}
