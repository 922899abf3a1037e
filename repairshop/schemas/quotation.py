from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel


class QuotationItem(BaseModel):
    id: str | None = None
    name: str
    description: str = ""
    mandatory: bool = False
    price: float = 0.0


class QuotationPart(BaseModel):
    id: str | None = None
    name: str
    quantity: float = 1
    unit_price: float = 0.0


class QuotationCreate(BaseModel):
    assessment_id: str
    items: list[QuotationItem] = []
    parts: list[QuotationPart] = []


class QuotationResponse(BaseModel):
    accepted: bool
    selected_optional_ids: list[str] = []


class QuotationRead(BaseModel):
    id: str
    vehicle_id: str
    client_id: str
    assessment_id: str
    owner_id: str
    workshop_id: str
    status: str
    items: list[QuotationItem] = []
    parts: list[QuotationPart] = []
    selected_optional_ids: list[str] = []
    estimated_total: float = 0.0
    responded_at: datetime | None = None
    created_at: datetime

    model_config = {"from_attributes": True}
