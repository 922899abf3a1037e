from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel


class InvoiceCreate(BaseModel):
    work_order_id: str
    payment_method: str | None = None
    observations: str | None = None


class InvoiceLine(BaseModel):
    description: str
    quantity: float
    unit_price: float
    total: float


class InvoiceRead(BaseModel):
    id: str
    number: str
    work_order_id: str
    work_order_number: str
    mechanic_id: str
    mechanic_name: str
    client_id: str
    client_name: str
    client_national_id: str = ""
    client_email: str = ""
    client_phone: str = ""
    vehicle_id: str
    vehicle_info: str
    workshop_id: str
    workshop_name: str
    workshop_address: str = ""
    workshop_phone: str = ""
    workshop_email: str = ""
    lines: list[InvoiceLine] = []
    subtotal: float
    tax: float
    total: float
    payment_method: str
    observations: str = ""
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}
