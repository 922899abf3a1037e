"""Pydantic request/response schemas."""

from repairshop.schemas.user import (
    UserRead, RegisterRequest, LoginRequest, MechanicCreate, ClientCreate, ClientVehicle,
)
from repairshop.schemas.workshop import WorkshopRead, WorkshopWithOwnerCreate, WorkshopUpdate
from repairshop.schemas.vehicle import VehicleCreate, VehicleRead
from repairshop.schemas.assessment import (
    AssessmentCreate, AssessmentRead, AssessmentUpdate, AssessmentClaim,
    TaskCreate, TaskRead, TaskResponse,
)
from repairshop.schemas.quotation import QuotationCreate, QuotationRead, QuotationResponse
from repairshop.schemas.work_order import (
    WorkOrderCreate, WorkOrderRead, WorkOrderUpdate, WorkOrderFromAssessment, MechanicAssignment,
)
from repairshop.schemas.invoice import InvoiceCreate, InvoiceRead

__all__ = [
    "UserRead", "RegisterRequest", "LoginRequest", "MechanicCreate", "ClientCreate", "ClientVehicle",
    "WorkshopRead", "WorkshopWithOwnerCreate", "WorkshopUpdate",
    "VehicleCreate", "VehicleRead",
    "AssessmentCreate", "AssessmentRead", "AssessmentUpdate", "AssessmentClaim",
    "TaskCreate", "TaskRead", "TaskResponse",
    "QuotationCreate", "QuotationRead", "QuotationResponse",
    "WorkOrderCreate", "WorkOrderRead", "WorkOrderUpdate", "WorkOrderFromAssessment", "MechanicAssignment",
    "InvoiceCreate", "InvoiceRead",
]
