"""SQLAlchemy ORM models, one table per store collection."""

from repairshop.models.base import Base
from repairshop.models.user import User, UserSession
from repairshop.models.workshop import Workshop
from repairshop.models.vehicle import Vehicle
from repairshop.models.assessment import Assessment
from repairshop.models.quotation import Quotation
from repairshop.models.work_order import WorkOrder
from repairshop.models.invoice import Invoice

__all__ = [
    "Base", "User", "UserSession", "Workshop", "Vehicle",
    "Assessment", "Quotation", "WorkOrder", "Invoice",
]
