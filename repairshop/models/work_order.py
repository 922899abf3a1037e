"""Work order (orden de trabajo): the job built from approved tasks."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import String, Float, Boolean, ForeignKey, JSON, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column

from repairshop.models.base import Base, ULIDMixin


class WorkOrder(Base, ULIDMixin):
    __tablename__ = "ordenesTrabajo"

    number: Mapped[str] = mapped_column(String(20), index=True)  # OT-YYMM-NNNN
    vehicle_id: Mapped[str] = mapped_column(String(26), ForeignKey("vehicles.id"), index=True)
    mechanic_id: Mapped[str | None] = mapped_column(
        String(26), ForeignKey("users.id"), nullable=True, default=None, index=True,
    )
    mechanic_assigned: Mapped[bool] = mapped_column(Boolean, default=False)
    owner_id: Mapped[str] = mapped_column(String(26))
    workshop_id: Mapped[str] = mapped_column(String(26), index=True)
    # At most one order per assessment
    assessment_id: Mapped[str | None] = mapped_column(String(26), unique=True, nullable=True, default=None)
    quotation_id: Mapped[str | None] = mapped_column(String(26), unique=True, nullable=True, default=None)
    approved_tasks: Mapped[list] = mapped_column(JSON, default=list)
    status: Mapped[str] = mapped_column(String(20), default="pending_assignment")
    priority: Mapped[str] = mapped_column(String(10), default="medium")  # low | medium | high | urgent
    description: Mapped[str] = mapped_column(Text, default="")
    work_performed: Mapped[list] = mapped_column(JSON, default=list)
    parts_used: Mapped[list] = mapped_column(JSON, default=list)  # [{name, quantity, price}]
    hours_worked: Mapped[float] = mapped_column(Float, default=0.0)
    labour_cost: Mapped[float] = mapped_column(Float, default=0.0)
    parts_cost: Mapped[float] = mapped_column(Float, default=0.0)
    total_cost: Mapped[float] = mapped_column(Float, default=0.0)
    observations: Mapped[str] = mapped_column(Text, default="")
    assigned_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, default=None)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, default=None)
    finished_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, default=None)
