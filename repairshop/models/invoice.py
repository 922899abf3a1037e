"""Invoice (factura): snapshot of a completed work order for billing."""

from __future__ import annotations

from sqlalchemy import String, Float, ForeignKey, JSON, Text
from sqlalchemy.orm import Mapped, mapped_column

from repairshop.models.base import Base, ULIDMixin


class Invoice(Base, ULIDMixin):
    __tablename__ = "facturas"

    number: Mapped[str] = mapped_column(String(20), index=True)  # FACT-YYMM-NNNNN
    work_order_id: Mapped[str] = mapped_column(String(26), ForeignKey("ordenesTrabajo.id"), unique=True)
    work_order_number: Mapped[str] = mapped_column(String(20))
    mechanic_id: Mapped[str] = mapped_column(String(26), index=True)
    mechanic_name: Mapped[str] = mapped_column(String(255))
    client_id: Mapped[str] = mapped_column(String(26), index=True)
    client_name: Mapped[str] = mapped_column(String(255))
    client_national_id: Mapped[str] = mapped_column(String(50), default="")
    client_email: Mapped[str] = mapped_column(String(255), default="")
    client_phone: Mapped[str] = mapped_column(String(50), default="")
    vehicle_id: Mapped[str] = mapped_column(String(26))
    vehicle_info: Mapped[str] = mapped_column(String(255))
    workshop_id: Mapped[str] = mapped_column(String(26), index=True)
    workshop_name: Mapped[str] = mapped_column(String(255))
    workshop_address: Mapped[str] = mapped_column(String(500), default="")
    workshop_phone: Mapped[str] = mapped_column(String(50), default="")
    workshop_email: Mapped[str] = mapped_column(String(255), default="")
    lines: Mapped[list] = mapped_column(JSON, default=list)  # [{description, quantity, unit_price, total}]
    subtotal: Mapped[float] = mapped_column(Float, default=0.0)
    tax: Mapped[float] = mapped_column(Float, default=0.0)
    total: Mapped[float] = mapped_column(Float, default=0.0)
    payment_method: Mapped[str] = mapped_column(String(30), default="cash")
    observations: Mapped[str] = mapped_column(Text, default="")
    status: Mapped[str] = mapped_column(String(10), default="issued")  # issued | paid | void
