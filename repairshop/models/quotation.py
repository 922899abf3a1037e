from __future__ import annotations

from datetime import datetime

from sqlalchemy import String, Float, ForeignKey, JSON, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from repairshop.models.base import Base, ULIDMixin


class Quotation(Base, ULIDMixin):
    __tablename__ = "cotizaciones"

    vehicle_id: Mapped[str] = mapped_column(String(26), ForeignKey("vehicles.id"))
    client_id: Mapped[str] = mapped_column(String(26), ForeignKey("users.id"), index=True)
    assessment_id: Mapped[str] = mapped_column(String(26), ForeignKey("valoraciones.id"))
    owner_id: Mapped[str] = mapped_column(String(26))
    workshop_id: Mapped[str] = mapped_column(String(26), index=True)
    status: Mapped[str] = mapped_column(String(30), default="pending_client_approval")
    items: Mapped[list] = mapped_column(JSON, default=list)  # [{id, name, description, mandatory, price}]
    parts: Mapped[list] = mapped_column(JSON, default=list)  # [{id, name, quantity, unit_price}]
    selected_optional_ids: Mapped[list] = mapped_column(JSON, default=list)
    estimated_total: Mapped[float] = mapped_column(Float, default=0.0)
    responded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, default=None)
