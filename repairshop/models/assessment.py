"""Assessment (valoracion): a mechanic's diagnosis with proposed tasks.

Tasks are embedded as a JSON list of dicts and always replaced as a whole
list, never mutated in place, so that the ORM sees the change.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import String, Float, Integer, ForeignKey, JSON, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column

from repairshop.models.base import Base, ULIDMixin, utcnow


class Assessment(Base, ULIDMixin):
    __tablename__ = "valoraciones"

    vehicle_id: Mapped[str] = mapped_column(String(26), ForeignKey("vehicles.id"), index=True)
    mechanic_id: Mapped[str | None] = mapped_column(
        String(26), ForeignKey("users.id"), nullable=True, default=None, index=True,
    )
    owner_id: Mapped[str] = mapped_column(String(26))
    workshop_id: Mapped[str] = mapped_column(String(26), index=True)
    assigned_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    status: Mapped[str] = mapped_column(String(20), default="pending")
    client_status: Mapped[str] = mapped_column(String(30), default="pending_review")
    tasks: Mapped[list] = mapped_column(JSON, default=list)
    diagnosis: Mapped[str] = mapped_column(Text, default="")
    problems_found: Mapped[list] = mapped_column(JSON, default=list)
    parts_needed: Mapped[list] = mapped_column(JSON, default=list)  # [{name, quantity, price}]
    estimated_hours: Mapped[float | None] = mapped_column(Float, nullable=True, default=None)
    estimated_cost: Mapped[float | None] = mapped_column(Float, nullable=True, default=None)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, default=None)
    client_reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, default=None)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Concurrent read-modify-write on one assessment fails instead of losing an update
    __mapper_args__ = {"version_id_col": version}

    def find_task(self, task_id: str) -> dict | None:
        for task in self.tasks or []:
            if task.get("id") == task_id:
                return task
        return None
