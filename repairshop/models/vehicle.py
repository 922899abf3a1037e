from __future__ import annotations

from sqlalchemy import String, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from repairshop.models.base import Base, ULIDMixin


class Vehicle(Base, ULIDMixin):
    __tablename__ = "vehicles"

    plate: Mapped[str] = mapped_column(String(20), unique=True, index=True)
    make: Mapped[str] = mapped_column(String(100))
    model: Mapped[str] = mapped_column(String(100))
    year: Mapped[int] = mapped_column(Integer)
    color: Mapped[str] = mapped_column(String(50), default="")
    client_id: Mapped[str] = mapped_column(String(26), ForeignKey("users.id"), index=True)

    def describe(self) -> str:
        return f"{self.make} {self.model} - {self.plate}"
