"""Target model - daily item target for operators."""

from datetime import date

from sqlalchemy import Date, Integer
from sqlalchemy.orm import Mapped, mapped_column

from productivity.models.base import BaseModel


class Target(BaseModel):
    """Daily item target, effective from a date until ``effective_to`` (exclusive)."""

    __tablename__ = "targets"

    daily_target: Mapped[int] = mapped_column(Integer, nullable=False)
    effective_from: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    effective_to: Mapped[date | None] = mapped_column(Date, nullable=True)

    def __repr__(self) -> str:
        return f"<Target {self.daily_target} from {self.effective_from}>"
