"""Daily log model - one productivity record per operator per day."""

from datetime import date

from sqlalchemy import Boolean, Date, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from productivity.models.base import BaseModel
from productivity.models.user import User


class DailyLog(BaseModel):
    """Attendance and item counts for one user on one calendar day."""

    __tablename__ = "daily_logs"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    log_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    is_present: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    binning_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    picking_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_items: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    user: Mapped[User] = relationship(lazy="joined")

    __table_args__ = (UniqueConstraint("user_id", "log_date", name="uq_daily_logs_user_date"),)

    def __repr__(self) -> str:
        return f"<DailyLog user={self.user_id} date={self.log_date}>"
