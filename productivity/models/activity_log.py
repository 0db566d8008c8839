"""ActivityLog model - audit trail of data changes."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Index, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from productivity.models.base import BaseModel
from productivity.models.user import User

DATA_TYPES = ("binning", "picking", "attendance", "daily_log")
STATUSES = ("success", "failure")

DataType = Enum(*DATA_TYPES, name="activity_data_type", create_constraint=True)
ActivityStatus = Enum(*STATUSES, name="activity_status", create_constraint=True)


class ActivityLog(BaseModel):
    """Record of a change made by a user, with the change payload."""

    __tablename__ = "activity_logs"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    activity_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    data_type: Mapped[str] = mapped_column(DataType, nullable=False, index=True)
    status: Mapped[str] = mapped_column(ActivityStatus, nullable=False, default="success")
    change_history: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    user: Mapped[User] = relationship(lazy="joined")

    __table_args__ = (
        Index("ix_activity_logs_user_time", "user_id", "activity_time"),
        Index("ix_activity_logs_type_time", "data_type", "activity_time"),
    )

    def __repr__(self) -> str:
        return f"<ActivityLog {self.data_type} {self.status} user={self.user_id}>"
