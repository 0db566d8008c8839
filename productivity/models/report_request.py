"""ReportRequest model - bookkeeping for requested exports."""

from datetime import date

from sqlalchemy import Date, Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from productivity.models.base import BaseModel
from productivity.models.user import User

REPORT_TYPES = ("daily", "weekly", "monthly")
EXPORT_FORMATS = ("excel", "pdf")
REPORT_STATUSES = ("pending", "processing", "completed", "failed")


class ReportRequest(BaseModel):
    """A requested report. Generation happens outside this service."""

    __tablename__ = "report_requests"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    report_type: Mapped[str] = mapped_column(
        Enum(*REPORT_TYPES, name="report_type", create_constraint=True), nullable=False
    )
    export_format: Mapped[str] = mapped_column(
        Enum(*EXPORT_FORMATS, name="export_format", create_constraint=True), nullable=False
    )
    email_to: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(
        Enum(*REPORT_STATUSES, name="report_status", create_constraint=True),
        nullable=False,
        default="pending",
    )

    user: Mapped[User] = relationship(lazy="joined")

    def __repr__(self) -> str:
        return f"<ReportRequest {self.id} {self.status}>"
