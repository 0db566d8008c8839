"""Pydantic schemas for performance metrics and report requests."""

from datetime import date, datetime
from typing import Literal

from pydantic import EmailStr, Field, model_validator

from productivity.schemas.common import ApiModel


class PeriodMetrics(ApiModel):
    period: date
    total_items: int
    average_items_per_operator: float
    binning_percentage: float
    picking_percentage: float
    attendance_rate: float
    active_operators: int


class OperatorPeriodPerformance(ApiModel):
    user_id: int
    username: str
    full_name: str
    total_items: int
    average_items_per_day: float
    attendance_rate: float


class TeamPeriodMetrics(PeriodMetrics):
    target_achievement: float | None = None
    operator_performance: list[OperatorPeriodPerformance]


class DailyBreakdown(ApiModel):
    day: date = Field(..., alias="date")
    total_items: int
    binning_count: int
    picking_count: int
    is_present: bool


class OperatorPerformance(ApiModel):
    """Performance of one operator over a date range."""

    total_items: int
    average_items_per_day: float
    binning_percentage: float
    picking_percentage: float
    attendance_rate: float
    target_achievement: float | None = Field(
        None, description="Percent of the current daily target; null when no target is set"
    )
    daily_breakdown: list[DailyBreakdown]


class ReportRequestCreate(ApiModel):
    """Request a report export. Only the request is recorded."""

    start_date: date
    end_date: date
    report_type: Literal["daily", "weekly", "monthly"]
    export_format: Literal["excel", "pdf"]
    email_to: EmailStr | None = None

    @model_validator(mode="after")
    def _check_range(self) -> "ReportRequestCreate":
        if self.start_date > self.end_date:
            raise ValueError("startDate must be before or equal to endDate")
        return self


class ReportRequestResponse(ApiModel):
    id: int
    user_id: int
    start_date: date
    end_date: date
    report_type: str
    export_format: str
    email_to: str | None = None
    status: str
    created_at: datetime
