"""Pydantic schemas for daily logs."""

from datetime import date

from pydantic import Field

from productivity.schemas.common import ApiModel
from productivity.schemas.user import UserSummary


class DailyLogUpsert(ApiModel):
    """Create or update the caller's log for one day."""

    log_date: date
    is_present: bool
    binning_count: int | None = Field(None, ge=0)
    picking_count: int | None = Field(None, ge=0)


class DailyLogResponse(ApiModel):
    id: int
    user_id: int
    log_date: date
    is_present: bool
    binning_count: int
    picking_count: int
    total_items: int
    user: UserSummary | None = None


class DailyLogStatsResponse(ApiModel):
    """Totals and attendance for one user over a date range."""

    total_binning: int
    total_picking: int
    total_items: int
    average_items_per_day: float
    present_days: int
    total_days: int
    attendance_rate: float
