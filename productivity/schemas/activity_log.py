"""Pydantic schemas for activity logs."""

from datetime import datetime
from typing import Any

from productivity.schemas.common import ApiModel
from productivity.schemas.user import UserSummary


class ActivityLogResponse(ApiModel):
    id: int
    user_id: int
    activity_time: datetime
    data_type: str
    status: str
    change_history: dict[str, Any] | None = None
    user: UserSummary | None = None
