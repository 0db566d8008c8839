"""Activity log API endpoints (admin only)."""

from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from productivity.api.deps import require_roles
from productivity.core import get_db
from productivity.middleware.auth import CurrentUser
from productivity.models import RoleName
from productivity.schemas.activity_log import ActivityLogResponse
from productivity.schemas.common import ApiResponse, Page
from productivity.services.activity_log import ActivityLogService
from productivity.services.daily_log import validate_date_range

router = APIRouter(prefix="/activity-logs", tags=["activity-logs"])


@router.get("", response_model=ApiResponse[Page[ActivityLogResponse]])
async def list_activity_logs(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    data_type: Literal["binning", "picking", "attendance", "daily_log"] | None = Query(
        None, alias="dataType"
    ),
    status: Literal["success", "failure"] | None = Query(None),
    user_id: int | None = Query(None, alias="userId"),
    db: AsyncSession = Depends(get_db),
    _: CurrentUser = Depends(require_roles(RoleName.ADMIN)),
) -> ApiResponse[Page[ActivityLogResponse]]:
    """List activity logs, newest first."""
    validate_date_range(start_date, end_date)
    logs, total = await ActivityLogService(db).list_logs(
        page=page,
        limit=limit,
        start_date=start_date,
        end_date=end_date,
        data_type=data_type,
        status=status,
        user_id=user_id,
    )
    return ApiResponse(
        message="Activity logs retrieved successfully",
        data=Page[ActivityLogResponse].build(
            [ActivityLogResponse.model_validate(log) for log in logs], total, page, limit
        ),
    )
