"""Daily log API endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from productivity.api.deps import get_current_user
from productivity.core import get_db
from productivity.middleware.auth import CurrentUser
from productivity.schemas.common import ApiResponse, Page
from productivity.schemas.daily_log import (
    DailyLogResponse,
    DailyLogStatsResponse,
    DailyLogUpsert,
)
from productivity.services.daily_log import DailyLogService

router = APIRouter(prefix="/daily-logs", tags=["daily-logs"])


def _page(logs, total: int, page: int, limit: int) -> Page[DailyLogResponse]:
    return Page[DailyLogResponse].build(
        [DailyLogResponse.model_validate(log) for log in logs], total, page, limit
    )


@router.post("", response_model=ApiResponse[DailyLogResponse])
async def create_or_update_daily_log(
    request: DailyLogUpsert,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> ApiResponse[DailyLogResponse]:
    """Create or update the caller's log for a day (operators and editors)."""
    log = await DailyLogService(db).create_or_update(
        user_id=current_user.id,
        role=current_user.role,
        log_date=request.log_date,
        is_present=request.is_present,
        binning_count=request.binning_count,
        picking_count=request.picking_count,
    )
    return ApiResponse(
        message="Daily log created/updated successfully",
        data=DailyLogResponse.model_validate(log),
    )


@router.get("", response_model=ApiResponse[Page[DailyLogResponse]])
async def list_daily_logs(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    user_id: int | None = Query(None, alias="userId"),
    db: AsyncSession = Depends(get_db),
    _: CurrentUser = Depends(get_current_user),
) -> ApiResponse[Page[DailyLogResponse]]:
    """List daily logs, newest first."""
    logs, total = await DailyLogService(db).list_logs(
        page=page, limit=limit, start_date=start_date, end_date=end_date, user_id=user_id
    )
    return ApiResponse(
        message="Daily logs retrieved successfully",
        data=_page(logs, total, page, limit),
    )


@router.get("/stats", response_model=ApiResponse[DailyLogStatsResponse])
async def daily_log_stats(
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    user_id: int | None = Query(None, alias="userId", ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> ApiResponse[DailyLogStatsResponse]:
    """Totals and attendance for a user (default: the caller) over a date range."""
    stats = await DailyLogService(db).stats(
        user_id=user_id if user_id is not None else current_user.id,
        start_date=start_date,
        end_date=end_date,
    )
    return ApiResponse(
        message="Daily log statistics retrieved successfully",
        data=DailyLogStatsResponse.model_validate(stats),
    )


@router.get("/user/{user_id}", response_model=ApiResponse[Page[DailyLogResponse]])
async def list_user_daily_logs(
    user_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_db),
    _: CurrentUser = Depends(get_current_user),
) -> ApiResponse[Page[DailyLogResponse]]:
    """List one user's daily logs, newest first."""
    logs, total = await DailyLogService(db).list_for_user(
        user_id, page=page, limit=limit, start_date=start_date, end_date=end_date
    )
    return ApiResponse(
        message="User daily logs retrieved successfully",
        data=_page(logs, total, page, limit),
    )


@router.get("/{log_id}", response_model=ApiResponse[DailyLogResponse])
async def get_daily_log(
    log_id: int,
    db: AsyncSession = Depends(get_db),
    _: CurrentUser = Depends(get_current_user),
) -> ApiResponse[DailyLogResponse]:
    log = await DailyLogService(db).get(log_id)
    return ApiResponse(
        message="Daily log retrieved successfully",
        data=DailyLogResponse.model_validate(log),
    )


@router.delete("/{log_id}", response_model=ApiResponse[None])
async def delete_daily_log(
    log_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> ApiResponse[None]:
    """Delete a daily log (owner or admin)."""
    await DailyLogService(db).delete(log_id, current_user.id, current_user.role)
    return ApiResponse(message="Daily log deleted successfully")
