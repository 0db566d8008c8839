"""Performance metrics and report request API endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from productivity.api.deps import get_current_user
from productivity.core import get_db
from productivity.middleware.auth import CurrentUser
from productivity.schemas.common import ApiResponse
from productivity.schemas.performance import (
    OperatorPerformance,
    PeriodMetrics,
    ReportRequestCreate,
    ReportRequestResponse,
    TeamPeriodMetrics,
)
from productivity.services.performance import GroupBy, PerformanceService

router = APIRouter(prefix="/performance", tags=["performance"])


@router.get("/performance-metrics", response_model=ApiResponse[list[PeriodMetrics]])
async def performance_metrics(
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    user_id: int | None = Query(None, alias="userId"),
    group_by: GroupBy = Query(GroupBy.DAY, alias="groupBy"),
    db: AsyncSession = Depends(get_db),
    _: CurrentUser = Depends(get_current_user),
) -> ApiResponse[list[PeriodMetrics]]:
    """Metrics grouped by day, ISO week or month."""
    periods = await PerformanceService(db).metrics(start_date, end_date, user_id, group_by)
    return ApiResponse(
        message="Performance metrics retrieved successfully",
        data=[PeriodMetrics.model_validate(period) for period in periods],
    )


@router.get(
    "/performance-metrics/operator/{user_id}",
    response_model=ApiResponse[OperatorPerformance],
)
async def operator_performance(
    user_id: int,
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    db: AsyncSession = Depends(get_db),
    _: CurrentUser = Depends(get_current_user),
) -> ApiResponse[OperatorPerformance]:
    result = await PerformanceService(db).operator(user_id, start_date, end_date)
    return ApiResponse(
        message="Operator performance retrieved successfully",
        data=OperatorPerformance.model_validate(result),
    )


@router.get("/performance-metrics/team", response_model=ApiResponse[list[TeamPeriodMetrics]])
async def team_performance(
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    group_by: GroupBy = Query(GroupBy.DAY, alias="groupBy"),
    db: AsyncSession = Depends(get_db),
    _: CurrentUser = Depends(get_current_user),
) -> ApiResponse[list[TeamPeriodMetrics]]:
    periods = await PerformanceService(db).team(start_date, end_date, group_by)
    return ApiResponse(
        message="Team performance retrieved successfully",
        data=[TeamPeriodMetrics.model_validate(period) for period in periods],
    )


@router.post(
    "/reports",
    response_model=ApiResponse[ReportRequestResponse],
    status_code=status.HTTP_201_CREATED,
)
async def request_report(
    request: ReportRequestCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> ApiResponse[ReportRequestResponse]:
    """Record a report request; generation is handled outside this service."""
    report = await PerformanceService(db).request_report(
        user_id=current_user.id,
        start_date=request.start_date,
        end_date=request.end_date,
        report_type=request.report_type,
        export_format=request.export_format,
        email_to=request.email_to,
    )
    return ApiResponse(
        message="Report request submitted successfully",
        data=ReportRequestResponse.model_validate(report),
    )


@router.get("/reports/{report_id}", response_model=ApiResponse[ReportRequestResponse])
async def report_status(
    report_id: int,
    db: AsyncSession = Depends(get_db),
    _: CurrentUser = Depends(get_current_user),
) -> ApiResponse[ReportRequestResponse]:
    report = await PerformanceService(db).get_report(report_id)
    return ApiResponse(
        message="Report status retrieved successfully",
        data=ReportRequestResponse.model_validate(report),
    )
