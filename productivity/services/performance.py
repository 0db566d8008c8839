"""Performance metrics service.

Metrics are computed in a single pass over the daily logs of the requested
range. Logs are bucketed by period start: the day itself, the Monday of its
ISO week, or the first day of its month. Every ratio over an empty
denominator is reported as 0.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from enum import StrEnum
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from productivity.core.errors import NotFoundError
from productivity.models import DailyLog, ReportRequest, Target
from productivity.services.daily_log import validate_date_range

logger = logging.getLogger(__name__)


class GroupBy(StrEnum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


def period_start(day: date, group_by: GroupBy) -> date:
    """Return the first day of the period containing ``day``."""
    if group_by is GroupBy.WEEK:
        return day - timedelta(days=day.weekday())
    if group_by is GroupBy.MONTH:
        return day.replace(day=1)
    return day


def percentage(part: float, whole: float) -> float:
    return part / whole * 100 if whole else 0.0


def ratio(part: float, whole: float) -> float:
    return part / whole if whole else 0.0


@dataclass
class _OperatorBucket:
    user_id: int
    username: str
    full_name: str
    total_items: int = 0
    days: int = 0
    present_days: int = 0

    def summary(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "username": self.username,
            "full_name": self.full_name,
            "total_items": self.total_items,
            "average_items_per_day": ratio(self.total_items, self.days),
            "attendance_rate": percentage(self.present_days, self.days),
        }


@dataclass
class _PeriodBucket:
    period: date
    total_items: int = 0
    total_binning: int = 0
    total_picking: int = 0
    present_count: int = 0
    total_count: int = 0
    operators: dict[int, _OperatorBucket] = field(default_factory=dict)

    def add(self, log: DailyLog) -> None:
        self.total_items += log.total_items
        self.total_binning += log.binning_count
        self.total_picking += log.picking_count
        self.present_count += 1 if log.is_present else 0
        self.total_count += 1

        operator = self.operators.get(log.user_id)
        if operator is None:
            operator = _OperatorBucket(
                user_id=log.user_id,
                username=log.user.username,
                full_name=log.user.full_name,
            )
            self.operators[log.user_id] = operator
        operator.total_items += log.total_items
        operator.days += 1
        operator.present_days += 1 if log.is_present else 0

    def summary(self) -> dict[str, Any]:
        return {
            "period": self.period,
            "total_items": self.total_items,
            "average_items_per_operator": ratio(self.total_items, len(self.operators)),
            "binning_percentage": percentage(self.total_binning, self.total_items),
            "picking_percentage": percentage(self.total_picking, self.total_items),
            "attendance_rate": percentage(self.present_count, self.total_count),
            "active_operators": len(self.operators),
        }


def group_logs(logs: Iterable[DailyLog], group_by: GroupBy) -> list[_PeriodBucket]:
    """Bucket logs by period, ordered by period start."""
    buckets: dict[date, _PeriodBucket] = {}
    for log in logs:
        key = period_start(log.log_date, group_by)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = _PeriodBucket(period=key)
        bucket.add(log)
    return [buckets[key] for key in sorted(buckets)]


class PerformanceService:
    """Service for productivity metrics and report bookkeeping."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _logs_in_range(
        self, start_date: date, end_date: date, user_id: int | None = None
    ) -> list[DailyLog]:
        validate_date_range(start_date, end_date)
        conditions = [DailyLog.log_date >= start_date, DailyLog.log_date <= end_date]
        if user_id is not None:
            conditions.append(DailyLog.user_id == user_id)
        result = await self.db.execute(
            select(DailyLog).where(*conditions).order_by(DailyLog.log_date, DailyLog.id)
        )
        return list(result.unique().scalars().all())

    async def current_target(self, today: date | None = None) -> Target | None:
        """Return the daily target in effect on ``today``."""
        today = today or datetime.now(UTC).date()
        result = await self.db.execute(
            select(Target)
            .where(
                Target.effective_from <= today,
                or_(Target.effective_to.is_(None), Target.effective_to > today),
            )
            .order_by(Target.effective_from.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def metrics(
        self,
        start_date: date,
        end_date: date,
        user_id: int | None = None,
        group_by: GroupBy = GroupBy.DAY,
    ) -> list[dict[str, Any]]:
        logs = await self._logs_in_range(start_date, end_date, user_id)
        return [bucket.summary() for bucket in group_logs(logs, group_by)]

    async def operator(self, user_id: int, start_date: date, end_date: date) -> dict[str, Any]:
        """Totals, attendance and target achievement for one operator."""
        logs = await self._logs_in_range(start_date, end_date, user_id)
        if not logs:
            raise NotFoundError("No performance data found for this operator")

        total_items = sum(log.total_items for log in logs)
        total_binning = sum(log.binning_count for log in logs)
        total_picking = sum(log.picking_count for log in logs)
        present_days = sum(1 for log in logs if log.is_present)
        target = await self.current_target()

        return {
            "total_items": total_items,
            "average_items_per_day": ratio(total_items, len(logs)),
            "binning_percentage": percentage(total_binning, total_items),
            "picking_percentage": percentage(total_picking, total_items),
            "attendance_rate": percentage(present_days, len(logs)),
            "target_achievement": (
                percentage(total_items, target.daily_target * len(logs)) if target else None
            ),
            "daily_breakdown": [
                {
                    "date": log.log_date,
                    "total_items": log.total_items,
                    "binning_count": log.binning_count,
                    "picking_count": log.picking_count,
                    "is_present": log.is_present,
                }
                for log in logs
            ],
        }

    async def team(
        self, start_date: date, end_date: date, group_by: GroupBy = GroupBy.DAY
    ) -> list[dict[str, Any]]:
        """Per-period team metrics with a per-operator breakdown."""
        logs = await self._logs_in_range(start_date, end_date)
        target = await self.current_target()

        periods = []
        for bucket in group_logs(logs, group_by):
            summary = bucket.summary()
            summary["target_achievement"] = (
                percentage(bucket.total_items, target.daily_target * bucket.total_count)
                if target
                else None
            )
            summary["operator_performance"] = [
                operator.summary() for operator in bucket.operators.values()
            ]
            periods.append(summary)
        return periods

    async def request_report(
        self,
        user_id: int,
        start_date: date,
        end_date: date,
        report_type: str,
        export_format: str,
        email_to: str | None = None,
    ) -> ReportRequest:
        """Store a pending report request. Generation happens elsewhere."""
        validate_date_range(start_date, end_date)
        report = ReportRequest(
            user_id=user_id,
            start_date=start_date,
            end_date=end_date,
            report_type=report_type,
            export_format=export_format,
            email_to=email_to,
            status="pending",
        )
        self.db.add(report)
        await self.db.flush()
        await self.db.refresh(report)
        logger.info(f"Report request {report.id} ({report_type}/{export_format}) queued")
        return report

    async def get_report(self, report_id: int) -> ReportRequest:
        report = await self.db.get(ReportRequest, report_id)
        if report is None:
            raise NotFoundError("Report request not found")
        return report


__all__ = ["GroupBy", "PerformanceService", "group_logs", "period_start"]
