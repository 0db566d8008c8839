"""Daily log service - per-operator attendance and item counts."""

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from productivity.core.errors import ForbiddenError, NotFoundError, ValidationError
from productivity.models import DailyLog, RoleName, User
from productivity.services.activity_log import ActivityLogService

logger = logging.getLogger(__name__)

# Roles allowed to record their own daily log
RECORDING_ROLES = frozenset({RoleName.OPERATOR, RoleName.EDITOR})


@dataclass(frozen=True)
class DailyLogStats:
    total_binning: int
    total_picking: int
    total_items: int
    average_items_per_day: float
    present_days: int
    total_days: int
    attendance_rate: float


def validate_date_range(start_date: date | None, end_date: date | None) -> None:
    if start_date and end_date and start_date > end_date:
        raise ValidationError("startDate must be before or equal to endDate")


class DailyLogService:
    """Service for managing daily logs."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.activity = ActivityLogService(db)

    async def create_or_update(
        self,
        user_id: int,
        role: str,
        log_date: date,
        is_present: bool,
        binning_count: int | None = None,
        picking_count: int | None = None,
    ) -> DailyLog:
        """Create the caller's log for ``log_date`` or update the existing one.

        Counts that are omitted keep their stored value on update and start
        at zero on create. ``total_items`` is always recomputed.
        """
        if log_date > datetime.now(UTC).date():
            raise ValidationError("Cannot create log for future dates")
        if role not in RECORDING_ROLES:
            raise ForbiddenError("Only operators and editors can create daily logs")
        for name, value in (("binningCount", binning_count), ("pickingCount", picking_count)):
            if value is not None and value < 0:
                raise ValidationError(f"{name} must be a non-negative number")

        user = await self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")

        result = await self.db.execute(
            select(DailyLog).where(DailyLog.user_id == user_id, DailyLog.log_date == log_date)
        )
        log = result.unique().scalar_one_or_none()
        created = log is None
        if log is None:
            log = DailyLog(
                user_id=user_id,
                log_date=log_date,
                binning_count=0,
                picking_count=0,
            )
            self.db.add(log)

        log.is_present = is_present
        if binning_count is not None:
            log.binning_count = binning_count
        if picking_count is not None:
            log.picking_count = picking_count
        log.total_items = log.binning_count + log.picking_count
        await self.db.flush()

        await self.activity.record(
            user_id,
            "daily_log",
            {
                "details": f"{'Created' if created else 'Updated'} daily log for {log_date.isoformat()}",
                "changes": {
                    "isPresent": log.is_present,
                    "binningCount": log.binning_count,
                    "pickingCount": log.picking_count,
                    "totalItems": log.total_items,
                },
            },
        )
        await self.db.refresh(log)
        logger.info(f"Daily log {log.id} saved for user id {user_id} on {log_date}")
        return log

    async def list_logs(
        self,
        page: int = 1,
        limit: int = 10,
        start_date: date | None = None,
        end_date: date | None = None,
        user_id: int | None = None,
    ) -> tuple[list[DailyLog], int]:
        """Return one page of logs, newest first, and the total count."""
        validate_date_range(start_date, end_date)

        conditions = []
        if start_date is not None:
            conditions.append(DailyLog.log_date >= start_date)
        if end_date is not None:
            conditions.append(DailyLog.log_date <= end_date)
        if user_id is not None:
            conditions.append(DailyLog.user_id == user_id)

        count_result = await self.db.execute(select(func.count(DailyLog.id)).where(*conditions))
        total = count_result.scalar() or 0

        result = await self.db.execute(
            select(DailyLog)
            .where(*conditions)
            .order_by(desc(DailyLog.log_date), desc(DailyLog.id))
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.unique().scalars().all()), total

    async def list_for_user(
        self,
        user_id: int,
        page: int = 1,
        limit: int = 10,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> tuple[list[DailyLog], int]:
        if await self.db.get(User, user_id) is None:
            raise NotFoundError("User not found")
        return await self.list_logs(page, limit, start_date, end_date, user_id=user_id)

    async def get(self, log_id: int) -> DailyLog:
        log = await self.db.get(DailyLog, log_id)
        if log is None:
            raise NotFoundError("Daily log not found")
        return log

    async def delete(self, log_id: int, actor_id: int, actor_role: str) -> None:
        """Delete a log. Only its owner or an admin may do so."""
        log = await self.get(log_id)
        if log.user_id != actor_id and actor_role != RoleName.ADMIN:
            raise ForbiddenError("Not authorized to delete this log")

        snapshot = {
            "id": log.id,
            "userId": log.user_id,
            "logDate": log.log_date.isoformat(),
            "isPresent": log.is_present,
            "binningCount": log.binning_count,
            "pickingCount": log.picking_count,
            "totalItems": log.total_items,
        }
        await self.db.delete(log)
        await self.db.flush()

        await self.activity.record(
            actor_id,
            "daily_log",
            {"details": f"Deleted daily log {log_id}", "deletedLog": snapshot},
        )
        logger.info(f"Daily log {log_id} deleted by user id {actor_id}")

    async def stats(self, user_id: int, start_date: date, end_date: date) -> DailyLogStats:
        """Totals and attendance for one user over an inclusive date range."""
        validate_date_range(start_date, end_date)
        if await self.db.get(User, user_id) is None:
            raise NotFoundError("User not found")

        result = await self.db.execute(
            select(DailyLog).where(
                DailyLog.user_id == user_id,
                DailyLog.log_date >= start_date,
                DailyLog.log_date <= end_date,
            )
        )
        logs = list(result.unique().scalars().all())

        total_days = (end_date - start_date).days + 1
        present_days = sum(1 for log in logs if log.is_present)
        total_binning = sum(log.binning_count for log in logs)
        total_picking = sum(log.picking_count for log in logs)
        total_items = total_binning + total_picking

        return DailyLogStats(
            total_binning=total_binning,
            total_picking=total_picking,
            total_items=total_items,
            average_items_per_day=total_items / present_days if present_days else 0.0,
            present_days=present_days,
            total_days=total_days,
            attendance_rate=present_days / total_days * 100 if total_days else 0.0,
        )
