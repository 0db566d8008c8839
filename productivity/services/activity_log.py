"""Activity log service - audit entries for data changes."""

import logging
from datetime import UTC, date, datetime, time, timedelta
from typing import Any

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from productivity.models import ActivityLog

logger = logging.getLogger(__name__)


def day_bounds(start_date: date | None, end_date: date | None) -> tuple[datetime | None, datetime | None]:
    """Turn an inclusive date range into [start, end) UTC datetimes."""
    start = datetime.combine(start_date, time.min, tzinfo=UTC) if start_date else None
    end = (
        datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=UTC)
        if end_date
        else None
    )
    return start, end


class ActivityLogService:
    """Service for recording and querying activity logs."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record(
        self,
        user_id: int,
        data_type: str,
        change_history: dict[str, Any] | None = None,
        status: str = "success",
    ) -> ActivityLog:
        """Add an activity entry to the current transaction."""
        entry = ActivityLog(
            user_id=user_id,
            activity_time=datetime.now(UTC),
            data_type=data_type,
            status=status,
            change_history=change_history,
        )
        self.db.add(entry)
        await self.db.flush()
        logger.debug(f"Recorded {data_type} activity for user id {user_id}")
        return entry

    async def list_logs(
        self,
        page: int = 1,
        limit: int = 10,
        start_date: date | None = None,
        end_date: date | None = None,
        data_type: str | None = None,
        status: str | None = None,
        user_id: int | None = None,
    ) -> tuple[list[ActivityLog], int]:
        """Return one page of entries, newest first, and the total count."""
        conditions = []
        start, end = day_bounds(start_date, end_date)
        if start is not None:
            conditions.append(ActivityLog.activity_time >= start)
        if end is not None:
            conditions.append(ActivityLog.activity_time < end)
        if data_type:
            conditions.append(ActivityLog.data_type == data_type)
        if status:
            conditions.append(ActivityLog.status == status)
        if user_id is not None:
            conditions.append(ActivityLog.user_id == user_id)

        count_result = await self.db.execute(
            select(func.count(ActivityLog.id)).where(*conditions)
        )
        total = count_result.scalar() or 0

        result = await self.db.execute(
            select(ActivityLog)
            .where(*conditions)
            .order_by(desc(ActivityLog.activity_time), desc(ActivityLog.id))
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.unique().scalars().all()), total
