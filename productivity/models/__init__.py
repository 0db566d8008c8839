# Productivity Models
from productivity.models.activity_log import ActivityLog
from productivity.models.base import BaseModel
from productivity.models.daily_log import DailyLog
from productivity.models.report_request import ReportRequest
from productivity.models.role import Role, RoleName
from productivity.models.target import Target
from productivity.models.token_blacklist import TokenBlacklist
from productivity.models.user import User

__all__ = [
    "ActivityLog",
    "BaseModel",
    "DailyLog",
    "ReportRequest",
    "Role",
    "RoleName",
    "Target",
    "TokenBlacklist",
    "User",
]
