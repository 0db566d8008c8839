# Productivity Services
from productivity.services.activity_log import ActivityLogService
from productivity.services.credential_store import (
    CredentialStore,
    Identity,
    SqlAlchemyCredentialStore,
)
from productivity.services.daily_log import DailyLogService
from productivity.services.performance import GroupBy, PerformanceService
from productivity.services.revocation import (
    DatabaseRevocationRegistry,
    InMemoryRevocationRegistry,
    RevocationRegistry,
)
from productivity.services.session import LoginResult, SessionManager, TokenPair
from productivity.services.tokens import TokenCodec, TokenKind, TokenPayload, TokenSubject
from productivity.services.user import UserService

__all__ = [
    "ActivityLogService",
    "CredentialStore",
    "DailyLogService",
    "DatabaseRevocationRegistry",
    "GroupBy",
    "Identity",
    "InMemoryRevocationRegistry",
    "LoginResult",
    "PerformanceService",
    "RevocationRegistry",
    "SessionManager",
    "SqlAlchemyCredentialStore",
    "TokenCodec",
    "TokenKind",
    "TokenPayload",
    "TokenSubject",
    "TokenPair",
    "UserService",
]
