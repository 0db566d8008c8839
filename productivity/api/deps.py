"""FastAPI dependencies shared by the routers."""

from collections.abc import Awaitable, Callable

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from productivity.core import get_db
from productivity.core.config import Settings
from productivity.middleware.auth import CurrentUser, RequestGate
from productivity.services.credential_store import SqlAlchemyCredentialStore
from productivity.services.revocation import RevocationRegistry
from productivity.services.session import SessionManager
from productivity.services.tokens import TokenCodec


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_codec(request: Request) -> TokenCodec:
    return request.app.state.token_codec


def get_revocation_registry(request: Request) -> RevocationRegistry:
    return request.app.state.revocation_registry


def get_request_gate(request: Request) -> RequestGate:
    return request.app.state.request_gate


def get_session_manager(
    db: AsyncSession = Depends(get_db),
    codec: TokenCodec = Depends(get_token_codec),
    registry: RevocationRegistry = Depends(get_revocation_registry),
    app_settings: Settings = Depends(get_app_settings),
) -> SessionManager:
    """Dependency to get a session manager bound to the request's DB session."""
    return SessionManager(
        SqlAlchemyCredentialStore(db),
        codec,
        registry,
        self_registrable_roles=app_settings.self_registrable_roles_list,
    )


async def get_current_user(
    request: Request,
    gate: RequestGate = Depends(get_request_gate),
) -> CurrentUser:
    """Dependency to get the authenticated caller from the bearer token."""
    return await gate.authenticate(request)


def require_roles(*roles: str) -> Callable[..., Awaitable[CurrentUser]]:
    """Build a dependency that admits only callers holding one of ``roles``."""
    allowed = frozenset(roles)

    async def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        return RequestGate.authorize(user, allowed)

    return dependency
