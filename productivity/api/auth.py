"""Authentication API endpoints."""

import logging
import time
from collections import defaultdict

from fastapi import APIRouter, Depends, Request, status

from productivity.api.deps import get_app_settings, get_current_user, get_session_manager
from productivity.core.config import Settings
from productivity.core.errors import InvalidCredentialsError, RateLimitedError
from productivity.core.request_utils import get_client_ip
from productivity.middleware.auth import CurrentUser
from productivity.schemas.auth import (
    CurrentUserResponse,
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RegisterRequest,
    TokenPairResponse,
)
from productivity.schemas.common import ApiResponse
from productivity.schemas.user import UserResponse
from productivity.services.session import SessionManager

logger = logging.getLogger(__name__)

# Rate limiting for failed login attempts: client ip -> attempt times
_login_attempts: dict[str, list[float]] = defaultdict(list)


def _check_login_rate_limit(client_ip: str, app_settings: Settings) -> None:
    """Check if a client IP has exceeded the failed login limit."""
    now = time.monotonic()
    window = app_settings.login_rate_limit_window_seconds
    attempts = [t for t in _login_attempts.get(client_ip, ()) if now - t < window]
    if attempts:
        _login_attempts[client_ip] = attempts
    else:
        _login_attempts.pop(client_ip, None)
    if len(attempts) >= app_settings.login_rate_limit_attempts:
        logger.warning("Login rate limit exceeded for %s", client_ip)
        raise RateLimitedError("Too many login attempts. Please try again later.")


def _record_login_attempt(client_ip: str) -> None:
    """Record a failed login attempt for rate limiting."""
    _login_attempts[client_ip].append(time.monotonic())


def reset_login_attempts() -> None:
    _login_attempts.clear()


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=ApiResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
)
async def register(
    request: RegisterRequest,
    session_manager: SessionManager = Depends(get_session_manager),
) -> ApiResponse[UserResponse]:
    """Register a new user with a self-registrable role.

    Returns 409 if the username or email is taken and 400 for a role that
    cannot be self-assigned.
    """
    identity = await session_manager.register(
        username=request.username,
        email=request.email,
        password=request.password,
        full_name=request.full_name,
        role_id=request.role_id,
    )
    return ApiResponse(
        message="User registered successfully",
        data=UserResponse.model_validate(identity.public_view()),
    )


@router.post("/login", response_model=ApiResponse[LoginResponse])
async def login(
    request: LoginRequest,
    http_request: Request,
    session_manager: SessionManager = Depends(get_session_manager),
    app_settings: Settings = Depends(get_app_settings),
) -> ApiResponse[LoginResponse]:
    """Authenticate with username or email and get a token pair.

    Failed attempts are rate limited per client IP.
    """
    client_ip = get_client_ip(http_request)
    _check_login_rate_limit(client_ip, app_settings)

    try:
        result = await session_manager.login(request.username_or_email, request.password)
    except InvalidCredentialsError:
        _record_login_attempt(client_ip)
        raise

    return ApiResponse(
        message="Login successful",
        data=LoginResponse(
            user=UserResponse.model_validate(result.user.public_view()),
            access_token=result.tokens.access_token,
            refresh_token=result.tokens.refresh_token,
        ),
    )


@router.post("/refresh-token", response_model=ApiResponse[TokenPairResponse])
async def refresh_token(
    request: RefreshRequest,
    session_manager: SessionManager = Depends(get_session_manager),
) -> ApiResponse[TokenPairResponse]:
    """Exchange a refresh token for a new token pair (rotation).

    The presented token is revoked; presenting it again returns 401.
    """
    tokens = await session_manager.refresh(request.refresh_token)
    return ApiResponse(
        message="Token refreshed successfully",
        data=TokenPairResponse(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
        ),
    )


@router.post("/logout", response_model=ApiResponse[None])
async def logout(
    current_user: CurrentUser = Depends(get_current_user),
    session_manager: SessionManager = Depends(get_session_manager),
) -> ApiResponse[None]:
    """Log out the current user by revoking their refresh token. Idempotent."""
    await session_manager.logout(current_user.id)
    return ApiResponse(message="Logged out successfully")


@router.get("/me", response_model=ApiResponse[CurrentUserResponse])
async def me(
    current_user: CurrentUser = Depends(get_current_user),
) -> ApiResponse[CurrentUserResponse]:
    """Get the identity attached to the current access token."""
    return ApiResponse(
        message="Current user retrieved successfully",
        data=CurrentUserResponse.model_validate(current_user),
    )
