"""Pydantic schemas for authentication API."""

from pydantic import EmailStr, Field

from productivity.schemas.common import ApiModel
from productivity.schemas.user import UserResponse


class RegisterRequest(ApiModel):
    """Request for self-registration."""

    username: str = Field(..., min_length=3, max_length=50, description="Username (3-50 chars)")
    email: EmailStr
    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="Password (minimum 8 characters)",
    )
    full_name: str = Field(..., min_length=2, max_length=100)
    role_id: int = Field(..., ge=1, description="Role id; only self-registrable roles are accepted")


class LoginRequest(ApiModel):
    """Request for login by username or email."""

    username_or_email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RefreshRequest(ApiModel):
    """Request for token refresh."""

    refresh_token: str = Field(..., min_length=1)


class TokenPairResponse(ApiModel):
    """A freshly issued access/refresh token pair."""

    access_token: str
    refresh_token: str


class LoginResponse(TokenPairResponse):
    """Tokens plus the authenticated user."""

    user: UserResponse


class CurrentUserResponse(ApiModel):
    """Identity attached to the current request."""

    id: int
    username: str
    role: str
