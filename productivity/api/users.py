"""User API endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from productivity.api.deps import require_roles
from productivity.core import get_db
from productivity.middleware.auth import CurrentUser
from productivity.models import RoleName
from productivity.schemas.common import ApiResponse
from productivity.schemas.user import UserResponse
from productivity.services.user import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=ApiResponse[list[UserResponse]])
async def list_users(
    db: AsyncSession = Depends(get_db),
    _: CurrentUser = Depends(require_roles(RoleName.VIEWER, RoleName.EDITOR, RoleName.ADMIN)),
) -> ApiResponse[list[UserResponse]]:
    """List all users (public view)."""
    users = await UserService(db).list_users()
    return ApiResponse(
        message="Users retrieved successfully",
        data=[UserResponse.model_validate(user) for user in users],
    )
