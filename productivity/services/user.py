"""User service - read access to user records."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from productivity.models import User


class UserService:
    """Service for listing and looking up users."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_users(self) -> list[User]:
        result = await self.db.execute(select(User).order_by(User.id))
        return list(result.unique().scalars().all())

    async def get(self, user_id: int) -> User | None:
        return await self.db.get(User, user_id)
