"""Credential store - persisted identities used by the session manager."""

from dataclasses import dataclass
from typing import Protocol

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from productivity.models import Role, User


@dataclass
class Identity:
    """A user as seen by the authentication core."""

    id: int
    username: str
    email: str
    password_hash: str
    role: str
    full_name: str = ""
    current_refresh_token: str | None = None

    def public_view(self) -> dict[str, object]:
        """Identity without secrets."""
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "full_name": self.full_name,
            "role": self.role,
        }


@dataclass(frozen=True)
class RoleRecord:
    id: int
    name: str


class CredentialStore(Protocol):
    """Storage operations the session manager depends on."""

    async def find_by_username_or_email(self, identifier: str) -> Identity | None:
        """Return the identity whose username or email equals ``identifier``."""
        ...

    async def find_conflicting(self, username: str, email: str) -> Identity | None:
        """Return any identity that already uses ``username`` or ``email``."""
        ...

    async def find_by_id(self, identity_id: int) -> Identity | None: ...

    async def find_role(self, role_id: int) -> RoleRecord | None: ...

    async def create(
        self,
        *,
        username: str,
        email: str,
        password_hash: str,
        full_name: str,
        role_id: int,
    ) -> Identity: ...

    async def update_refresh_token(self, identity_id: int, token: str | None) -> None: ...

    async def swap_refresh_token(self, identity_id: int, expected: str, token: str) -> bool:
        """Replace the stored refresh token only if it still equals ``expected``.

        Returns False when another writer replaced or cleared it first.
        """
        ...


def _to_identity(user: User) -> Identity:
    return Identity(
        id=user.id,
        username=user.username,
        email=user.email,
        password_hash=user.password_hash,
        role=user.role.name,
        full_name=user.full_name,
        current_refresh_token=user.refresh_token,
    )


class SqlAlchemyCredentialStore:
    """Credential store backed by the ``users`` and ``roles`` tables."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_username_or_email(self, identifier: str) -> Identity | None:
        return await self._first_match(or_(User.username == identifier, User.email == identifier))

    async def find_conflicting(self, username: str, email: str) -> Identity | None:
        return await self._first_match(or_(User.username == username, User.email == email))

    async def find_by_id(self, identity_id: int) -> Identity | None:
        return await self._first_match(User.id == identity_id)

    async def find_role(self, role_id: int) -> RoleRecord | None:
        role = await self.session.get(Role, role_id)
        return RoleRecord(id=role.id, name=role.name) if role else None

    async def create(
        self,
        *,
        username: str,
        email: str,
        password_hash: str,
        full_name: str,
        role_id: int,
    ) -> Identity:
        user = User(
            username=username,
            email=email,
            password_hash=password_hash,
            full_name=full_name,
            role_id=role_id,
        )
        self.session.add(user)
        await self.session.flush()
        created = await self.find_by_id(user.id)
        assert created is not None
        return created

    async def update_refresh_token(self, identity_id: int, token: str | None) -> None:
        await self.session.execute(
            update(User).where(User.id == identity_id).values(refresh_token=token)
        )
        await self.session.flush()

    async def swap_refresh_token(self, identity_id: int, expected: str, token: str) -> bool:
        result = await self.session.execute(
            update(User)
            .where(User.id == identity_id, User.refresh_token == expected)
            .values(refresh_token=token)
        )
        await self.session.flush()
        return result.rowcount == 1

    async def _first_match(self, condition) -> Identity | None:
        # populate_existing: rows may have been changed by bulk UPDATEs in this session
        result = await self.session.execute(
            select(User).where(condition).execution_options(populate_existing=True)
        )
        user = result.unique().scalars().first()
        return _to_identity(user) if user else None
