"""User model for authentication and operator records."""

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from productivity.models.base import BaseModel
from productivity.models.role import Role


class User(BaseModel):
    """Application user.

    ``refresh_token`` holds the single refresh token currently accepted for
    this user; it is replaced on login and refresh and cleared on logout.
    """

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    role_id: Mapped[int] = mapped_column(ForeignKey("roles.id"), nullable=False, index=True)
    refresh_token: Mapped[str | None] = mapped_column(Text, nullable=True)

    role: Mapped[Role] = relationship(lazy="joined")

    def __repr__(self) -> str:
        return f"<User {self.username}>"
