"""Revoked tokens - survives process restarts."""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from productivity.core.database import Base


class TokenBlacklist(Base):
    """A revoked token identified by the SHA-256 digest of its encoded form.

    Entries without ``expires_at`` are kept until removed manually.
    """

    __tablename__ = "token_blacklist"

    token_hash: Mapped[str] = mapped_column(String(64), primary_key=True)
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True
    )
