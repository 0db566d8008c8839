"""Revocation registry for tokens that must be rejected before they expire.

Two interchangeable backends implement ``RevocationRegistry``:

- ``InMemoryRevocationRegistry`` keeps entries in a process-local dict. It does
  not survive a restart: a revoked but unexpired token is accepted again after
  the process restarts.
- ``DatabaseRevocationRegistry`` persists entries in ``token_blacklist`` and is
  shared by every instance pointing at the same database.

Entries are keyed by the SHA-256 digest of the encoded token and remember the
token's natural expiry. Once that expiry passes the token is rejected by
signature verification anyway, so the entry can be dropped.
"""

import hashlib
import logging
import threading
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.engine import CursorResult
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from productivity.models.token_blacklist import TokenBlacklist

logger = logging.getLogger(__name__)


def token_digest(token: str) -> str:
    """Return the storage key for a token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class RevocationRegistry(ABC):
    """Membership store of revoked tokens."""

    @abstractmethod
    async def revoke(self, token: str, expires_at: datetime | None = None) -> None:
        """Mark ``token`` as no longer acceptable. Idempotent."""

    @abstractmethod
    async def is_revoked(self, token: str) -> bool:
        """Return True if ``token`` was revoked."""

    @abstractmethod
    async def purge_expired(self) -> int:
        """Drop entries whose token has expired. Returns count removed."""


class InMemoryRevocationRegistry(RevocationRegistry):
    """Process-local registry guarded by a lock."""

    def __init__(self) -> None:
        self._entries: dict[str, float | None] = {}  # digest -> expiry timestamp
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    async def revoke(self, token: str, expires_at: datetime | None = None) -> None:
        exp = expires_at.timestamp() if expires_at else None
        with self._lock:
            self._entries[token_digest(token)] = exp

    async def is_revoked(self, token: str) -> bool:
        digest = token_digest(token)
        with self._lock:
            if digest not in self._entries:
                return False
            exp = self._entries[digest]
            if exp is not None and datetime.now(UTC).timestamp() > exp:
                del self._entries[digest]
                return False
            return True

    async def purge_expired(self) -> int:
        now = datetime.now(UTC).timestamp()
        with self._lock:
            expired = [
                digest for digest, exp in self._entries.items() if exp is not None and now > exp
            ]
            for digest in expired:
                del self._entries[digest]
            return len(expired)


class DatabaseRevocationRegistry(RevocationRegistry):
    """Registry persisted in the ``token_blacklist`` table.

    Uses its own short-lived sessions so a revocation is committed even when
    the surrounding request later fails.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def revoke(self, token: str, expires_at: datetime | None = None) -> None:
        digest = token_digest(token)
        async with self._session_factory() as db:
            existing = await db.get(TokenBlacklist, digest)
            if existing is not None:
                return
            db.add(TokenBlacklist(token_hash=digest, expires_at=expires_at))
            try:
                await db.commit()
            except IntegrityError:
                # Revoked concurrently by another request
                await db.rollback()

    async def is_revoked(self, token: str) -> bool:
        async with self._session_factory() as db:
            result = await db.execute(
                select(TokenBlacklist.token_hash).where(
                    TokenBlacklist.token_hash == token_digest(token)
                )
            )
            return result.scalar_one_or_none() is not None

    async def purge_expired(self) -> int:
        now = datetime.now(UTC)
        async with self._session_factory() as db:
            result: CursorResult[Any] = await db.execute(  # type: ignore[assignment]
                delete(TokenBlacklist).where(
                    TokenBlacklist.expires_at.is_not(None),
                    TokenBlacklist.expires_at < now,
                )
            )
            await db.commit()
            return result.rowcount
