"""Unit tests for the revocation registries."""

from datetime import UTC, datetime, timedelta

import pytest

from productivity.services.revocation import (
    DatabaseRevocationRegistry,
    InMemoryRevocationRegistry,
    token_digest,
)

pytestmark = pytest.mark.asyncio

FUTURE = datetime.now(UTC) + timedelta(days=1)
PAST = datetime.now(UTC) - timedelta(minutes=1)


@pytest.fixture(params=["memory", "database"])
def registry(request, session_factory):
    if request.param == "memory":
        return InMemoryRevocationRegistry()
    return DatabaseRevocationRegistry(session_factory)


class TestRevoke:
    async def test_unknown_token_is_not_revoked(self, registry):
        assert await registry.is_revoked("never-seen") is False

    async def test_revoked_token_is_reported(self, registry):
        await registry.revoke("token-a", FUTURE)

        assert await registry.is_revoked("token-a") is True
        assert await registry.is_revoked("token-b") is False

    async def test_revoke_is_idempotent(self, registry):
        await registry.revoke("token-a", FUTURE)
        await registry.revoke("token-a", FUTURE)

        assert await registry.is_revoked("token-a") is True

    async def test_revoke_without_expiry_is_kept(self, registry):
        await registry.revoke("token-a")

        assert await registry.purge_expired() == 0
        assert await registry.is_revoked("token-a") is True


class TestPurge:
    async def test_purge_drops_only_expired_entries(self, registry):
        await registry.revoke("expired", PAST)
        await registry.revoke("live", FUTURE)

        assert await registry.purge_expired() == 1
        assert await registry.is_revoked("live") is True

    async def test_purge_on_empty_registry(self, registry):
        assert await registry.purge_expired() == 0


async def test_memory_registry_forgets_expired_entry_on_lookup():
    registry = InMemoryRevocationRegistry()
    await registry.revoke("expired", PAST)

    assert await registry.is_revoked("expired") is False
    assert len(registry) == 0


async def test_database_registry_stores_digest_not_token(session_factory):
    from productivity.models import TokenBlacklist

    registry = DatabaseRevocationRegistry(session_factory)
    await registry.revoke("secret-token", FUTURE)

    async with session_factory() as db:
        entry = await db.get(TokenBlacklist, token_digest("secret-token"))
    assert entry is not None
    assert "secret-token" not in entry.token_hash


async def test_token_digest_is_stable_sha256():
    assert token_digest("abc") == token_digest("abc")
    assert len(token_digest("abc")) == 64
    assert token_digest("abc") != token_digest("abd")
