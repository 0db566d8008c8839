"""Unit tests for SessionManager against an in-memory credential store."""

import asyncio
from dataclasses import replace
from datetime import timedelta

import pytest

from productivity.core.errors import (
    ConflictError,
    InvalidCredentialsError,
    InvalidRoleError,
    InvalidTokenError,
    TokenExpiredError,
    TokenRevokedError,
)
from productivity.services.credential_store import Identity, RoleRecord
from productivity.services.revocation import InMemoryRevocationRegistry
from productivity.services.session import SessionManager, hash_password, verify_password
from productivity.services.tokens import TokenCodec, TokenKind, TokenSubject

pytestmark = pytest.mark.asyncio

ROLES = {
    1: RoleRecord(1, "viewer"),
    2: RoleRecord(2, "editor"),
    3: RoleRecord(3, "operator"),
    4: RoleRecord(4, "admin"),
}


class FakeCredentialStore:
    """Dict-backed store; returns copies so callers cannot mutate stored rows."""

    def __init__(self):
        self.identities: dict[int, Identity] = {}
        self._next_id = 1

    async def find_by_username_or_email(self, identifier):
        for identity in self.identities.values():
            if identifier in (identity.username, identity.email):
                return replace(identity)
        return None

    async def find_conflicting(self, username, email):
        for identity in self.identities.values():
            if identity.username == username or identity.email == email:
                return replace(identity)
        return None

    async def find_by_id(self, identity_id):
        # Yield so concurrent callers interleave between read and write
        await asyncio.sleep(0)
        identity = self.identities.get(identity_id)
        return replace(identity) if identity else None

    async def find_role(self, role_id):
        return ROLES.get(role_id)

    async def create(self, *, username, email, password_hash, full_name, role_id):
        identity = Identity(
            id=self._next_id,
            username=username,
            email=email,
            password_hash=password_hash,
            role=ROLES[role_id].name,
            full_name=full_name,
        )
        self.identities[identity.id] = identity
        self._next_id += 1
        return replace(identity)

    async def update_refresh_token(self, identity_id, token):
        self.identities[identity_id].current_refresh_token = token

    async def swap_refresh_token(self, identity_id, expected, token):
        identity = self.identities[identity_id]
        if identity.current_refresh_token != expected:
            return False
        identity.current_refresh_token = token
        return True


@pytest.fixture
def codec():
    return TokenCodec(
        access_secret="unit-access-" + "a" * 32,
        refresh_secret="unit-refresh-" + "b" * 32,
        access_ttl=timedelta(minutes=15),
        refresh_ttl=timedelta(days=7),
    )


@pytest.fixture
def store():
    return FakeCredentialStore()


@pytest.fixture
def registry():
    return InMemoryRevocationRegistry()


@pytest.fixture
def manager(store, codec, registry):
    return SessionManager(store, codec, registry)


async def _register(manager, username="alice", email="alice@example.com", role_id=1):
    return await manager.register(
        username=username,
        email=email,
        password="password123",
        full_name="Alice Example",
        role_id=role_id,
    )


class TestRegister:
    async def test_register_hashes_password(self, manager, store):
        identity = await _register(manager)

        stored = store.identities[identity.id]
        assert stored.password_hash != "password123"
        assert verify_password("password123", stored.password_hash)
        assert identity.role == "viewer"

    async def test_public_view_has_no_secrets(self, manager):
        identity = await _register(manager)
        view = identity.public_view()

        assert "password_hash" not in view
        assert "current_refresh_token" not in view
        assert view["username"] == "alice"

    async def test_username_conflict(self, manager):
        await _register(manager)

        with pytest.raises(ConflictError) as exc_info:
            await _register(manager, email="other@example.com")
        assert exc_info.value.message == "Username already registered"

    async def test_email_conflict(self, manager):
        await _register(manager)

        with pytest.raises(ConflictError) as exc_info:
            await _register(manager, username="other")
        assert exc_info.value.message == "Email already registered"

    @pytest.mark.parametrize("role_id", [3, 4, 42])
    async def test_role_must_be_self_registrable(self, manager, store, role_id):
        with pytest.raises(InvalidRoleError):
            await _register(manager, role_id=role_id)
        assert store.identities == {}

    async def test_self_registrable_roles_are_configurable(self, store, codec, registry):
        manager = SessionManager(store, codec, registry, self_registrable_roles=("viewer",))

        with pytest.raises(InvalidRoleError) as exc_info:
            await _register(manager, role_id=2)
        assert exc_info.value.message == "Invalid role. Only viewer roles are allowed."


class TestLogin:
    async def test_login_returns_verifiable_pair(self, manager, codec, store):
        await _register(manager, role_id=2)

        result = await manager.login("alice", "password123")

        access = codec.verify(result.tokens.access_token, TokenKind.ACCESS)
        refresh = codec.verify(result.tokens.refresh_token, TokenKind.REFRESH)
        assert access.subject.role == "editor"
        assert refresh.subject.id == access.subject.id
        assert store.identities[result.user.id].current_refresh_token == (
            result.tokens.refresh_token
        )

    async def test_login_by_email(self, manager):
        await _register(manager)
        result = await manager.login("alice@example.com", "password123")
        assert result.user.username == "alice"

    async def test_wrong_password_and_unknown_user_look_alike(self, manager):
        await _register(manager)

        with pytest.raises(InvalidCredentialsError) as wrong:
            await manager.login("alice", "nope")
        with pytest.raises(InvalidCredentialsError) as unknown:
            await manager.login("bob", "password123")

        assert wrong.value.message == unknown.value.message == "Invalid credentials"

    async def test_login_does_not_change_stored_token_on_failure(self, manager, store):
        identity = await _register(manager)
        await manager.login("alice", "password123")
        before = store.identities[identity.id].current_refresh_token

        with pytest.raises(InvalidCredentialsError):
            await manager.login("alice", "nope")

        assert store.identities[identity.id].current_refresh_token == before


class TestRefresh:
    async def test_rotation_revokes_consumed_token(self, manager, registry):
        await _register(manager)
        first = (await manager.login("alice", "password123")).tokens

        second = await manager.refresh(first.refresh_token)

        assert second.refresh_token != first.refresh_token
        assert await registry.is_revoked(first.refresh_token)
        with pytest.raises(InvalidTokenError):
            await manager.refresh(first.refresh_token)

    async def test_token_not_matching_stored_token_rejected(self, manager):
        await _register(manager)
        earlier = (await manager.login("alice", "password123")).tokens
        await manager.login("alice", "password123")

        with pytest.raises(InvalidTokenError) as exc_info:
            await manager.refresh(earlier.refresh_token)
        assert exc_info.value.message == "Invalid refresh token"

    async def test_concurrent_refreshes_of_one_token_redeem_once(self, manager, store):
        identity = await _register(manager)
        first = (await manager.login("alice", "password123")).tokens

        results = await asyncio.gather(
            manager.refresh(first.refresh_token),
            manager.refresh(first.refresh_token),
            return_exceptions=True,
        )

        winners = [result for result in results if not isinstance(result, Exception)]
        losers = [result for result in results if isinstance(result, Exception)]
        assert len(winners) == 1
        assert len(losers) == 1
        assert isinstance(losers[0], InvalidTokenError)
        assert store.identities[identity.id].current_refresh_token == winners[0].refresh_token

    async def test_token_for_missing_identity_rejected(self, manager, codec):
        token = codec.issue(TokenSubject(id=999, username="ghost"), TokenKind.REFRESH)

        with pytest.raises(InvalidTokenError):
            await manager.refresh(token)

    async def test_expired_refresh_token(self, store, registry):
        codec = TokenCodec(
            access_secret="unit-access-" + "a" * 32,
            refresh_secret="unit-refresh-" + "b" * 32,
            access_ttl=timedelta(minutes=15),
            refresh_ttl=timedelta(seconds=-1),
        )
        manager = SessionManager(store, codec, registry)
        await _register(manager)
        tokens = (await manager.login("alice", "password123")).tokens

        with pytest.raises(TokenExpiredError):
            await manager.refresh(tokens.refresh_token)

    async def test_access_token_rejected_as_refresh(self, manager):
        await _register(manager)
        tokens = (await manager.login("alice", "password123")).tokens

        with pytest.raises(InvalidTokenError):
            await manager.refresh(tokens.access_token)


class TestLogout:
    async def test_logout_revokes_and_clears(self, manager, store, registry):
        identity = await _register(manager)
        tokens = (await manager.login("alice", "password123")).tokens

        await manager.logout(identity.id)

        assert store.identities[identity.id].current_refresh_token is None
        assert await registry.is_revoked(tokens.refresh_token)
        with pytest.raises(InvalidTokenError):
            await manager.refresh(tokens.refresh_token)

    async def test_logout_is_idempotent(self, manager, registry):
        identity = await _register(manager)
        await manager.login("alice", "password123")

        await manager.logout(identity.id)
        await manager.logout(identity.id)
        await manager.logout(12345)

        assert len(registry) == 1

    async def test_login_after_logout_starts_new_session(self, manager):
        identity = await _register(manager)
        await manager.login("alice", "password123")
        await manager.logout(identity.id)

        tokens = (await manager.login("alice", "password123")).tokens
        rotated = await manager.refresh(tokens.refresh_token)

        assert rotated.access_token


class TestAuthenticateAccessToken:
    async def test_valid_access_token(self, manager):
        await _register(manager)
        tokens = (await manager.login("alice", "password123")).tokens

        payload = await manager.authenticate_access_token(tokens.access_token)
        assert payload.subject.username == "alice"

    async def test_revoked_access_token(self, manager, registry):
        await _register(manager)
        tokens = (await manager.login("alice", "password123")).tokens
        await registry.revoke(tokens.access_token)

        with pytest.raises(TokenRevokedError):
            await manager.authenticate_access_token(tokens.access_token)


async def test_hash_password_is_salted():
    first = hash_password("same")
    second = hash_password("same")

    assert first != second
    assert verify_password("same", first)
    assert not verify_password("same", "not-a-hash")
