"""Session manager - registration, login, refresh rotation and logout."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerifyMismatchError

from productivity.core.errors import (
    ConflictError,
    InvalidCredentialsError,
    InvalidRoleError,
    InvalidTokenError,
    TokenRevokedError,
)
from productivity.services.credential_store import CredentialStore, Identity
from productivity.services.revocation import RevocationRegistry
from productivity.services.tokens import TokenCodec, TokenKind, TokenPayload, TokenSubject

logger = logging.getLogger(__name__)

# Argon2 password hasher with recommended parameters
# Memory: 64 MiB, Time: 3 iterations, Parallelism: 4
ph = PasswordHasher(
    time_cost=3,
    memory_cost=65536,
    parallelism=4,
    hash_len=32,
    salt_len=16,
)

_dummy_hash: str | None = None


def hash_password(password: str) -> str:
    """Hash a password using Argon2id."""
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash using constant-time comparison."""
    try:
        ph.verify(password_hash, password)
        return True
    except (VerifyMismatchError, InvalidHashError):
        return False


def _burn_password_check(password: str) -> None:
    """Spend the same time as a real verification for unknown identifiers."""
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = hash_password("dummy-password-for-timing")
    verify_password(password, _dummy_hash)


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class LoginResult:
    user: Identity
    tokens: TokenPair


class SessionManager:
    """Orchestrates the credential store, token codec and revocation registry.

    At most one refresh token is live per identity: login overwrites the
    stored token, refresh revokes the consumed token and stores its
    successor, logout revokes and clears it.
    """

    def __init__(
        self,
        store: CredentialStore,
        codec: TokenCodec,
        registry: RevocationRegistry,
        self_registrable_roles: Iterable[str] = ("viewer", "editor"),
    ):
        self.store = store
        self.codec = codec
        self.registry = registry
        self.self_registrable_roles = frozenset(self_registrable_roles)

    async def register(
        self,
        *,
        username: str,
        email: str,
        password: str,
        full_name: str,
        role_id: int,
    ) -> Identity:
        """Create an identity with a self-registrable role.

        Raises:
            ConflictError: username or email already taken.
            InvalidRoleError: unknown role or one that cannot be self-assigned.
        """
        existing = await self.store.find_conflicting(username, email)
        if existing is not None:
            if existing.username == username:
                raise ConflictError("Username already registered")
            raise ConflictError("Email already registered")

        role = await self.store.find_role(role_id)
        if role is None or role.name not in self.self_registrable_roles:
            allowed = " and ".join(sorted(self.self_registrable_roles))
            raise InvalidRoleError(f"Invalid role. Only {allowed} roles are allowed.")

        identity = await self.store.create(
            username=username,
            email=email,
            password_hash=hash_password(password),
            full_name=full_name,
            role_id=role.id,
        )
        logger.info(f"Registered user {identity.username} with role {identity.role}")
        return identity

    async def login(self, identifier: str, password: str) -> LoginResult:
        """Verify credentials and start a new session.

        Unknown identifiers and wrong passwords raise the same
        ``InvalidCredentialsError`` so callers cannot probe for accounts.
        """
        identity = await self.store.find_by_username_or_email(identifier)
        if identity is None:
            _burn_password_check(password)
            logger.info("Login failed: unknown identifier")
            raise InvalidCredentialsError()

        if not verify_password(password, identity.password_hash):
            logger.info(f"Login failed for user id {identity.id}: wrong password")
            raise InvalidCredentialsError()

        tokens = self._issue_pair(identity)
        # The previous refresh token is not revoked here; it stops matching the
        # stored token and is rejected by refresh from now on.
        await self.store.update_refresh_token(identity.id, tokens.refresh_token)
        identity.current_refresh_token = tokens.refresh_token

        logger.info(f"User {identity.username} logged in")
        return LoginResult(user=identity, tokens=tokens)

    async def refresh(self, refresh_token: str) -> TokenPair:
        """Rotate a refresh token into a fresh token pair.

        Raises:
            TokenExpiredError: the refresh token is past its expiry.
            InvalidTokenError: any other failure, including replay of a
                token that was already rotated or logged out.
        """
        payload = self.codec.verify(refresh_token, TokenKind.REFRESH)

        if await self.registry.is_revoked(refresh_token):
            logger.warning(f"Revoked refresh token presented for user id {payload.subject.id}")
            raise InvalidTokenError("Invalid refresh token")

        identity = await self.store.find_by_id(payload.subject.id)
        if identity is None:
            raise InvalidTokenError("Invalid refresh token")

        tokens = self._issue_pair(identity)
        # Conditional write: of two concurrent refreshes of one token only one wins
        swapped = await self.store.swap_refresh_token(
            identity.id, refresh_token, tokens.refresh_token
        )
        if not swapped:
            logger.warning(f"Stale refresh token presented for user id {identity.id}")
            raise InvalidTokenError("Invalid refresh token")

        await self.registry.revoke(refresh_token, payload.expires_at)

        logger.info(f"Rotated refresh token for user {identity.username}")
        return tokens

    async def logout(self, identity_id: int) -> None:
        """End the identity's session. Idempotent."""
        identity = await self.store.find_by_id(identity_id)
        if identity is None or identity.current_refresh_token is None:
            return

        token = identity.current_refresh_token
        await self.registry.revoke(token, self.codec.expiry_of(token))
        await self.store.update_refresh_token(identity.id, None)
        logger.info(f"User {identity.username} logged out")

    async def authenticate_access_token(self, token: str) -> TokenPayload:
        """Verify an access token and check it has not been revoked."""
        payload = self.codec.verify(token, TokenKind.ACCESS)
        if await self.registry.is_revoked(token):
            raise TokenRevokedError()
        return payload

    def _issue_pair(self, identity: Identity) -> TokenPair:
        return TokenPair(
            access_token=self.codec.issue(
                TokenSubject(id=identity.id, username=identity.username, role=identity.role),
                TokenKind.ACCESS,
            ),
            refresh_token=self.codec.issue(
                TokenSubject(id=identity.id, username=identity.username),
                TokenKind.REFRESH,
            ),
        )


__all__ = [
    "LoginResult",
    "SessionManager",
    "TokenPair",
    "hash_password",
    "verify_password",
]
