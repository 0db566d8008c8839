"""Request gate: bearer token authentication and role authorization.

Every protected endpoint depends on the gate (see ``productivity.api.deps``).
The gate:
- extracts the token from ``Authorization: Bearer <token>``
- verifies it as an access token and rejects revoked tokens
- exposes ``{id, username, role}`` to the handler
A separate ``authorize`` step compares the role with an allow-list.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from fastapi import Request

from productivity.core.errors import ForbiddenError, TokenRevokedError, UnauthorizedError
from productivity.services.revocation import RevocationRegistry
from productivity.services.tokens import TokenCodec, TokenKind

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class CurrentUser:
    """Authenticated caller attached to a request."""

    id: int
    username: str
    role: str


def extract_bearer_token(authorization: str | None) -> str:
    """Return the token from an Authorization header value.

    Raises:
        UnauthorizedError: header missing or not in ``Bearer <token>`` form.
    """
    if not authorization:
        raise UnauthorizedError("No authorization header")
    if not authorization.startswith(BEARER_PREFIX):
        raise UnauthorizedError("Invalid authorization header format")
    token = authorization[len(BEARER_PREFIX) :].strip()
    if not token or " " in token:
        raise UnauthorizedError("Invalid authorization header format")
    return token


class RequestGate:
    """Authenticates requests against the token codec and revocation registry."""

    def __init__(self, codec: TokenCodec, registry: RevocationRegistry):
        self.codec = codec
        self.registry = registry

    async def authenticate(self, request: Request) -> CurrentUser:
        token = extract_bearer_token(request.headers.get("Authorization"))
        payload = self.codec.verify(token, TokenKind.ACCESS)

        if await self.registry.is_revoked(token):
            logger.warning(
                f"Revoked token used for: {request.method} {request.url.path}",
                extra={"user_id": payload.subject.id},
            )
            raise TokenRevokedError()

        subject = payload.subject
        # verify() guarantees access tokens carry a role
        assert subject.role is not None
        return CurrentUser(id=subject.id, username=subject.username, role=subject.role)

    @staticmethod
    def authorize(user: CurrentUser, allowed_roles: Iterable[str]) -> CurrentUser:
        """Return ``user`` if its role is allowed, else raise ``ForbiddenError``."""
        if user.role not in set(allowed_roles):
            logger.info(f"User id {user.id} with role {user.role} denied")
            raise ForbiddenError()
        return user
