"""JWT issuance and verification.

Access and refresh tokens are signed with separate secrets, so a leaked
access-token secret cannot be used to forge refresh tokens. The ``type``
claim is checked as well, but secret isolation alone already rejects a token
presented as the wrong kind.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Any

import jwt
from jwt.exceptions import PyJWTError

from productivity.core.config import Settings
from productivity.core.errors import InvalidTokenError, TokenExpiredError

logger = logging.getLogger(__name__)

_REQUIRED_CLAIMS = ["sub", "exp", "iat", "type", "jti"]


class TokenKind(StrEnum):
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class TokenSubject:
    """Identity fields embedded in a token."""

    id: int
    username: str
    role: str | None = None


@dataclass(frozen=True)
class TokenPayload:
    """Decoded and verified token contents."""

    subject: TokenSubject
    kind: TokenKind
    issued_at: datetime
    expires_at: datetime
    token_id: str


class TokenCodec:
    """Signs and verifies compact tokens for both token kinds."""

    def __init__(
        self,
        *,
        access_secret: str,
        refresh_secret: str,
        access_ttl: timedelta,
        refresh_ttl: timedelta,
        algorithm: str = "HS256",
    ):
        if access_secret == refresh_secret:
            raise ValueError("Access and refresh tokens must use different secrets")
        self._secrets = {TokenKind.ACCESS: access_secret, TokenKind.REFRESH: refresh_secret}
        self._ttls = {TokenKind.ACCESS: access_ttl, TokenKind.REFRESH: refresh_ttl}
        self._algorithm = algorithm

    @classmethod
    def from_settings(cls, app_settings: Settings) -> "TokenCodec":
        return cls(
            access_secret=app_settings.effective_jwt_access_secret_key,
            refresh_secret=app_settings.effective_jwt_refresh_secret_key,
            access_ttl=timedelta(minutes=app_settings.jwt_access_token_expire_minutes),
            refresh_ttl=timedelta(days=app_settings.jwt_refresh_token_expire_days),
            algorithm=app_settings.jwt_algorithm,
        )

    def ttl(self, kind: TokenKind) -> timedelta:
        return self._ttls[kind]

    def issue(self, subject: TokenSubject, kind: TokenKind) -> str:
        """Encode ``subject`` as a signed token of the given kind."""
        if kind is TokenKind.ACCESS and not subject.role:
            raise ValueError("Access tokens require a role")

        now = datetime.now(UTC)
        claims: dict[str, Any] = {
            # PyJWT requires "sub" to be a string
            "sub": str(subject.id),
            "username": subject.username,
            "type": kind.value,
            "iat": now,
            "exp": now + self._ttls[kind],
            # jti keeps tokens issued within the same second distinct
            "jti": secrets.token_hex(16),
        }
        if subject.role:
            claims["role"] = subject.role

        token = jwt.encode(claims, self._secrets[kind], algorithm=self._algorithm)
        # PyJWT 2.x returns str; older type stubs may declare bytes
        return str(token)

    def verify(self, token: str, kind: TokenKind) -> TokenPayload:
        """Check signature, expiry and shape of ``token`` for ``kind``.

        Raises:
            TokenExpiredError: the token is past its expiry.
            InvalidTokenError: bad signature, wrong kind or malformed payload.
        """
        label = "Access" if kind is TokenKind.ACCESS else "Refresh"
        try:
            claims = jwt.decode(
                token,
                self._secrets[kind],
                algorithms=[self._algorithm],
                options={"require": _REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError(f"{label} token has expired") from e
        except PyJWTError as e:
            logger.debug(f"{label} token rejected: {e}")
            raise InvalidTokenError(f"Invalid {label.lower()} token") from e

        try:
            return self._to_payload(claims, kind)
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidTokenError(f"Invalid {label.lower()} token") from e

    def expiry_of(self, token: str) -> datetime | None:
        """Read the expiry of a token without verifying it.

        Used to bound how long a revoked token must be remembered.
        """
        try:
            claims = jwt.decode(token, options={"verify_signature": False})
            return datetime.fromtimestamp(int(claims["exp"]), tz=UTC)
        except (PyJWTError, KeyError, TypeError, ValueError):
            return None

    @staticmethod
    def _to_payload(claims: dict[str, Any], kind: TokenKind) -> TokenPayload:
        if claims["type"] != kind.value:
            raise ValueError(f"Not an {kind.value} token")

        role = claims.get("role")
        if kind is TokenKind.ACCESS and not role:
            raise ValueError("Access token missing role")

        username = claims.get("username")
        if not isinstance(username, str) or not username:
            raise ValueError("Token missing username")

        return TokenPayload(
            subject=TokenSubject(id=int(claims["sub"]), username=username, role=role),
            kind=kind,
            issued_at=datetime.fromtimestamp(int(claims["iat"]), tz=UTC),
            expires_at=datetime.fromtimestamp(int(claims["exp"]), tz=UTC),
            token_id=str(claims["jti"]),
        )
