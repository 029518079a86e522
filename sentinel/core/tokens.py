"""JWT issuance and verification for access and refresh tokens."""

import secrets
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING, Any

import jwt

from sentinel.core.errors import (
    ConfigurationError,
    TokenExpiredError,
    TokenMalformedError,
    TokenNotYetValidError,
)

if TYPE_CHECKING:
    from sentinel.core.config import Settings

DEFAULT_ACCESS_TTL = timedelta(minutes=15)
DEFAULT_REFRESH_TTL = timedelta(days=7)


class TokenKind(str, Enum):
    """Which signing key a token belongs to."""

    ACCESS = "access"
    REFRESH = "refresh"


class TokenIssuer:
    """
    Signs and verifies access and refresh tokens.

    Access and refresh tokens use separate keys; a token signed with one key
    never verifies as the other kind.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        algorithm: str = "HS256",
        access_ttl: timedelta = DEFAULT_ACCESS_TTL,
        refresh_ttl: timedelta = DEFAULT_REFRESH_TTL,
    ) -> None:
        if not access_secret or not access_secret.strip():
            raise ConfigurationError("Access token signing key is not configured")
        if not refresh_secret or not refresh_secret.strip():
            raise ConfigurationError("Refresh token signing key is not configured")
        if access_secret == refresh_secret:
            raise ConfigurationError(
                "Access and refresh tokens must use different signing keys"
            )
        self._keys = {TokenKind.ACCESS: access_secret, TokenKind.REFRESH: refresh_secret}
        self.algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl

    @classmethod
    def from_settings(cls, cfg: "Settings") -> "TokenIssuer":
        """Build from settings; raises ConfigurationError when a key is missing."""
        access = cfg.JWT_ACCESS_SECRET.get_secret_value() if cfg.JWT_ACCESS_SECRET else ""
        refresh = cfg.JWT_REFRESH_SECRET.get_secret_value() if cfg.JWT_REFRESH_SECRET else ""
        return cls(
            access_secret=access,
            refresh_secret=refresh,
            algorithm=cfg.JWT_ALGORITHM,
            access_ttl=timedelta(minutes=cfg.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_ttl=timedelta(days=cfg.REFRESH_TOKEN_EXPIRE_DAYS),
        )

    def _encode(self, payload: dict[str, Any], kind: TokenKind, ttl: timedelta) -> str:
        now = datetime.now(UTC)
        payload = {**payload, "type": kind.value, "iat": now, "exp": now + ttl}
        return jwt.encode(payload, self._keys[kind], algorithm=self.algorithm)

    def issue_access(self, user_id: str, role: str, name: str) -> str:
        """Create a short-lived access token carrying id, role and name."""
        return self._encode(
            {"id": str(user_id), "role": role, "name": name},
            TokenKind.ACCESS,
            self.access_ttl,
        )

    def issue_refresh(self, user_id: str, role: str) -> str:
        """Create a refresh token carrying id and role."""
        # jti keeps two tokens minted within the same second distinct.
        return self._encode(
            {"id": str(user_id), "role": role, "jti": secrets.token_urlsafe(16)},
            TokenKind.REFRESH,
            self.refresh_ttl,
        )

    def refresh_expiry(self) -> datetime:
        """Expiry to persist alongside a refresh token issued now."""
        return datetime.now(UTC) + self.refresh_ttl

    def verify(self, token: str, kind: TokenKind = TokenKind.ACCESS) -> dict[str, Any]:
        """
        Validate signature and time claims; return the decoded payload.

        Raises TokenExpiredError, TokenNotYetValidError or TokenMalformedError.
        """
        try:
            payload = jwt.decode(
                token,
                self._keys[kind],
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except jwt.ImmatureSignatureError as e:
            raise TokenNotYetValidError("Token is not yet valid") from e
        except jwt.PyJWTError as e:
            raise TokenMalformedError("Invalid token") from e
        if payload.get("type") != kind.value or not payload.get("id"):
            raise TokenMalformedError("Invalid token")
        return payload
