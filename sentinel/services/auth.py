"""Register, login, logout and token verification.

The service is transport-agnostic: it takes already-parsed fields and either
returns a pydantic result or raises an ``AuthError`` subclass naming the
failure kind. Collaborators are injected at construction.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from functools import lru_cache
from typing import Protocol

from sentinel.core.errors import (
    AuthError,
    DuplicateEmailError,
    ForbiddenError,
    InvalidCredentialsError,
    MissingTokenError,
    StorageUnavailableError,
    ValidationError,
)
from sentinel.core.security import BCRYPT_ROUNDS, hash_password, verify_password
from sentinel.core.tokens import TokenIssuer, TokenKind
from sentinel.models.user import ROLE_ADMIN, ROLES, User
from sentinel.schemas.auth import LoginResult, TokenClaims, UserPublic
from sentinel.services.user_directory import DUPLICATE_EMAIL_MESSAGE, normalize_email

logger = logging.getLogger(__name__)

FIELD_MAX_LEN = 255
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password."

# Field name -> label used in "<label> is required." messages.
REGISTER_FIELDS = (
    ("fullname", "Full name"),
    ("email", "Email"),
    ("password", "Password"),
    ("role", "Role"),
)
LOGIN_FIELDS = (("email", "Email"), ("password", "Password"))
VERBATIM_FIELDS = frozenset({"password"})


class UserDirectoryLike(Protocol):
    def find_by_email(self, email: str) -> User | None: ...

    def create(self, fullname: str, email: str, password_hash: str, role: str) -> User: ...

    def list_users(self) -> list[User]: ...


class TokenStoreLike(Protocol):
    def replace(
        self,
        user_id: str,
        refresh_token: str,
        expires_at: datetime,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> None: ...

    def invalidate_by_token(self, refresh_token: str) -> bool: ...


def _is_blank(value: str | None) -> bool:
    return value is None or not str(value).strip()


def _is_missing(name: str, value: str | None) -> bool:
    # Passwords are taken verbatim; whitespace is a valid password.
    if name in VERBATIM_FIELDS:
        return value is None or value == ""
    return _is_blank(value)


def _require(values: dict[str, str | None], fields: tuple[tuple[str, str], ...]) -> None:
    """Raise ValidationError for the first missing or blank field, in order."""
    for name, label in fields:
        if _is_missing(name, values.get(name)):
            raise ValidationError(f"{label} is required.", field=name)


@lru_cache(maxsize=None)
def dummy_password_hash(rounds: int) -> str:
    """Digest compared against when the email is unknown, so both login failures cost one bcrypt check."""
    return hash_password("sentinel-unknown-user", rounds=rounds)


def normalize_role(role: str) -> str:
    """Return the canonical role or raise ValidationError (no fallback role)."""
    normalized = role.strip().lower()
    if normalized not in ROLES:
        raise ValidationError(
            f"Role must be one of: {', '.join(ROLES)}.", field="role"
        )
    return normalized


class AuthService:
    """Credential and token lifecycle over a user directory and a token store."""

    def __init__(
        self,
        users: UserDirectoryLike,
        tokens: TokenStoreLike,
        issuer: TokenIssuer,
        bcrypt_rounds: int = BCRYPT_ROUNDS,
    ) -> None:
        self.users = users
        self.tokens = tokens
        self.issuer = issuer
        self.bcrypt_rounds = bcrypt_rounds

    def register(
        self,
        fullname: str | None,
        email: str | None,
        password: str | None,
        role: str | None,
    ) -> UserPublic:
        _require(
            {"fullname": fullname, "email": email, "password": password, "role": role},
            REGISTER_FIELDS,
        )
        fullname = fullname.strip()
        if len(fullname) > FIELD_MAX_LEN:
            raise ValidationError("Full name is too long.", field="fullname")
        normalized_email = normalize_email(email)
        if len(normalized_email) > FIELD_MAX_LEN:
            raise ValidationError("Email is too long.", field="email")
        canonical_role = normalize_role(role)

        with _storage_guard("register"):
            if self.users.find_by_email(normalized_email) is not None:
                raise DuplicateEmailError(DUPLICATE_EMAIL_MESSAGE)
            user = self.users.create(
                fullname=fullname,
                email=normalized_email,
                password_hash=hash_password(password, rounds=self.bcrypt_rounds),
                role=canonical_role,
            )
        logger.info("User registered", extra={"user_id": user.id, "role": user.role})
        return UserPublic.model_validate(user)

    def login(
        self,
        email: str | None,
        password: str | None,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> LoginResult:
        _require({"email": email, "password": password}, LOGIN_FIELDS)

        with _storage_guard("login"):
            user = self.users.find_by_email(normalize_email(email))
            if user is None:
                verify_password(password, dummy_password_hash(self.bcrypt_rounds))
            if user is None or not verify_password(password, user.password_hash):
                logger.info("Login rejected", extra={"reason": "invalid_credentials"})
                raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)

            access_token = self.issuer.issue_access(user.id, user.role, user.fullname)
            refresh_token = self.issuer.issue_refresh(user.id, user.role)
            self.tokens.replace(
                user.id,
                refresh_token,
                self.issuer.refresh_expiry(),
                user_agent=user_agent,
                ip_address=ip_address,
            )
        logger.info("Login succeeded", extra={"user_id": user.id})
        return LoginResult(
            user=UserPublic.model_validate(user),
            access_token=access_token,
            refresh_token=refresh_token,
        )

    def logout(self, refresh_token: str | None) -> None:
        """Invalidate a refresh token. Idempotent: unknown tokens also succeed."""
        if _is_blank(refresh_token):
            raise ValidationError("Refresh token is required.", field="refresh_token")
        with _storage_guard("logout"):
            found = self.tokens.invalidate_by_token(refresh_token)
        logger.info("Logout", extra={"session_found": found})

    def verify_token(
        self,
        body_token: str | None = None,
        query_token: str | None = None,
        header_token: str | None = None,
    ) -> TokenClaims:
        """Verify the first non-empty access token among body, query and header."""
        for candidate in (body_token, query_token, header_token):
            if not _is_blank(candidate):
                return self.current_user(candidate.strip())
        raise MissingTokenError("No access token provided.")

    def current_user(self, access_token: str | None) -> TokenClaims:
        """Decode an access token into the caller's identity."""
        if _is_blank(access_token):
            raise MissingTokenError("No access token provided.")
        payload = self.issuer.verify(access_token, TokenKind.ACCESS)
        return TokenClaims(
            id=str(payload["id"]),
            role=str(payload.get("role", "")),
            name=str(payload.get("name", "")),
        )

    def require_role(self, claims: TokenClaims, role: str = ROLE_ADMIN) -> TokenClaims:
        if claims.role != role:
            raise ForbiddenError("You do not have permission to access this resource.")
        return claims

    def list_users(self) -> list[UserPublic]:
        with _storage_guard("list_users"):
            users = self.users.list_users()
        return [UserPublic.model_validate(u) for u in users]


@contextmanager
def _storage_guard(operation: str) -> Iterator[None]:
    """Map any non-AuthError escaping a collaborator to StorageUnavailableError."""
    try:
        yield
    except AuthError:
        raise
    except Exception as e:
        logger.exception("Unexpected failure during %s", operation)
        raise StorageUnavailableError("Storage is temporarily unavailable.") from e
