"""Pydantic request/response schemas."""

from sentinel.schemas.auth import (
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    LoginResult,
    LogoutRequest,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    TokenClaims,
    UserPublic,
    UsersListResponse,
    VerifyTokenRequest,
    VerifyTokenResponse,
)
from sentinel.schemas.health import HealthResponse

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "LoginResult",
    "LogoutRequest",
    "MessageResponse",
    "RegisterRequest",
    "RegisterResponse",
    "TokenClaims",
    "UserPublic",
    "UsersListResponse",
    "VerifyTokenRequest",
    "VerifyTokenResponse",
]
