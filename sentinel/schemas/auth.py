"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, ConfigDict, Field

# Request fields are optional so the service can report the first missing
# field by name, in a fixed order, instead of a generic schema error.


class RegisterRequest(BaseModel):
    """Registration payload."""

    fullname: str | None = Field(default=None, description="Full name")
    email: str | None = Field(default=None, description="Email address")
    password: str | None = Field(default=None, description="Password")
    role: str | None = Field(default=None, description="Role: 'user' or 'admin'")


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: str | None = Field(default=None, description="Email address")
    password: str | None = Field(default=None, description="Password")


class LogoutRequest(BaseModel):
    refresh_token: str | None = Field(default=None, description="Refresh token to invalidate")


class VerifyTokenRequest(BaseModel):
    access_token: str | None = Field(default=None, description="Access token to verify")


class UserPublic(BaseModel):
    """Public projection of a user record (never includes the password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    fullname: str
    email: str
    role: str


class TokenClaims(BaseModel):
    """Identity carried by a verified access token."""

    id: str
    role: str
    name: str


class LoginResult(BaseModel):
    """Outcome of a successful login."""

    user: UserPublic
    access_token: str
    refresh_token: str


class RegisterResponse(BaseModel):
    status: str = "Success"
    user: UserPublic
    created: bool = True


class LoginResponse(BaseModel):
    """Tokens returned after successful login."""

    status: str = "Success"
    user: UserPublic
    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field(default="bearer", description="Token type")


class MessageResponse(BaseModel):
    status: str = "Success"
    message: str


class VerifyTokenResponse(BaseModel):
    status: str = "Success"
    user: TokenClaims
    token_valid: bool = True


class UsersListResponse(BaseModel):
    """Response for GET /auth/users (admin only)."""

    users: list[UserPublic]


class ErrorResponse(BaseModel):
    """Envelope for every failure response."""

    status: str = "Error"
    error: str
    kind: str
    detail: str | None = None
