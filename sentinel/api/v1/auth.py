"""Auth endpoints (register, login, logout, verify-token) and auth dependencies."""

from typing import Annotated

from fastapi import APIRouter, Depends, Header, Query, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from sentinel.core.config import Settings, get_settings
from sentinel.core.database import get_db
from sentinel.core.errors import ConfigurationError
from sentinel.core.tokens import TokenIssuer
from sentinel.schemas.auth import (
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    LogoutRequest,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    TokenClaims,
    UsersListResponse,
    VerifyTokenRequest,
    VerifyTokenResponse,
)
from sentinel.services.auth import AuthService
from sentinel.services.token_store import TokenStore
from sentinel.services.user_directory import UserDirectory

router = APIRouter()
security = HTTPBearer(auto_error=False)


def _errors(*codes: int) -> dict[int | str, dict]:
    """OpenAPI entries documenting the error envelope for the given statuses."""
    return {code: {"model": ErrorResponse} for code in codes}


def get_app_settings(request: Request) -> Settings:
    cfg = getattr(request.app.state, "settings", None)
    return cfg if cfg is not None else get_settings()


def get_token_issuer(request: Request) -> TokenIssuer:
    """Dependency: the issuer built at startup."""
    issuer = getattr(request.app.state, "token_issuer", None)
    if issuer is None:
        raise ConfigurationError("Token signing is not configured.")
    return issuer


def get_auth_service(
    db: Annotated[Session, Depends(get_db)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
    cfg: Annotated[Settings, Depends(get_app_settings)],
) -> AuthService:
    """Dependency: an AuthService bound to this request's session."""
    return AuthService(
        users=UserDirectory(db),
        tokens=TokenStore(db),
        issuer=issuer,
        bcrypt_rounds=cfg.BCRYPT_ROUNDS,
    )


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


def _client_address(request: Request) -> str | None:
    return request.client.host if request.client else None


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_errors(400, 409, 503),
)
def register(body: RegisterRequest, service: AuthServiceDep) -> RegisterResponse:
    """Create an account. Role must be 'user' or 'admin'."""
    user = service.register(body.fullname, body.email, body.password, body.role)
    return RegisterResponse(user=user)


@router.post("/login", response_model=LoginResponse, responses=_errors(400, 401, 503))
def login(
    body: LoginRequest,
    request: Request,
    service: AuthServiceDep,
) -> LoginResponse:
    """
    Authenticate with email and password; returns access and refresh tokens.
    Include the access token in the Authorization header as: Bearer <access_token>
    """
    result = service.login(
        body.email,
        body.password,
        user_agent=request.headers.get("user-agent"),
        ip_address=_client_address(request),
    )
    return LoginResponse(
        user=result.user,
        access_token=result.access_token,
        refresh_token=result.refresh_token,
    )


@router.post("/logout", response_model=MessageResponse, responses=_errors(400, 503))
def logout(body: LogoutRequest, service: AuthServiceDep) -> MessageResponse:
    """Invalidate a refresh token. Repeating the call is not an error."""
    service.logout(body.refresh_token)
    return MessageResponse(message="Logged out successfully.")


@router.post("/verify-token", response_model=VerifyTokenResponse, responses=_errors(401, 403))
def verify_token(
    service: AuthServiceDep,
    body: VerifyTokenRequest | None = None,
    access_token: Annotated[str | None, Query()] = None,
    x_access_token: Annotated[str | None, Header()] = None,
) -> VerifyTokenResponse:
    """Verify an access token from the body, query string or x-access-token header."""
    claims = service.verify_token(
        body_token=body.access_token if body else None,
        query_token=access_token,
        header_token=x_access_token,
    )
    return VerifyTokenResponse(user=claims)


@router.get("/verify-token", response_model=VerifyTokenResponse, responses=_errors(401, 403))
def verify_token_get(
    service: AuthServiceDep,
    access_token: Annotated[str | None, Query()] = None,
    x_access_token: Annotated[str | None, Header()] = None,
) -> VerifyTokenResponse:
    claims = service.verify_token(query_token=access_token, header_token=x_access_token)
    return VerifyTokenResponse(user=claims)


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    service: AuthServiceDep,
    x_access_token: Annotated[str | None, Header()] = None,
) -> TokenClaims:
    """Dependency: require a valid access token (Bearer or x-access-token)."""
    token = credentials.credentials if credentials is not None else x_access_token
    return service.current_user(token)


def require_admin(
    current_user: Annotated[TokenClaims, Depends(get_current_user)],
    service: AuthServiceDep,
) -> TokenClaims:
    """Dependency: require authenticated user with role 'admin'. Raises 403 for non-admin."""
    return service.require_role(current_user)


@router.get("/me", response_model=TokenClaims, responses=_errors(401, 403))
def me(current_user: Annotated[TokenClaims, Depends(get_current_user)]) -> TokenClaims:
    return current_user


@router.get("/users", response_model=UsersListResponse, responses=_errors(401, 403, 503))
def list_users(
    _admin: Annotated[TokenClaims, Depends(require_admin)],
    service: AuthServiceDep,
) -> UsersListResponse:
    """List all users (admin only)."""
    return UsersListResponse(users=service.list_users())
