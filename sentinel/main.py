"""FastAPI application entrypoint. No business logic; only wiring, middleware and error mapping."""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from sentinel.api.v1 import router as v1_router
from sentinel.core.config import Settings, get_settings
from sentinel.core.errors import AuthError
from sentinel.core.logging_config import configure_logging
from sentinel.core.tokens import TokenIssuer

logger = logging.getLogger(__name__)

# Framework-raised HTTP errors (unknown route, wrong method) -> envelope kind.
HTTP_ERROR_KINDS = {404: "NotFound", 405: "MethodNotAllowed"}


def _error_body(kind: str, message: str, detail: str | None = None) -> dict[str, str]:
    body = {"status": "Error", "error": message, "kind": kind}
    if detail:
        body["detail"] = detail
    return body


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application. Signing keys are checked at startup, not per request."""
    cfg = settings if settings is not None else get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(cfg.LOG_LEVEL)
        # ConfigurationError here aborts startup.
        app.state.token_issuer = TokenIssuer.from_settings(cfg)
        logger.info("Sentinel started", extra={"environment": cfg.APP_ENV})
        yield
        app.state.token_issuer = None

    app = FastAPI(
        title="Sentinel Auth API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = cfg
    app.state.token_issuer = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if cfg.APP_ENV == "dev" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AuthError)
    async def handle_auth_error(request: Request, exc: AuthError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("Request failed: %s", exc.message, extra={"kind": exc.kind})
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.kind, exc.message))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        kind = HTTP_ERROR_KINDS.get(exc.status_code, "HTTPError")
        message = exc.detail if isinstance(exc.detail, str) else "Request failed."
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(kind, message),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        field = ".".join(str(p) for p in errors[0].get("loc", ())[1:]) if errors else ""
        message = f"Invalid value for '{field}'." if field else "Invalid request body."
        return JSONResponse(status_code=400, content=_error_body("ValidationError", message))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        detail = str(exc) if cfg.APP_ENV == "dev" else None
        return JSONResponse(
            status_code=500,
            content=_error_body("InternalError", "Something went wrong.", detail),
        )

    app.include_router(v1_router, prefix=cfg.API_V1_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "Sentinel Auth API"}

    return app


app = create_app()
