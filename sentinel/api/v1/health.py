"""Health check endpoint with database connectivity check."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from sentinel.api.v1.auth import get_app_settings
from sentinel.core.config import Settings
from sentinel.core.database import check_db_connected, get_db
from sentinel.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    cfg: Annotated[Settings, Depends(get_app_settings)],
) -> HealthResponse:
    """
    Return service health, database connectivity and whether token signing is ready.
    Used by load balancers and monitoring.
    """
    db_status = "connected" if check_db_connected(db) else "disconnected"
    return HealthResponse(
        status="ok",
        environment=cfg.APP_ENV,
        database=db_status,
        token_signing=getattr(request.app.state, "token_issuer", None) is not None,
    )
