"""API v1 routes."""

from fastapi import APIRouter

from sentinel.api.v1 import auth, health

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])


@router.get("", tags=["meta"])
def api_root() -> dict[str, str]:
    """Discovery payload for the versioned API."""
    return {"message": "Sentinel Auth API", "version": "0.1.0", "status": "online"}
