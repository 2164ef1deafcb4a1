"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings
from ...services.advisor import check_health as advisor_health_check

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/advisor", status_code=status.HTTP_200_OK)
def health_advisor() -> dict:
    """Check the text-generation advisor service."""
    if not settings.advisor_base_url:
        return {"service": "advisor", "configured": False, "healthy": False}
    return {"service": "advisor", "configured": True, "healthy": advisor_health_check()}
