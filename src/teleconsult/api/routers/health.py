"""
Health check endpoints.
"""

from typing import Dict

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from ...core.container import ServiceNames
from ...core.utils.datetime_utils import iso_timestamp
from ..deps import get_container

router = APIRouter(prefix="/health", tags=["health"])


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    timestamp: str = Field(default_factory=iso_timestamp)
    version: str
    service: str


class ReadinessResponse(BaseModel):
    status: str
    timestamp: str = Field(default_factory=iso_timestamp)
    sessions: Dict[str, int]
    checks: Dict[str, bool]


@router.get("", response_model=HealthResponse)
async def health_check(request: Request):
    """
    Health check endpoint.

    Returns the current status of the service.
    """
    settings = get_container(request).settings
    return HealthResponse(status="healthy", version=settings.app_version, service=settings.app_name)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(request: Request):
    """
    Readiness check endpoint.

    Reports live session counts and whether the decrypt key and the CRM and
    SMS upstreams are configured. Upstreams are not called.
    """
    container = get_container(request)
    settings = container.settings
    checks = {
        "decrypt_key": bool(settings.decrypt.key),
        "crm": settings.crm.is_configured,
        "sms": settings.sms.is_configured,
    }
    sessions = {
        "otp": await container.get(ServiceNames.OTP_STORE).count(),
        "access": await container.get(ServiceNames.ACCESS_STORE).count(),
    }
    return ReadinessResponse(
        status="ready" if checks["decrypt_key"] else "degraded",
        sessions=sessions,
        checks=checks,
    )
