"""
Entry / client configuration endpoints
======================================

GET /api/v1/entry     -- entry screen; ``?payment=success`` shows confirmation
GET /api/v1/config    -- payment availability, map marker icon, catalog
GET /api/v1/packages  -- vehicle class catalog
"""

from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Request

from src.api.middleware import limiter
from src.api.schemas import (
    ConfigResponse,
    MarkerIconResponse,
    PackageResponse,
    ViewResponse,
)
from src.config import settings
from src.domain.catalog import all_packages
from src.domain.payment import NOT_CONFIGURED_MESSAGE
from src.environment import setup_environment
from src.services.views import entry_view

router = APIRouter(tags=["entry"])


@router.get("/entry", response_model=ViewResponse, summary="Entry screen")
@limiter.limit(settings.rate_limit)
async def entry(request: Request, payment: Optional[str] = None):
    return ViewResponse.from_view(entry_view(payment))


@router.get("/config", response_model=ConfigResponse, summary="Client configuration")
async def client_config():
    icon = setup_environment(settings.log_level)
    return ConfigResponse(
        payment_enabled=settings.payment_configured,
        payment_message=None if settings.payment_configured else NOT_CONFIGURED_MESSAGE,
        marker_icon=MarkerIconResponse(**asdict(icon)),
        packages=[PackageResponse.from_meta(m) for m in all_packages()],
    )


@router.get("/packages", response_model=list[PackageResponse], summary="Vehicle classes")
async def list_packages():
    return [PackageResponse.from_meta(m) for m in all_packages()]
