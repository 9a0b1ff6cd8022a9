"""
Route / fare service client
===========================

POST {trip_service_url}/api/preview  -- route summary plus priced fares

The service answers with an OSRM-style route and a list of ride fares.  A
response wrapped in the API gateway envelope (``{"data": ...}``) is
accepted too, as are camelCase field names.  A single attempt is made per
request, bounded by ``route_timeout_seconds``.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import AliasChoices, BaseModel, Field, ValidationError

from src.domain.enums import PackageSlug
from src.domain.errors import RouteServiceError
from src.domain.fares import RouteFare, TripPreview

logger = logging.getLogger(__name__)


# ── Wire models ───────────────────────────────────────────────────────


class Coordinate(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class _OsrmRoute(BaseModel):
    distance: float = Field(0.0, ge=0)
    duration: float = Field(0.0, ge=0)


class _OsrmResponse(BaseModel):
    routes: list[_OsrmRoute] = []


class _RideFarePayload(BaseModel):
    id: str
    package_slug: str = Field(
        ..., validation_alias=AliasChoices("package_slug", "packageSlug")
    )
    total_price_in_cents: Optional[int] = Field(
        None,
        ge=0,
        validation_alias=AliasChoices("total_price_in_cents", "totalPriceInCents"),
    )


class _PreviewPayload(BaseModel):
    route: Optional[_OsrmResponse] = None
    ride_fares: Optional[list[_RideFarePayload]] = Field(
        None, validation_alias=AliasChoices("ride_fares", "rideFares")
    )


def parse_preview(body: dict) -> TripPreview:
    """Map a service response body onto a ``TripPreview``."""
    if "data" in body and isinstance(body["data"], dict):
        body = body["data"]
    try:
        payload = _PreviewPayload.model_validate(body)
        route = payload.route.routes[0] if payload.route and payload.route.routes else None
        fares = tuple(
            RouteFare(
                id=f.id,
                package_slug=PackageSlug(f.package_slug),
                total_price_in_cents=f.total_price_in_cents,
            )
            for f in payload.ride_fares or []
        )
    except (ValidationError, ValueError) as exc:
        raise RouteServiceError(f"Malformed trip preview: {exc}") from exc
    return TripPreview(
        distance_meters=route.distance if route else 0.0,
        duration_seconds=route.duration if route else 0.0,
        ride_fares=fares,
    )


# ── Client ────────────────────────────────────────────────────────────


class RouteFareClient:
    def __init__(self, base_url: str, timeout: float = 10.0, transport=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def preview(
        self, user_id: str, pickup: Coordinate, destination: Coordinate
    ) -> TripPreview:
        payload = {
            "user_id": user_id,
            "pickup": pickup.model_dump(),
            "destination": destination.model_dump(),
        }
        url = f"{self.base_url}/api/preview"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                resp = await client.post(url, json=payload)
        except httpx.TimeoutException as exc:
            raise RouteServiceError("Route service timed out") from exc
        except httpx.HTTPError as exc:
            raise RouteServiceError(f"Route service unreachable: {exc}") from exc

        if resp.status_code != 200:
            logger.error("Trip service returned status %d: %s", resp.status_code, resp.text)
            raise RouteServiceError("Route service error", status_code=resp.status_code)

        try:
            body = resp.json()
        except ValueError as exc:
            raise RouteServiceError("Route service returned invalid JSON") from exc
        if not isinstance(body, dict):
            raise RouteServiceError("Route service returned an unexpected payload")
        return parse_preview(body)
