"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from src.domain.catalog import PackageMeta
from src.domain.enums import Role
from src.domain.fares import RouteFare, TripPreview
from src.domain.flow import FlowState
from src.infrastructure.route_client import Coordinate
from src.services.views import View


# ── Requests ──────────────────────────────────────────────────────────


class RoleRequest(BaseModel):
    role: Role


class PackageRequest(BaseModel):
    package_slug: str


class TripRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    pickup: Coordinate
    destination: Coordinate


class RouteFareSchema(BaseModel):
    id: str
    package_slug: str
    total_price_in_cents: Optional[int] = Field(None, ge=0)


class TripPreviewSchema(BaseModel):
    distance_meters: float = Field(..., ge=0)
    duration_seconds: float = Field(..., ge=0)
    ride_fares: list[RouteFareSchema] = []


class PaymentRequest(BaseModel):
    session_id: str = Field(..., min_length=1)
    amount: float = Field(..., ge=0)
    currency: str = Field(..., min_length=3, max_length=3)


class PaymentReturnRequest(BaseModel):
    payment: str = Field(..., description="Return-channel marker, e.g. 'success'.")


# ── Responses ─────────────────────────────────────────────────────────


class PackageResponse(BaseModel):
    slug: str
    name: str
    description: str
    icon: str

    @classmethod
    def from_meta(cls, meta: PackageMeta) -> "PackageResponse":
        return cls(
            slug=meta.slug.value,
            name=meta.display_name,
            description=meta.description,
            icon=meta.icon,
        )


class ViewResponse(BaseModel):
    name: str
    title: str
    message: Optional[str] = None
    data: dict[str, Any] = {}

    @classmethod
    def from_view(cls, view: View) -> "ViewResponse":
        return cls(name=view.name, title=view.title, message=view.message, data=view.data)


class TripResponse(BaseModel):
    distance_meters: float
    duration_seconds: float
    ride_fares: list[RouteFareSchema]

    @classmethod
    def from_trip(cls, trip: TripPreview) -> "TripResponse":
        return cls(
            distance_meters=trip.distance_meters,
            duration_seconds=trip.duration_seconds,
            ride_fares=[fare_schema(f) for f in trip.ride_fares],
        )


class FlowResponse(BaseModel):
    flow_id: str
    stage: str
    role: str
    package_slug: Optional[str] = None
    trip: Optional[TripResponse] = None
    selected_fare: Optional[RouteFareSchema] = None
    payment_outcome: Optional[str] = None
    failure_reason: Optional[str] = None
    redirect_url: Optional[str] = None
    view: ViewResponse


class FareListResponse(BaseModel):
    distance: str
    duration: str
    empty: bool
    options: list[dict[str, Any]]


class MarkerIconResponse(BaseModel):
    icon_url: str
    shadow_url: str
    icon_size: tuple[int, int]
    icon_anchor: tuple[int, int]


class ConfigResponse(BaseModel):
    payment_enabled: bool
    payment_message: Optional[str] = None
    marker_icon: MarkerIconResponse
    packages: list[PackageResponse]


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str
    error: str


# ── Mapping helpers ───────────────────────────────────────────────────


def fare_schema(fare: RouteFare) -> RouteFareSchema:
    return RouteFareSchema(
        id=fare.id,
        package_slug=fare.package_slug.value,
        total_price_in_cents=fare.total_price_in_cents,
    )


def flow_response(flow_id: str, state: FlowState, view: View) -> FlowResponse:
    return FlowResponse(
        flow_id=flow_id,
        stage=state.stage.value,
        role=state.role.value,
        package_slug=state.package_slug.value if state.package_slug else None,
        trip=TripResponse.from_trip(state.trip) if state.trip else None,
        selected_fare=fare_schema(state.selected_fare) if state.selected_fare else None,
        payment_outcome=state.payment_outcome.value if state.payment_outcome else None,
        failure_reason=state.failure_reason,
        redirect_url=state.redirect_url,
        view=ViewResponse.from_view(view),
    )
