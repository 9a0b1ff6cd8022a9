"""
Flow endpoints
==============

POST /api/v1/flows                          -- start a flow (role selection)
GET  /api/v1/flows/{flow_id}                -- current stage and view
POST /api/v1/flows/{flow_id}/role           -- choose rider / driver
POST /api/v1/flows/{flow_id}/package        -- driver picks a vehicle class
POST /api/v1/flows/{flow_id}/trip           -- request fares for a route
POST /api/v1/flows/{flow_id}/trip/preview   -- push an already computed preview
GET  /api/v1/flows/{flow_id}/fares          -- priced options for the trip
POST /api/v1/flows/{flow_id}/fares/select   -- commit to one fare
POST /api/v1/flows/{flow_id}/fares/cancel   -- back to the map, trip kept
POST /api/v1/flows/{flow_id}/payment        -- hand the session to checkout
POST /api/v1/flows/{flow_id}/payment/return -- checkout came back
POST /api/v1/flows/{flow_id}/payment/retry  -- new attempt after a failure
POST /api/v1/flows/{flow_id}/reset          -- back to the initial screen
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, Request

from src.api.dependencies import get_service
from src.api.middleware import limiter
from src.api.schemas import (
    FareListResponse,
    FlowResponse,
    PackageRequest,
    PaymentRequest,
    PaymentReturnRequest,
    RoleRequest,
    RouteFareSchema,
    TripPreviewSchema,
    TripRequest,
    flow_response,
)
from src.config import settings
from src.domain.catalog import parse_slug
from src.domain.fares import PaymentSession, RouteFare, TripPreview
from src.domain.flow import FlowState
from src.services.negotiation import NegotiationService
from src.services.views import listing_dict

router = APIRouter(prefix="/flows", tags=["flows"])


def _respond(service: NegotiationService, flow_id: str, state: FlowState) -> FlowResponse:
    return flow_response(flow_id, state, service.render(flow_id, state))


def _to_fare(body: RouteFareSchema) -> RouteFare:
    return RouteFare(
        id=body.id,
        package_slug=parse_slug(body.package_slug),
        total_price_in_cents=body.total_price_in_cents,
    )


@router.post("", status_code=201, response_model=FlowResponse, summary="Start a flow")
@limiter.limit(settings.rate_limit)
async def start_flow(
    request: Request, service: NegotiationService = Depends(get_service)
):
    flow_id, state = await service.start()
    return _respond(service, flow_id, state)


@router.get("/{flow_id}", response_model=FlowResponse, summary="Get flow state")
@limiter.limit(settings.rate_limit)
async def get_flow(
    request: Request,
    flow_id: str,
    service: NegotiationService = Depends(get_service),
):
    state = await service.get(flow_id)
    return _respond(service, flow_id, state)


@router.post("/{flow_id}/role", response_model=FlowResponse, summary="Choose a role")
@limiter.limit(settings.rate_limit)
async def choose_role(
    request: Request,
    flow_id: str,
    body: RoleRequest,
    service: NegotiationService = Depends(get_service),
):
    state = await service.choose_role(flow_id, body.role)
    return _respond(service, flow_id, state)


@router.post(
    "/{flow_id}/package", response_model=FlowResponse, summary="Select a vehicle class"
)
@limiter.limit(settings.rate_limit)
async def select_package(
    request: Request,
    flow_id: str,
    body: PackageRequest,
    service: NegotiationService = Depends(get_service),
):
    state = await service.select_package(flow_id, parse_slug(body.package_slug))
    return _respond(service, flow_id, state)


@router.post(
    "/{flow_id}/trip",
    response_model=FlowResponse,
    summary="Request fares for a route",
    description=(
        "Calls the route / fare service once.  A service failure keeps the "
        "flow on the map with the error in the view message."
    ),
)
@limiter.limit(settings.rate_limit)
async def request_trip(
    request: Request,
    flow_id: str,
    body: TripRequest,
    service: NegotiationService = Depends(get_service),
):
    state = await service.request_trip(
        flow_id, body.user_id, body.pickup, body.destination
    )
    return _respond(service, flow_id, state)


@router.post(
    "/{flow_id}/trip/preview",
    response_model=FlowResponse,
    summary="Push a computed trip preview",
)
@limiter.limit(settings.rate_limit)
async def push_trip_preview(
    request: Request,
    flow_id: str,
    body: TripPreviewSchema,
    service: NegotiationService = Depends(get_service),
):
    preview = TripPreview(
        distance_meters=body.distance_meters,
        duration_seconds=body.duration_seconds,
        ride_fares=tuple(_to_fare(f) for f in body.ride_fares),
    )
    state = await service.trip_computed(flow_id, preview)
    return _respond(service, flow_id, state)


@router.get("/{flow_id}/fares", response_model=FareListResponse, summary="List fares")
@limiter.limit(settings.rate_limit)
async def list_fares(
    request: Request,
    flow_id: str,
    service: NegotiationService = Depends(get_service),
):
    listing = await service.fares(flow_id)
    return FareListResponse(**listing_dict(listing))


@router.post(
    "/{flow_id}/fares/select", response_model=FlowResponse, summary="Select a fare"
)
@limiter.limit(settings.rate_limit)
async def select_fare(
    request: Request,
    flow_id: str,
    body: RouteFareSchema,
    service: NegotiationService = Depends(get_service),
):
    state = await service.select_fare(flow_id, _to_fare(body))
    return _respond(service, flow_id, state)


@router.post(
    "/{flow_id}/fares/cancel", response_model=FlowResponse, summary="Cancel fare selection"
)
@limiter.limit(settings.rate_limit)
async def cancel_fare(
    request: Request,
    flow_id: str,
    service: NegotiationService = Depends(get_service),
):
    state = await service.cancel(flow_id)
    return _respond(service, flow_id, state)


@router.post(
    "/{flow_id}/payment",
    response_model=FlowResponse,
    summary="Hand the payment session to checkout",
    description=(
        "Without a body a mock session is issued for the selected fare (when "
        "mock sessions are enabled).  Mock sessions resolve to success "
        "immediately; checkout sessions return a ``redirect_url``."
    ),
)
@limiter.limit(settings.rate_limit)
async def pay(
    request: Request,
    flow_id: str,
    body: Optional[PaymentRequest] = Body(None),
    service: NegotiationService = Depends(get_service),
):
    session = (
        PaymentSession.issue(body.session_id, body.amount, body.currency)
        if body is not None
        else None
    )
    state, _ = await service.pay(flow_id, session)
    return _respond(service, flow_id, state)


@router.post(
    "/{flow_id}/payment/return",
    response_model=FlowResponse,
    summary="Resolve a checkout from the return channel",
)
@limiter.limit(settings.rate_limit)
async def payment_return(
    request: Request,
    flow_id: str,
    body: PaymentReturnRequest,
    service: NegotiationService = Depends(get_service),
):
    state = await service.payment_returned(flow_id, body.payment)
    return _respond(service, flow_id, state)


@router.post(
    "/{flow_id}/payment/retry", response_model=FlowResponse, summary="Retry payment"
)
@limiter.limit(settings.rate_limit)
async def retry_payment(
    request: Request,
    flow_id: str,
    service: NegotiationService = Depends(get_service),
):
    state = await service.retry_payment(flow_id)
    return _respond(service, flow_id, state)


@router.post("/{flow_id}/reset", response_model=FlowResponse, summary="Reset the flow")
@limiter.limit(settings.rate_limit)
async def reset_flow(
    request: Request,
    flow_id: str,
    service: NegotiationService = Depends(get_service),
):
    state = await service.reset(flow_id)
    return _respond(service, flow_id, state)
