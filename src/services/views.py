"""
View rendering.

Maps every ``FlowStage`` to the screen the client should mount.  The
renderer table is checked for completeness at import time, so there is no
stage that renders blank.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from src.domain.catalog import all_packages, lookup
from src.domain.enums import FlowStage
from src.domain.fare_selection import FareListing, FareSelectionController
from src.domain.fares import format_price
from src.domain.flow import FlowState
from src.domain.payment import PaymentHandoff


@dataclass(frozen=True)
class View:
    name: str
    title: str
    message: Optional[str] = None
    data: dict[str, Any] = field(default_factory=dict)


@dataclass
class RenderContext:
    controller: FareSelectionController
    handoff: PaymentHandoff
    loading: bool = False


def _package_dict(meta) -> dict[str, Any]:
    return {
        "slug": meta.slug.value,
        "name": meta.display_name,
        "description": meta.description,
        "icon": meta.icon,
    }


def listing_dict(listing: FareListing) -> dict[str, Any]:
    return {
        "distance": listing.distance,
        "duration": listing.duration,
        "empty": listing.is_empty,
        "options": [
            {
                "fare_id": o.fare.id,
                "package": _package_dict(o.package),
                "price": o.price,
                "priced": o.priced,
                "total_price_in_cents": o.fare.total_price_in_cents,
            }
            for o in listing.options
        ],
    }


# ── Per-stage renderers ───────────────────────────────────────────────


def _role_selection() -> View:
    return View(
        name="role_selection",
        title="RideShare",
        message="Choose how you want to move today.",
        data={"roles": ["rider", "driver"]},
    )


def _initial(state: FlowState, ctx: RenderContext) -> View:
    return _role_selection()


def _driver_onboarding(state: FlowState, ctx: RenderContext) -> View:
    return View(
        name="driver_package_selection",
        title="Select Your Vehicle Class",
        message="Choose the service level you want to provide.",
        data={"packages": [_package_dict(m) for m in all_packages()]},
    )


def _driver_active(state: FlowState, ctx: RenderContext) -> View:
    assert state.package_slug is not None
    return View(
        name="driver_map",
        title="Driver Map",
        data={"package": _package_dict(lookup(state.package_slug))},
    )


def _rider_browsing(state: FlowState, ctx: RenderContext) -> View:
    if state.awaiting_quote:
        return View(name="rider_loading", title="Finding rides", message="Calculating fares...")
    return View(
        name="rider_map",
        title="Where to?",
        message=state.quote_error,
        data={"has_previous_trip": state.trip is not None},
    )


def _rider_fare_selection(state: FlowState, ctx: RenderContext) -> View:
    assert state.trip is not None
    listing = ctx.controller.listing(state.trip)
    if listing.is_empty:
        return View(
            name="fare_list_empty",
            title="Select Ride",
            message="No rides are available for this route.",
            data=listing_dict(listing),
        )
    return View(name="fare_list", title="Select Ride", data=listing_dict(listing))


def _payment_pending(state: FlowState, ctx: RenderContext) -> View:
    assert state.selected_fare is not None
    price = format_price(state.selected_fare.total_price_in_cents)
    button = ctx.handoff.button(price, loading=ctx.loading)
    data: dict[str, Any] = {
        "fare_id": state.selected_fare.id,
        "package": _package_dict(lookup(state.selected_fare.package_slug)),
        "price": price,
        "button": {
            "label": button.label,
            "disabled": button.disabled or state.redirect_url is not None,
            "loading": button.loading,
            "configured": button.configured,
        },
        "redirect_url": state.redirect_url,
    }
    return View(
        name="payment",
        title="Confirm Payment",
        message=None if button.configured else button.label,
        data=data,
    )


def _payment_succeeded(state: FlowState, ctx: RenderContext) -> View:
    return View(
        name="payment_success",
        title="Payment Successful!",
        message="Your ride has been confirmed and is on the way.",
    )


def _payment_failed(state: FlowState, ctx: RenderContext) -> View:
    return View(
        name="payment_failed",
        title="Payment Failed",
        message=state.failure_reason or "The payment could not be completed.",
        data={"can_retry": True},
    )


_RENDERERS: dict[FlowStage, Callable[[FlowState, RenderContext], View]] = {
    FlowStage.INITIAL: _initial,
    FlowStage.DRIVER_ONBOARDING: _driver_onboarding,
    FlowStage.DRIVER_ACTIVE: _driver_active,
    FlowStage.RIDER_BROWSING: _rider_browsing,
    FlowStage.RIDER_FARE_SELECTION: _rider_fare_selection,
    FlowStage.PAYMENT_PENDING: _payment_pending,
    FlowStage.PAYMENT_SUCCEEDED: _payment_succeeded,
    FlowStage.PAYMENT_FAILED: _payment_failed,
}

if set(_RENDERERS) != set(FlowStage):
    raise RuntimeError("Every flow stage needs a view renderer")


def render(state: FlowState, ctx: RenderContext) -> View:
    return _RENDERERS[state.stage](state, ctx)


def entry_view(payment: Optional[str]) -> View:
    """Entry screen; ``payment=success`` comes back from external checkout."""
    if payment == "success":
        return View(
            name="payment_confirmation",
            title="Payment Successful!",
            message="Your ride has been confirmed and is on the way.",
        )
    return _role_selection()
