"""
Fare Selection Controller
=========================

Turns a ``TripPreview`` into displayable options and reports the rider's
choice back into the flow.  Options keep the order the route / fare service
returned; nothing here ranks by price.
"""

from __future__ import annotations

from dataclasses import dataclass

from .catalog import PackageMeta, lookup
from .fares import RouteFare, TripPreview, format_distance, format_duration, format_price
from .flow import FlowState


@dataclass(frozen=True)
class FareOption:
    fare: RouteFare
    package: PackageMeta
    price: str

    @property
    def priced(self) -> bool:
        return self.fare.is_priced


@dataclass(frozen=True)
class FareListing:
    distance: str
    duration: str
    options: tuple[FareOption, ...]

    @property
    def is_empty(self) -> bool:
        return not self.options


class FareSelectionController:
    """High-level API used by the negotiation service for the fare screen."""

    def listing(self, trip: TripPreview) -> FareListing:
        options = tuple(
            FareOption(
                fare=fare,
                package=lookup(fare.package_slug),
                price=format_price(fare.total_price_in_cents),
            )
            for fare in trip.ride_fares
        )
        return FareListing(
            distance=format_distance(trip.distance_meters),
            duration=format_duration(trip.duration_seconds),
            options=options,
        )

    def select_fare(self, state: FlowState, fare: RouteFare) -> None:
        """Commit to *fare*; raises ``InvalidSelection`` for a stale reference."""
        state.select_fare(fare)

    def cancel(self, state: FlowState) -> None:
        state.cancel_fare_selection()
