"""
Fare model value objects.

``TripPreview`` and ``RouteFare`` are produced by the route / fare service
and are read-only here.  ``PaymentSession`` carries an explicit
``SessionKind`` decided once at construction from the identifier; consumers
branch on the kind, never on the identifier's text.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

from .enums import MOCK_SESSION_PREFIX, PackageSlug, SessionKind

PRICE_UNAVAILABLE = "Price unavailable"


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class RouteFare:
    id: str
    package_slug: PackageSlug
    total_price_in_cents: Optional[int] = None  # None -> quote unavailable

    def __post_init__(self) -> None:
        if self.total_price_in_cents is not None and self.total_price_in_cents < 0:
            raise ValueError("total_price_in_cents must be non-negative")

    @property
    def is_priced(self) -> bool:
        return self.total_price_in_cents is not None


@dataclass(frozen=True)
class TripPreview:
    distance_meters: float = 0.0
    duration_seconds: float = 0.0
    ride_fares: tuple[RouteFare, ...] = ()

    def __post_init__(self) -> None:
        if self.distance_meters < 0 or self.duration_seconds < 0:
            raise ValueError("distance and duration must be non-negative")

    def has_fare(self, fare: RouteFare) -> bool:
        return fare in self.ride_fares

    def find_fare(self, fare_id: str) -> Optional[RouteFare]:
        for fare in self.ride_fares:
            if fare.id == fare_id:
                return fare
        return None


@dataclass(frozen=True)
class PaymentSession:
    session_id: str
    amount: float
    currency: str
    kind: Optional[SessionKind] = None

    def __post_init__(self) -> None:
        derived = (
            SessionKind.MOCK
            if self.session_id.startswith(MOCK_SESSION_PREFIX)
            else SessionKind.CHECKOUT
        )
        if self.kind is None:
            object.__setattr__(self, "kind", derived)
        elif self.kind is not derived:
            raise ValueError(
                f"Session {self.session_id!r} cannot be of kind {self.kind.value}"
            )

    @classmethod
    def issue(cls, session_id: str, amount: float, currency: str) -> "PaymentSession":
        """Build a descriptor from the wire; the kind follows the identifier."""
        return cls(session_id=session_id, amount=amount, currency=currency)

    @property
    def is_mock(self) -> bool:
        return self.kind is SessionKind.MOCK


def issue_mock_session(amount_in_cents: Optional[int], currency: str) -> PaymentSession:
    """Issue a self-resolving session, as the payment service does without a gateway."""
    session_id = f"{MOCK_SESSION_PREFIX}{int(time.time())}"
    amount = (amount_in_cents or 0) / 100
    return PaymentSession(
        session_id=session_id, amount=amount, currency=currency, kind=SessionKind.MOCK
    )


# ── Display helpers ───────────────────────────────────────────────────


def format_price(total_price_in_cents: Optional[int]) -> str:
    """``1050`` -> ``"$10.50"``; a missing quote is never shown as zero."""
    if total_price_in_cents is None:
        return PRICE_UNAVAILABLE
    return f"${total_price_in_cents / 100:.2f}"


def format_distance(meters: float) -> str:
    return f"{meters / 1000:.1f} km"


def format_duration(seconds: float) -> str:
    return f"{round(seconds / 60)} min"
