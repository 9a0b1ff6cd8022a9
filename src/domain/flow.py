"""
Role & Flow State Machine.

Patterns used
-------------
- **State Pattern** on ``FlowState``: every trigger checks its guard against
  ``FLOW_TRANSITIONS`` before touching any field, so a refused trigger
  leaves the state exactly as it was.
- ``external_reset`` is the only way back to ``INITIAL``; there are no
  partial resets.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .catalog import PACKAGES_META
from .enums import FLOW_TRANSITIONS, FlowStage, PackageSlug, PaymentOutcome, Role
from .errors import InvalidSelection, InvalidStateTransition
from .fares import PaymentSession, RouteFare, TripPreview

logger = logging.getLogger(__name__)


@dataclass
class FlowState:
    stage: FlowStage = FlowStage.INITIAL
    role: Role = Role.UNSET
    package_slug: Optional[PackageSlug] = None
    trip: Optional[TripPreview] = None
    selected_fare: Optional[RouteFare] = None
    payment_session: Optional[PaymentSession] = None
    payment_outcome: Optional[PaymentOutcome] = None
    failure_reason: Optional[str] = None
    redirect_url: Optional[str] = None
    awaiting_quote: bool = False
    quote_error: Optional[str] = None

    # ── Guards ────────────────────────────────────────────────────

    def _require_stage(self, *stages: FlowStage) -> None:
        if self.stage not in stages:
            expected = " or ".join(s.value for s in stages)
            raise InvalidStateTransition(
                f"Expected stage {expected}, flow is in {self.stage.value}"
            )

    def _check_target(self, target: FlowStage) -> None:
        if target not in FLOW_TRANSITIONS.get(self.stage, set()):
            raise InvalidStateTransition(
                f"Cannot transition from {self.stage.value} to {target.value}"
            )

    def _move(self, target: FlowStage) -> None:
        logger.debug("Flow transition %s -> %s", self.stage.value, target.value)
        self.stage = target

    # ── Role selection ────────────────────────────────────────────

    def choose_role(self, role: Role) -> None:
        if role is Role.UNSET:
            raise InvalidSelection("A role must be either rider or driver")
        target = (
            FlowStage.DRIVER_ONBOARDING if role is Role.DRIVER else FlowStage.RIDER_BROWSING
        )
        self._check_target(target)
        self.role = role
        self._move(target)

    # ── Driver ────────────────────────────────────────────────────

    def select_package(self, slug: PackageSlug) -> None:
        self._check_target(FlowStage.DRIVER_ACTIVE)
        if slug not in PACKAGES_META:
            raise InvalidSelection(f"Unknown package: {slug!r}")
        self.package_slug = slug
        self._move(FlowStage.DRIVER_ACTIVE)

    # ── Rider ─────────────────────────────────────────────────────

    def request_trip(self) -> None:
        """Mark a quote request as outstanding (loading, not empty)."""
        self._require_stage(FlowStage.RIDER_BROWSING)
        self.awaiting_quote = True
        self.quote_error = None

    def quote_failed(self, reason: str) -> None:
        self._require_stage(FlowStage.RIDER_BROWSING)
        self.awaiting_quote = False
        self.quote_error = reason

    def trip_computed(self, preview: TripPreview) -> None:
        self._check_target(FlowStage.RIDER_FARE_SELECTION)
        self.trip = preview
        self.selected_fare = None
        self.awaiting_quote = False
        self.quote_error = None
        self._move(FlowStage.RIDER_FARE_SELECTION)

    def select_fare(self, fare: RouteFare) -> None:
        self._check_target(FlowStage.PAYMENT_PENDING)
        if self.trip is None or not self.trip.has_fare(fare):
            raise InvalidSelection(f"Fare {fare.id!r} is not part of the current trip")
        self.selected_fare = fare
        self._move(FlowStage.PAYMENT_PENDING)

    def cancel_fare_selection(self) -> None:
        """Back to the map; the trip is kept so it can be re-browsed."""
        self._require_stage(FlowStage.RIDER_FARE_SELECTION)
        self.selected_fare = None
        self._move(FlowStage.RIDER_BROWSING)

    # ── Payment ───────────────────────────────────────────────────

    def attach_session(self, session: PaymentSession) -> None:
        self._require_stage(FlowStage.PAYMENT_PENDING)
        self.payment_session = session

    def record_checkout(self, session: PaymentSession, redirect_url: str) -> None:
        self.attach_session(session)
        self.redirect_url = redirect_url

    def payment_resolved(
        self, outcome: PaymentOutcome, reason: Optional[str] = None
    ) -> None:
        target = (
            FlowStage.PAYMENT_SUCCEEDED
            if outcome is PaymentOutcome.SUCCESS
            else FlowStage.PAYMENT_FAILED
        )
        self._check_target(target)
        if self.payment_outcome is not None:
            raise InvalidStateTransition("Payment outcome has already been recorded")
        self.payment_outcome = outcome
        self.failure_reason = reason if outcome is PaymentOutcome.FAILURE else None
        self._move(target)

    def retry_payment(self) -> None:
        self._require_stage(FlowStage.PAYMENT_FAILED)
        self.payment_outcome = None
        self.failure_reason = None
        self.payment_session = None
        self.redirect_url = None
        self._move(FlowStage.PAYMENT_PENDING)


def external_reset() -> FlowState:
    """A fresh state, equal to the one created at session start."""
    return FlowState()
