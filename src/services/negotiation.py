"""
Ride Negotiation Service
========================

Owns one ``FlowState`` per flow id and runs every trigger against it.

Concurrency
-----------
Each trigger holds the flow's lock until it has run to completion,
including any awaited call to the route / fare service or the payment
gateway.  An event arriving meanwhile is refused with ``OperationInFlight``
(the client shows its control disabled).  State is read, mutated and saved
inside that window; a refused trigger never reaches ``save``.

The quote spinner is derived from the stored ``awaiting_quote`` flag, so
every worker sharing a Redis store renders it.  The payment button's
``loading`` flag comes from ``_in_flight``, which is local to this process:
a GET served by another worker shows the button enabled and the click is
then refused by the shared flow lock.

Error boundary
--------------
Route service and gateway failures become FlowState values
(``quote_error`` / ``PAYMENT_FAILED``).  Configuration, selection and
transition errors propagate to the API layer unchanged.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Optional

from src.domain.enums import FlowStage, PackageSlug, PaymentOutcome, Role
from src.domain.errors import (
    ConfigurationError,
    FlowNotFound,
    InvalidStateTransition,
    OperationInFlight,
    RouteServiceError,
)
from src.domain.fare_selection import FareListing, FareSelectionController
from src.domain.fares import PaymentSession, RouteFare, TripPreview, issue_mock_session
from src.domain.flow import FlowState, external_reset
from src.domain.payment import HandoffResult, PaymentHandoff
from src.infrastructure.route_client import Coordinate, RouteFareClient
from src.infrastructure.session_store import FlowStore
from src.services.views import RenderContext, View, render

logger = logging.getLogger(__name__)

CHECKOUT_CANCELLED = "Checkout was cancelled"
QUOTE_ABORTED = "Fare request was interrupted, please try again"


class NegotiationService:
    def __init__(
        self,
        store: FlowStore,
        route_client: RouteFareClient,
        handoff: PaymentHandoff,
        lock_factory: Callable[[str], Any],
        *,
        use_mock_sessions: bool = True,
        currency: str = "usd",
    ):
        self.store = store
        self.route_client = route_client
        self.handoff = handoff
        self.lock_factory = lock_factory
        self.controller = FareSelectionController()
        self.use_mock_sessions = use_mock_sessions
        self.currency = currency
        self._in_flight: set[str] = set()

    # ── Plumbing ──────────────────────────────────────────────────

    async def _load(self, flow_id: str) -> FlowState:
        state = await self.store.get(flow_id)
        if state is None:
            raise FlowNotFound(f"Flow {flow_id} not found")
        return state

    @asynccontextmanager
    async def _exclusive(self, flow_id: str) -> AsyncIterator[FlowState]:
        lock = self.lock_factory(f"flow:{flow_id}")
        if not await lock.acquire():
            raise OperationInFlight(f"Flow {flow_id} is busy")
        self._in_flight.add(flow_id)
        try:
            yield await self._load(flow_id)
        finally:
            self._in_flight.discard(flow_id)
            await lock.release()

    # ── Queries ───────────────────────────────────────────────────

    async def start(self) -> tuple[str, FlowState]:
        flow_id, state = await self.store.create()
        logger.info("Flow %s started", flow_id)
        return flow_id, state

    async def get(self, flow_id: str) -> FlowState:
        return await self._load(flow_id)

    async def view(self, flow_id: str) -> View:
        state = await self._load(flow_id)
        return self.render(flow_id, state)

    def render(self, flow_id: str, state: FlowState) -> View:
        ctx = RenderContext(
            controller=self.controller,
            handoff=self.handoff,
            loading=flow_id in self._in_flight,
        )
        return render(state, ctx)

    async def fares(self, flow_id: str) -> FareListing:
        state = await self._load(flow_id)
        if state.stage is not FlowStage.RIDER_FARE_SELECTION or state.trip is None:
            raise InvalidStateTransition("No trip is being priced for this flow")
        return self.controller.listing(state.trip)

    # ── Role & driver ─────────────────────────────────────────────

    async def choose_role(self, flow_id: str, role: Role) -> FlowState:
        async with self._exclusive(flow_id) as state:
            state.choose_role(role)
            await self.store.save(flow_id, state)
        logger.info("Flow %s role=%s", flow_id, role.value)
        return state

    async def select_package(self, flow_id: str, slug: PackageSlug) -> FlowState:
        async with self._exclusive(flow_id) as state:
            state.select_package(slug)
            await self.store.save(flow_id, state)
        return state

    # ── Rider ─────────────────────────────────────────────────────

    async def request_trip(
        self,
        flow_id: str,
        user_id: str,
        pickup: Coordinate,
        destination: Coordinate,
    ) -> FlowState:
        async with self._exclusive(flow_id) as state:
            state.request_trip()
            await self.store.save(flow_id, state)
            try:
                preview = await self.route_client.preview(user_id, pickup, destination)
            except RouteServiceError as exc:
                logger.warning("Trip preview failed for flow %s: %s", flow_id, exc)
                state.quote_failed(str(exc))
            except BaseException:
                logger.warning("Trip preview aborted for flow %s", flow_id)
                state.quote_failed(QUOTE_ABORTED)
                await self.store.save(flow_id, state)
                raise
            else:
                state.trip_computed(preview)
                logger.info(
                    "Flow %s priced with %d fares", flow_id, len(preview.ride_fares)
                )
            await self.store.save(flow_id, state)
        return state

    async def trip_computed(self, flow_id: str, preview: TripPreview) -> FlowState:
        async with self._exclusive(flow_id) as state:
            state.trip_computed(preview)
            await self.store.save(flow_id, state)
        return state

    async def select_fare(self, flow_id: str, fare: RouteFare) -> FlowState:
        async with self._exclusive(flow_id) as state:
            self.controller.select_fare(state, fare)
            await self.store.save(flow_id, state)
        logger.info("Flow %s selected fare %s", flow_id, fare.id)
        return state

    async def cancel(self, flow_id: str) -> FlowState:
        async with self._exclusive(flow_id) as state:
            self.controller.cancel(state)
            await self.store.save(flow_id, state)
        return state

    # ── Payment ───────────────────────────────────────────────────

    async def pay(
        self, flow_id: str, session: Optional[PaymentSession] = None
    ) -> tuple[FlowState, HandoffResult]:
        async with self._exclusive(flow_id) as state:
            if session is None:
                session = self._default_session(state)
            result = await self.handoff.handoff(state, session)
            await self.store.save(flow_id, state)
        return state, result

    def _default_session(self, state: FlowState) -> PaymentSession:
        if state.payment_session is not None:
            return state.payment_session
        if not self.use_mock_sessions:
            raise ConfigurationError("No payment session was supplied")
        if state.selected_fare is None:
            raise InvalidStateTransition("No fare has been selected")
        return issue_mock_session(state.selected_fare.total_price_in_cents, self.currency)

    async def payment_returned(self, flow_id: str, payment: str) -> FlowState:
        """Resolve a redirected checkout from the return-channel marker."""
        async with self._exclusive(flow_id) as state:
            if state.stage is not FlowStage.PAYMENT_PENDING or state.redirect_url is None:
                raise InvalidStateTransition("No checkout is awaiting a result")
            if payment == "success":
                state.payment_resolved(PaymentOutcome.SUCCESS)
            else:
                state.payment_resolved(PaymentOutcome.FAILURE, reason=CHECKOUT_CANCELLED)
            await self.store.save(flow_id, state)
        logger.info("Flow %s checkout returned payment=%s", flow_id, payment)
        return state

    async def retry_payment(self, flow_id: str) -> FlowState:
        async with self._exclusive(flow_id) as state:
            state.retry_payment()
            await self.store.save(flow_id, state)
        return state

    async def reset(self, flow_id: str) -> FlowState:
        async with self._exclusive(flow_id):
            state = external_reset()
            await self.store.save(flow_id, state)
        logger.info("Flow %s reset", flow_id)
        return state
