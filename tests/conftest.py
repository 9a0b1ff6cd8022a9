"""
Shared test fixtures.

The route / fare service and the payment gateway are replaced by in-process
fakes, and flows live in the in-memory store, so tests run without Redis or
any network access.
"""

from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.domain.enums import PackageSlug
from src.domain.errors import GatewayHandoffError, RouteServiceError
from src.domain.fares import RouteFare, TripPreview
from src.domain.payment import CheckoutGateway, PaymentHandoff
from src.infrastructure.locks import LocalLock
from src.infrastructure.session_store import MemoryFlowStore
from src.services.negotiation import NegotiationService

CLIENT_KEY = "pk_test_123"
CHECKOUT_URL = "https://checkout.example.com/c/pay/cs_live_abc"


# ── Fakes ─────────────────────────────────────────────────────────────


class FakeGateway(CheckoutGateway):
    def __init__(self, url: str = CHECKOUT_URL, error: Optional[str] = None):
        self.url = url
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def redirect(self, session_id: str, client_key: str) -> str:
        self.calls.append((session_id, client_key))
        if self.error:
            raise GatewayHandoffError(self.error)
        return self.url


class FakeRouteClient:
    def __init__(self, preview: Optional[TripPreview] = None, error: Optional[str] = None):
        self.preview_result = preview
        self.error = error
        self.calls = 0

    async def preview(self, user_id, pickup, destination) -> TripPreview:
        self.calls += 1
        if self.error:
            raise RouteServiceError(self.error)
        assert self.preview_result is not None
        return self.preview_result


# ── Data ──────────────────────────────────────────────────────────────


@pytest.fixture
def economy_fare() -> RouteFare:
    return RouteFare(id="r1", package_slug=PackageSlug.ECONOMY, total_price_in_cents=1200)


@pytest.fixture
def sample_trip(economy_fare) -> TripPreview:
    return TripPreview(
        distance_meters=5000,
        duration_seconds=600,
        ride_fares=(
            economy_fare,
            RouteFare(id="r2", package_slug=PackageSlug.PREMIUM, total_price_in_cents=None),
        ),
    )


@pytest.fixture
def empty_trip() -> TripPreview:
    return TripPreview(distance_meters=5000, duration_seconds=600, ride_fares=())


# ── Services ──────────────────────────────────────────────────────────


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def route_client(sample_trip) -> FakeRouteClient:
    return FakeRouteClient(preview=sample_trip)


@pytest.fixture
def handoff(gateway) -> PaymentHandoff:
    return PaymentHandoff(gateway=gateway, client_key=CLIENT_KEY, lock_factory=LocalLock)


@pytest.fixture
def service(route_client, handoff) -> NegotiationService:
    return NegotiationService(
        store=MemoryFlowStore(),
        route_client=route_client,
        handoff=handoff,
        lock_factory=LocalLock,
    )


@pytest_asyncio.fixture
async def client(service) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient backed by the in-memory negotiation service."""
    from src.api.app import create_app
    from src.api.dependencies import get_service
    from src.api.middleware import limiter

    limiter.reset()
    app = create_app()
    app.dependency_overrides[get_service] = lambda: service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
