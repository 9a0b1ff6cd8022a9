"""Tests for the route / fare service and checkout gateway HTTP clients."""

import httpx
import pytest

from src.domain.enums import PackageSlug
from src.domain.errors import GatewayHandoffError, RouteServiceError
from src.infrastructure.checkout_gateway import HttpCheckoutGateway
from src.infrastructure.route_client import Coordinate, RouteFareClient, parse_preview

PICKUP = Coordinate(latitude=52.52, longitude=13.40)
DESTINATION = Coordinate(latitude=52.50, longitude=13.45)


def _route_client(handler) -> RouteFareClient:
    return RouteFareClient("http://trips.test/", transport=httpx.MockTransport(handler))


def _gateway(handler) -> HttpCheckoutGateway:
    return HttpCheckoutGateway("http://pay.test", transport=httpx.MockTransport(handler))


class TestParsePreview:
    def test_snake_case_payload(self):
        trip = parse_preview(
            {
                "route": {"routes": [{"distance": 5000, "duration": 600}]},
                "ride_fares": [
                    {"id": "r1", "package_slug": "economy", "total_price_in_cents": 1200},
                    {"id": "r2", "package_slug": "xl"},
                ],
            }
        )
        assert trip.distance_meters == 5000
        assert trip.duration_seconds == 600
        assert trip.ride_fares[0].package_slug is PackageSlug.ECONOMY
        assert trip.ride_fares[1].total_price_in_cents is None

    def test_gateway_envelope_and_camel_case(self):
        trip = parse_preview(
            {
                "data": {
                    "route": {"routes": [{"distance": 100, "duration": 30}]},
                    "rideFares": [
                        {"id": "r1", "packageSlug": "comfort", "totalPriceInCents": 550}
                    ],
                }
            }
        )
        assert trip.ride_fares[0].total_price_in_cents == 550

    def test_no_coverage_is_empty_preview(self):
        trip = parse_preview({"route": {"routes": []}, "ride_fares": None})
        assert trip.ride_fares == ()
        assert trip.distance_meters == 0

    def test_unknown_package_is_contract_error(self):
        with pytest.raises(RouteServiceError):
            parse_preview({"ride_fares": [{"id": "r1", "package_slug": "boat"}]})


class TestRouteFareClient:
    @pytest.mark.asyncio
    async def test_posts_preview_request(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = request.read()
            return httpx.Response(
                200,
                json={
                    "route": {"routes": [{"distance": 5000, "duration": 600}]},
                    "ride_fares": [
                        {"id": "r1", "package_slug": "economy", "total_price_in_cents": 1200}
                    ],
                },
            )

        trip = await _route_client(handler).preview("user-1", PICKUP, DESTINATION)
        assert seen["url"] == "http://trips.test/api/preview"
        assert b'"user_id":"user-1"' in seen["body"].replace(b" ", b"")
        assert trip.ride_fares[0].id == "r1"

    @pytest.mark.asyncio
    async def test_non_200_raises(self):
        client = _route_client(lambda request: httpx.Response(500, text="boom"))
        with pytest.raises(RouteServiceError) as exc_info:
            await client.preview("user-1", PICKUP, DESTINATION)
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_timeout_raises(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(RouteServiceError, match="timed out"):
            await _route_client(handler).preview("user-1", PICKUP, DESTINATION)

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self):
        client = _route_client(lambda request: httpx.Response(200, text="not json"))
        with pytest.raises(RouteServiceError):
            await client.preview("user-1", PICKUP, DESTINATION)


class TestHttpCheckoutGateway:
    @pytest.mark.asyncio
    async def test_returns_checkout_url(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["Authorization"]
            seen["path"] = request.url.path
            return httpx.Response(200, json={"url": "https://checkout.test/cs_1"})

        url = await _gateway(handler).redirect("cs_1", "pk_test_123")
        assert url == "https://checkout.test/cs_1"
        assert seen == {"auth": "Bearer pk_test_123", "path": "/v1/checkout/redirect"}

    @pytest.mark.asyncio
    async def test_error_message_preserved(self):
        gateway = _gateway(
            lambda request: httpx.Response(
                400, json={"error": {"message": "No such checkout.session"}}
            )
        )
        with pytest.raises(GatewayHandoffError, match="No such checkout.session") as exc_info:
            await gateway.redirect("cs_1", "pk_test_123")
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_missing_url_raises(self):
        gateway = _gateway(lambda request: httpx.Response(200, json={}))
        with pytest.raises(GatewayHandoffError):
            await gateway.redirect("cs_1", "pk_test_123")

    @pytest.mark.asyncio
    async def test_network_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(GatewayHandoffError, match="unreachable"):
            await _gateway(handler).redirect("cs_1", "pk_test_123")
