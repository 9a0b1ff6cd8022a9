"""Every reachable flow stage renders a screen."""

import pytest

from src.domain.enums import FlowStage, PackageSlug, PaymentOutcome, Role
from src.domain.fare_selection import FareSelectionController
from src.domain.flow import FlowState
from src.domain.payment import NOT_CONFIGURED_MESSAGE, PaymentHandoff
from src.infrastructure.locks import LocalLock
from src.services.views import _RENDERERS, RenderContext, entry_view, render


@pytest.fixture
def ctx(handoff) -> RenderContext:
    return RenderContext(controller=FareSelectionController(), handoff=handoff)


def _rider(trip) -> FlowState:
    state = FlowState()
    state.choose_role(Role.RIDER)
    state.trip_computed(trip)
    return state


class TestRender:
    def test_initial(self, ctx):
        assert render(FlowState(), ctx).name == "role_selection"

    def test_driver_package_selection_lists_catalog(self, ctx):
        state = FlowState()
        state.choose_role(Role.DRIVER)
        view = render(state, ctx)
        assert view.name == "driver_package_selection"
        assert [p["slug"] for p in view.data["packages"]] == [s.value for s in PackageSlug]

    def test_driver_map(self, ctx):
        state = FlowState()
        state.choose_role(Role.DRIVER)
        state.select_package(PackageSlug.XL)
        assert render(state, ctx).data["package"]["name"] == "XL"

    def test_loading_differs_from_empty(self, ctx, empty_trip):
        state = FlowState()
        state.choose_role(Role.RIDER)
        state.request_trip()
        assert render(state, ctx).name == "rider_loading"

        state.trip_computed(empty_trip)
        view = render(state, ctx)
        assert view.name == "fare_list_empty"
        assert view.data["empty"] is True
        assert view.message

    def test_fare_list(self, ctx, sample_trip):
        view = render(_rider(sample_trip), ctx)
        assert view.name == "fare_list"
        prices = [o["price"] for o in view.data["options"]]
        assert prices == ["$12.00", "Price unavailable"]

    def test_payment_button(self, ctx, sample_trip, economy_fare):
        state = _rider(sample_trip)
        state.select_fare(economy_fare)
        view = render(state, ctx)
        assert view.name == "payment"
        assert view.data["button"]["label"] == "Pay $12.00"
        assert view.data["button"]["disabled"] is False

    def test_payment_not_configured(self, gateway, sample_trip, economy_fare):
        ctx = RenderContext(
            controller=FareSelectionController(),
            handoff=PaymentHandoff(gateway, None, LocalLock),
        )
        state = _rider(sample_trip)
        state.select_fare(economy_fare)
        view = render(state, ctx)
        assert view.data["button"]["disabled"] is True
        assert view.message == NOT_CONFIGURED_MESSAGE

    def test_payment_outcomes(self, ctx, sample_trip, economy_fare):
        state = _rider(sample_trip)
        state.select_fare(economy_fare)
        state.payment_resolved(PaymentOutcome.FAILURE, reason="card declined")
        view = render(state, ctx)
        assert view.name == "payment_failed"
        assert view.message == "card declined"

        state.retry_payment()
        state.payment_resolved(PaymentOutcome.SUCCESS)
        assert render(state, ctx).name == "payment_success"

    def test_every_stage_has_a_renderer(self):
        assert set(_RENDERERS) == set(FlowStage)


class TestEntryView:
    def test_payment_success_marker(self):
        assert entry_view("success").name == "payment_confirmation"

    def test_default_entry(self):
        assert entry_view(None).name == "role_selection"
        assert entry_view("cancel").name == "role_selection"
