"""Domain enumerations and state-transition rules."""

import enum


class Role(str, enum.Enum):
    UNSET = "unset"
    RIDER = "rider"
    DRIVER = "driver"


class PackageSlug(str, enum.Enum):
    ECONOMY = "economy"
    COMFORT = "comfort"
    PREMIUM = "premium"
    XL = "xl"


class FlowStage(str, enum.Enum):
    INITIAL = "initial"
    DRIVER_ONBOARDING = "driver_onboarding"
    DRIVER_ACTIVE = "driver_active"
    RIDER_BROWSING = "rider_browsing"
    RIDER_FARE_SELECTION = "rider_fare_selection"
    PAYMENT_PENDING = "payment_pending"
    PAYMENT_SUCCEEDED = "payment_succeeded"
    PAYMENT_FAILED = "payment_failed"


class PaymentOutcome(str, enum.Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class SessionKind(str, enum.Enum):
    MOCK = "mock"
    CHECKOUT = "checkout"


# Reserved by whatever backend issues payment sessions.
MOCK_SESSION_PREFIX = "cs_test_mock_session_"


# State machine: maps current stage -> set of valid next stages.
# ``external_reset`` is legal from every stage and is not listed here.
FLOW_TRANSITIONS: dict[FlowStage, set[FlowStage]] = {
    FlowStage.INITIAL: {FlowStage.DRIVER_ONBOARDING, FlowStage.RIDER_BROWSING},
    FlowStage.DRIVER_ONBOARDING: {FlowStage.DRIVER_ACTIVE},
    FlowStage.DRIVER_ACTIVE: set(),
    FlowStage.RIDER_BROWSING: {FlowStage.RIDER_FARE_SELECTION},
    FlowStage.RIDER_FARE_SELECTION: {
        FlowStage.PAYMENT_PENDING,
        FlowStage.RIDER_BROWSING,
    },
    FlowStage.PAYMENT_PENDING: {
        FlowStage.PAYMENT_SUCCEEDED,
        FlowStage.PAYMENT_FAILED,
    },
    FlowStage.PAYMENT_SUCCEEDED: set(),
    FlowStage.PAYMENT_FAILED: {FlowStage.PAYMENT_PENDING},
}
