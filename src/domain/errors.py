"""Exception hierarchy for the ride negotiation flow."""

from __future__ import annotations


class FlowError(Exception):
    """Base exception for all flow errors."""


class InvalidStateTransition(FlowError):
    """Raised when a trigger is not legal from the current stage."""


class InvalidSelection(FlowError):
    """Fare or package reference is not in the current trip / catalog."""


class ConfigurationError(FlowError):
    """Required gateway configuration is missing.  Never retried."""


class GatewayHandoffError(FlowError):
    """The payment gateway refused or failed the checkout handoff."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class HandoffInProgress(FlowError):
    """A handoff for the same payment session is already running."""


class OperationInFlight(FlowError):
    """Another transition for the same flow is still awaiting a response."""


class RouteServiceError(FlowError):
    """Route / fare service call failed (network, non-200, bad payload)."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class FlowNotFound(FlowError):
    """No flow session is stored under the given id."""
