"""
Payment Session Handoff
=======================

Turns a committed fare into a resolved payment outcome.

* **Mock sessions** (``SessionKind.MOCK``) resolve to success immediately
  and never reach the gateway.  This is a documented bypass for demos and
  tests, not a failure fallback.
* **Checkout sessions** are handed to the gateway, which answers with a
  redirect URL.  Success is observed later through the return channel
  (``payment=success``); a failed handoff resolves the flow to
  ``PAYMENT_FAILED`` with the reason kept for display.
* Without a gateway client key nothing is attempted: the pay control is
  rendered disabled and :meth:`PaymentHandoff.handoff` raises
  ``ConfigurationError``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .enums import FlowStage, PaymentOutcome
from .errors import (
    ConfigurationError,
    GatewayHandoffError,
    HandoffInProgress,
    InvalidStateTransition,
)
from .fares import PaymentSession
from .flow import FlowState

logger = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = "Payment gateway key is not configured"


class CheckoutGateway(ABC):
    @abstractmethod
    async def redirect(self, session_id: str, client_key: str) -> str:
        """Return the checkout URL for *session_id* or raise ``GatewayHandoffError``."""


@dataclass(frozen=True)
class PaymentButton:
    label: str
    disabled: bool
    loading: bool
    configured: bool


@dataclass(frozen=True)
class HandoffResult:
    outcome: Optional[PaymentOutcome]
    redirect_url: Optional[str] = None
    reason: Optional[str] = None


class PaymentHandoff:
    def __init__(
        self,
        gateway: CheckoutGateway,
        client_key: Optional[str],
        lock_factory: Callable[[str], Any],
    ):
        self.gateway = gateway
        self.client_key = client_key
        self.lock_factory = lock_factory

    @property
    def configured(self) -> bool:
        return bool(self.client_key)

    def button(self, amount_label: str, loading: bool = False) -> PaymentButton:
        if not self.configured:
            return PaymentButton(
                label=NOT_CONFIGURED_MESSAGE, disabled=True, loading=False, configured=False
            )
        if loading:
            return PaymentButton(label="Loading...", disabled=True, loading=True, configured=True)
        return PaymentButton(
            label=f"Pay {amount_label}", disabled=False, loading=False, configured=True
        )

    async def handoff(self, state: FlowState, session: PaymentSession) -> HandoffResult:
        if not self.configured:
            raise ConfigurationError(NOT_CONFIGURED_MESSAGE)
        if state.stage is not FlowStage.PAYMENT_PENDING:
            raise InvalidStateTransition(
                f"Cannot start payment while flow is in {state.stage.value}"
            )

        if state.redirect_url is not None:
            if state.payment_session == session:
                # Same session already redirected: hand back the same checkout.
                return HandoffResult(outcome=None, redirect_url=state.redirect_url)
            raise HandoffInProgress("A checkout has already started for this fare")

        lock = self.lock_factory(f"payment_handoff:{session.session_id}")
        if not await lock.acquire():
            raise HandoffInProgress(f"Handoff already running for {session.session_id}")

        try:
            if session.is_mock:
                logger.info("Mock payment session %s, resolving locally", session.session_id)
                state.attach_session(session)
                state.payment_resolved(PaymentOutcome.SUCCESS)
                return HandoffResult(outcome=PaymentOutcome.SUCCESS)

            try:
                url = await self.gateway.redirect(session.session_id, self.client_key)
            except GatewayHandoffError as exc:
                logger.warning("Checkout handoff failed for %s: %s", session.session_id, exc)
                state.attach_session(session)
                state.payment_resolved(PaymentOutcome.FAILURE, reason=str(exc))
                return HandoffResult(outcome=PaymentOutcome.FAILURE, reason=str(exc))

            state.record_checkout(session, url)
            logger.info("Checkout handoff for %s redirected", session.session_id)
            return HandoffResult(outcome=None, redirect_url=url)
        finally:
            await lock.release()
