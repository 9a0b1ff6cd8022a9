"""
Checkout gateway client.

POST {payment_gateway_url}/v1/checkout/redirect  -- ``{"session_id": ...}``

The client key travels as a bearer token.  Any transport error, timeout,
non-2xx answer or missing ``url`` is a ``GatewayHandoffError``; there is a
single attempt per handoff.
"""

from __future__ import annotations

import logging

import httpx

from src.domain.errors import GatewayHandoffError
from src.domain.payment import CheckoutGateway

logger = logging.getLogger(__name__)


class HttpCheckoutGateway(CheckoutGateway):
    def __init__(self, base_url: str, timeout: float = 5.0, transport=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def redirect(self, session_id: str, client_key: str) -> str:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                resp = await client.post(
                    f"{self.base_url}/v1/checkout/redirect",
                    json={"session_id": session_id},
                    headers={"Authorization": f"Bearer {client_key}"},
                )
        except httpx.TimeoutException as exc:
            raise GatewayHandoffError("Payment gateway timed out") from exc
        except httpx.HTTPError as exc:
            raise GatewayHandoffError(f"Payment gateway unreachable: {exc}") from exc

        if resp.is_error:
            logger.error("Gateway returned status %d for %s", resp.status_code, session_id)
            raise GatewayHandoffError(
                _error_message(resp), status_code=resp.status_code
            )

        try:
            url = resp.json().get("url")
        except (ValueError, AttributeError):
            url = None
        if not url:
            raise GatewayHandoffError("Payment gateway did not return a checkout URL")
        return url


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return f"Payment gateway error ({resp.status_code})"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        error = error.get("message")
    return str(error) if error else f"Payment gateway error ({resp.status_code})"
