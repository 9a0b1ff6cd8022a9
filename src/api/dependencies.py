"""FastAPI dependency injection helpers."""

from __future__ import annotations

from functools import partial
from typing import Optional

from src.config import settings
from src.domain.payment import PaymentHandoff
from src.infrastructure.checkout_gateway import HttpCheckoutGateway
from src.infrastructure.locks import DistributedLock, LocalLock
from src.infrastructure.redis_client import get_redis
from src.infrastructure.route_client import RouteFareClient
from src.infrastructure.session_store import MemoryFlowStore, RedisFlowStore
from src.services.negotiation import NegotiationService

_service: Optional[NegotiationService] = None


def build_service() -> NegotiationService:
    """Wire the negotiation service from ``settings``."""
    if settings.session_store == "redis":
        client = get_redis()
        store = RedisFlowStore(client, ttl_seconds=settings.session_ttl_seconds)
        lock_factory = partial(
            DistributedLock, client, ttl_seconds=settings.handoff_lock_ttl_seconds
        )
    else:
        store = MemoryFlowStore()
        lock_factory = LocalLock

    handoff = PaymentHandoff(
        gateway=HttpCheckoutGateway(
            settings.payment_gateway_url, timeout=settings.gateway_timeout_seconds
        ),
        client_key=settings.payment_gateway_key,
        lock_factory=lock_factory,
    )
    return NegotiationService(
        store=store,
        route_client=RouteFareClient(
            settings.trip_service_url, timeout=settings.route_timeout_seconds
        ),
        handoff=handoff,
        lock_factory=lock_factory,
        use_mock_sessions=settings.use_mock_sessions,
        currency=settings.default_currency,
    )


def get_service() -> NegotiationService:
    """Return the process-wide negotiation service, building it on first use."""
    global _service
    if _service is None:
        _service = build_service()
    return _service
