"""
FastAPI application factory.

* Registers routes for the ride negotiation flow, entry screen and admin.
* Runs explicit environment setup (logging, map marker icon) on startup.
* Maps the flow error taxonomy onto HTTP responses.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.api.middleware import limiter
from src.api.routes import admin, entry, flows
from src.config import settings
from src.domain.errors import (
    ConfigurationError,
    FlowError,
    FlowNotFound,
    GatewayHandoffError,
    HandoffInProgress,
    InvalidSelection,
    InvalidStateTransition,
    OperationInFlight,
    RouteServiceError,
)
from src.environment import setup_environment
from src.infrastructure.redis_client import close_redis

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: list[tuple[type[FlowError], int]] = [
    (FlowNotFound, 404),
    (InvalidSelection, 422),
    (InvalidStateTransition, 409),
    (OperationInFlight, 409),
    (HandoffInProgress, 409),
    (ConfigurationError, 503),
    (RouteServiceError, 502),
    (GatewayHandoffError, 502),
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Set up the process environment on startup; close Redis on shutdown."""
    setup_environment(settings.log_level)
    yield
    if settings.session_store == "redis":
        await close_redis()


async def flow_error_handler(request: Request, exc: FlowError) -> JSONResponse:
    status = next(
        (code for err, code in _STATUS_BY_ERROR if isinstance(exc, err)), 400
    )
    if status >= 500:
        logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc)
    return JSONResponse(
        status_code=status,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="Ride Negotiation API",
        description=(
            "Turns a rider's or driver's intent into a priced, confirmed "
            "trip and a payment handoff.  Each flow is a small state "
            "machine: role, vehicle class or fare quotes, fare commitment, "
            "checkout."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(FlowError, flow_error_handler)

    # Routers
    app.include_router(flows.router, prefix="/api/v1")
    app.include_router(entry.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
