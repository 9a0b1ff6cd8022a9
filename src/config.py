"""Centralised application settings loaded from environment / .env file."""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Route / fare service
    trip_service_url: str = "http://localhost:8080"
    route_timeout_seconds: float = 10.0

    # Payment gateway
    payment_gateway_url: str = "http://localhost:8081"
    payment_gateway_key: Optional[str] = None  # publishable / client key
    gateway_timeout_seconds: float = 5.0
    use_mock_sessions: bool = True  # issue cs_test_mock_session_* when no session is supplied
    default_currency: str = "usd"

    # Return channel
    app_url: str = "http://localhost:3000"

    # Session state
    session_store: str = "memory"  # "memory" | "redis"
    redis_url: str = "redis://localhost:6379/0"
    session_ttl_seconds: int = 3600
    handoff_lock_ttl_seconds: int = 30

    # API
    rate_limit: str = "100/minute"
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}

    @property
    def payment_configured(self) -> bool:
        return bool(self.payment_gateway_key)


settings = Settings()
