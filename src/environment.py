"""
Process-level environment setup.

Runs once at startup (from the app lifespan).  Repeated calls are no-ops,
so tests and reloads can call it freely.  Nothing in the flow state machine
depends on it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarkerIcon:
    """Default map marker handed to the client's map widget."""

    icon_url: str = "/leaflet/images/marker-icon.png"
    shadow_url: str = "/leaflet/images/marker-shadow.png"
    icon_size: tuple[int, int] = (25, 41)
    icon_anchor: tuple[int, int] = (12, 41)


_marker_icon: Optional[MarkerIcon] = None


def setup_environment(log_level: str = "INFO") -> MarkerIcon:
    global _marker_icon
    if _marker_icon is not None:
        return _marker_icon
    logging.basicConfig(level=log_level.upper())
    _marker_icon = MarkerIcon()
    logger.info("Environment initialised (log level %s)", log_level.upper())
    return _marker_icon


def marker_icon() -> MarkerIcon:
    if _marker_icon is None:
        raise RuntimeError("setup_environment() has not been called")
    return _marker_icon
