"""
Trackline - Shipment tracking resolution service

Trackline takes a raw tracking identifier and turns it into something a
tracking page can show: a redirect to the carrier's own portal, or a
unified shipment view with a normalized status, a business phase and a
great-circle flight path for the map.

Quick Start:
    from trackline import Trackline

    app = Trackline("config.yaml")
    result = await app.resolve("ALK-2026-00482")

    if result.is_redirect():
        print(result.redirect_url)
    elif result.is_ready():
        print(result.map_status.value, result.phase_message)
    else:
        print(result.error_message, result.fallback_url)

Building blocks:
    from trackline.providers.shipment import match_carrier, parse_tracking_html
    from trackline.providers.geo import great_circle_points
    from trackline.orchestrator import ResolutionOrchestrator, TrackingSession
    from trackline.rendering import MapView
"""

__version__ = "0.1.0"

from .app import Trackline
from .errors import (
    GeocodeUnavailable,
    InputEmpty,
    MalformedEmbeddedData,
    NoDataExtracted,
    TrackingError,
    UpstreamFetchFailed,
)
from .models import (
    BusinessPhase,
    CarrierMatch,
    CarrierTag,
    Checkpoint,
    NormalizedStatus,
    ScrapedResult,
    ShipmentRecord,
    TrackingQuery,
)
from .result import MapPayload, ResolutionResult, ResolutionSource, ResolutionState

__all__ = [
    "BusinessPhase",
    "CarrierMatch",
    "CarrierTag",
    "Checkpoint",
    "GeocodeUnavailable",
    "InputEmpty",
    "MalformedEmbeddedData",
    "MapPayload",
    "NoDataExtracted",
    "NormalizedStatus",
    "ResolutionResult",
    "ResolutionSource",
    "ResolutionState",
    "ScrapedResult",
    "ShipmentRecord",
    "TrackingError",
    "TrackingQuery",
    "Trackline",
    "UpstreamFetchFailed",
]
