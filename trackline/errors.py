"""
Trackline Errors - Failure taxonomy for the resolution pipeline

Every error is contained per query. Providers raise only InputEmpty and
UpstreamFetchFailed; the rest are recorded on results and in logs.
"""

from typing import Optional


class TrackingError(Exception):
    """Base class for tracking pipeline errors"""
    error_type = "tracking_error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class InputEmpty(TrackingError):
    """No identifier supplied. Callers treat this as a no-op."""
    error_type = "input_empty"


class UpstreamFetchFailed(TrackingError):
    """Aggregator or registry returned non-2xx, or the transport failed"""
    error_type = "upstream_fetch_failed"

    def __init__(self, message: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class GeocodeUnavailable(TrackingError):
    """Geocoding produced no coordinates"""
    error_type = "geocode_unavailable"


class MalformedEmbeddedData(TrackingError):
    """An embedded JSON-LD or checkpoint block failed to parse"""
    error_type = "malformed_embedded_data"


class NoDataExtracted(TrackingError):
    """Every extraction probe came back empty"""
    error_type = "no_data_extracted"
