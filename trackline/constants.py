"""
Shared constants for Trackline.

Centralizes endpoints, request signatures and map anchors used by the
providers, the orchestrator and the renderer.
"""

from typing import Dict, Tuple

# ── Upstream services ──

AGGREGATOR_BASE_URL = "https://www.aftership.com"
GEOCODER_BASE_URL = "https://nominatim.openstreetmap.org"
GEOCODER_USER_AGENT = "Trackline/0.1"
UNIVERSAL_TRACKER_URL = "https://www.17track.net/en/track?nums={id}"

# Browser-like signature for the aggregator page fetch
BROWSER_HEADERS: Dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

DEFAULT_TIMEOUT = 15.0

# ── Map anchors ──

HUB_COORDS: Tuple[float, float] = (6.9608, 79.8878)
HUB_LABEL = "Orugodawatta Hub"

ORIGIN_COORDS: Tuple[float, float] = (7.1808, 79.8841)
ORIGIN_LABEL = "BIA Airport"

DEFAULT_DESTINATION_COORDS: Tuple[float, float] = (51.47, -0.4543)
DEFAULT_DESTINATION_LABEL = "London (LHR)"

DEFAULT_PATH_POINTS = 100
