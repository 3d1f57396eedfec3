"""
Shipment providers - Carrier detection, aggregator scraping, status mapping
"""

from .carrier_detector import (
    get_fallback_url,
    get_rules,
    get_viewer_url,
    match_carrier,
    normalize_tracking_number,
)
from .extractors import parse_tracking_html
from .scraper import AggregatorScraper, user_friendly_error
from .shipment_repo import ShipmentRepository
from .status_map import (
    phase_for_milestone,
    phase_for_status,
    to_business_phase,
    to_normalized_status,
)

__all__ = [
    "AggregatorScraper",
    "ShipmentRepository",
    "get_fallback_url",
    "get_rules",
    "get_viewer_url",
    "match_carrier",
    "normalize_tracking_number",
    "parse_tracking_html",
    "phase_for_milestone",
    "phase_for_status",
    "to_business_phase",
    "to_normalized_status",
    "user_friendly_error",
]
