"""
Extraction strategies for aggregator tracking pages

Each strategy is a pure function (page) -> Fragment | None. The cascade in
parse_tracking_html() applies them in order; a strategy only fills fields
that are still open, so a value accepted by an earlier strategy is never
replaced by a later one.

A slot is open when it is unset, when it holds a provisional value, or
when its value fails the field's quality check.
"""

import html
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, Iterator, Optional, Pattern, Sequence, Tuple

from ...errors import MalformedEmbeddedData
from ...models import Checkpoint, ScrapedResult

logger = logging.getLogger(__name__)

MAX_CHECKPOINTS = 10

# Candidate length windows, exclusive on both ends
STATUS_LENGTH = (2, 100)
LOCATION_LENGTH = (1, 80)

# Statuses at or above this length are noise and may be replaced
STATUS_QUALITY_LIMIT = 100

# Sanitizer thresholds
STATUS_SANITIZE_LIMIT = 60
SHORT_STATUS_LENGTH = (5, 50)

_TAG_RE = re.compile(r"<[^>]*>")
_WS_RE = re.compile(r"\s+")

_TITLE_RE = re.compile(r"<title[^>]*>([^<]+)</title>", re.IGNORECASE)
_TITLE_CARRIER_RE = re.compile(r"Track\s+(.+?)\s+(?:Shipment|Package|Parcel)", re.IGNORECASE)

_OG_DESCRIPTION_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r'<meta[^>]*property="og:description"[^>]*content="([^"]+)"', re.IGNORECASE),
    re.compile(r'<meta[^>]*content="([^"]+)"[^>]*property="og:description"', re.IGNORECASE),
)

_JSON_LD_RE = re.compile(
    r'<script[^>]*type="application/ld\+json"[^>]*>([\s\S]*?)</script>',
    re.IGNORECASE,
)

STATUS_PROBES: Tuple[Pattern[str], ...] = (
    re.compile(r'class="[^"]*tracking-status[^"]*"[^>]*>([^<]+)', re.IGNORECASE),
    re.compile(r'class="[^"]*shipment-status[^"]*"[^>]*>([^<]+)', re.IGNORECASE),
    re.compile(r'class="[^"]*status-text[^"]*"[^>]*>([^<]+)', re.IGNORECASE),
    re.compile(r'data-status="([^"]+)"', re.IGNORECASE),
    re.compile(r'"status"\s*:\s*"([^"]+)"', re.IGNORECASE),
    re.compile(r'"tag"\s*:\s*"([^"]+)"', re.IGNORECASE),
    re.compile(r'"subtag_message"\s*:\s*"([^"]+)"', re.IGNORECASE),
)

LOCATION_PROBES: Tuple[Pattern[str], ...] = (
    re.compile(r'"location"\s*:\s*"([^"]+)"', re.IGNORECASE),
    re.compile(r'"city"\s*:\s*"([^"]+)"', re.IGNORECASE),
    re.compile(r'class="[^"]*location[^"]*"[^>]*>([^<]+)', re.IGNORECASE),
)

CARRIER_PROBES: Tuple[Pattern[str], ...] = (
    re.compile(r'"slug"\s*:\s*"([^"]+)"', re.IGNORECASE),
    re.compile(r'"courier_name"\s*:\s*"([^"]+)"', re.IGNORECASE),
    re.compile(r'"carrier"\s*:\s*"([^"]+)"', re.IGNORECASE),
)

_CHECKPOINTS_RE = re.compile(r'"checkpoints"\s*:\s*\[')

# Checkpoint field aliases, in preference order
CHECKPOINT_STATUS_KEYS = ("subtag_message", "tag", "message")
CHECKPOINT_LOCATION_KEYS = ("location", "city")
CHECKPOINT_TIME_KEYS = ("checkpoint_time", "created_at")
LATEST_STATUS_KEYS = ("subtag_message", "tag")

_FIELDS = ("carrier", "status", "location")


@dataclass(frozen=True)
class Fragment:
    """Partial tracking data produced by one strategy."""
    carrier: Optional[str] = None
    status: Optional[str] = None
    location: Optional[str] = None
    checkpoints: Tuple[Checkpoint, ...] = ()
    provisional: FrozenSet[str] = field(default_factory=frozenset)


Strategy = Callable[[str], Optional[Fragment]]


def strip_tags(text: str) -> str:
    """Remove markup, decode entities and collapse whitespace."""
    return _WS_RE.sub(" ", html.unescape(_TAG_RE.sub("", text))).strip()


def _first_candidate(
    page: str,
    patterns: Sequence[Pattern[str]],
    bounds: Tuple[int, int],
) -> Optional[str]:
    low, high = bounds
    for pattern in patterns:
        match = pattern.search(page)
        if not match:
            continue
        candidate = strip_tags(match.group(1))
        if low < len(candidate) < high:
            return candidate
    return None


def _first_str(data: Dict[str, Any], keys: Sequence[str]) -> Optional[str]:
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def _name_of(value: Any) -> Optional[str]:
    """Schema.org values are either plain text or an object with a name."""
    if isinstance(value, str) and value:
        return value
    if isinstance(value, dict):
        name = value.get("name")
        if isinstance(name, str) and name:
            return name
    return None


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

def extract_title_carrier(page: str) -> Optional[Fragment]:
    """'Track DHL Express Shipments' -> carrier 'DHL Express'."""
    match = _TITLE_RE.search(page)
    if not match:
        return None
    carrier_match = _TITLE_CARRIER_RE.search(strip_tags(match.group(1)))
    if not carrier_match:
        return None
    return Fragment(carrier=carrier_match.group(1).strip())


def extract_og_description(page: str) -> Optional[Fragment]:
    """The share description often carries a status sentence. Provisional."""
    for pattern in _OG_DESCRIPTION_PATTERNS:
        match = pattern.search(page)
        if match:
            description = strip_tags(match.group(1))
            if description:
                return Fragment(status=description, provisional=frozenset({"status"}))
    return None


def _iter_json_ld_objects(data: Any) -> Iterator[Dict[str, Any]]:
    if isinstance(data, list):
        for item in data:
            yield from _iter_json_ld_objects(item)
    elif isinstance(data, dict):
        yield data
        graph = data.get("@graph")
        if isinstance(graph, list):
            for item in graph:
                yield from _iter_json_ld_objects(item)


def _parse_json_block(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError as e:
        raise MalformedEmbeddedData(f"Invalid JSON-LD block: {e}")


def extract_json_ld(page: str) -> Optional[Fragment]:
    """ParcelDelivery records embedded as JSON-LD."""
    found: Dict[str, str] = {}
    for match in _JSON_LD_RE.finditer(page):
        try:
            data = _parse_json_block(match.group(1))
        except MalformedEmbeddedData as e:
            logger.debug(f"Skipping JSON-LD block: {e}")
            continue

        for obj in _iter_json_ld_objects(data):
            if obj.get("@type") != "ParcelDelivery" and not obj.get("trackingNumber"):
                continue

            status = _name_of(obj.get("deliveryStatus"))
            if status:
                found.setdefault("status", status)

            carrier = _name_of(obj.get("carrier"))
            if carrier:
                found.setdefault("carrier", carrier)

            address = obj.get("deliveryAddress")
            if isinstance(address, dict):
                locality = address.get("addressLocality")
                if isinstance(locality, str) and locality:
                    country = _name_of(address.get("addressCountry"))
                    found.setdefault("location", f"{locality}, {country}" if country else locality)

    if not found:
        return None
    return Fragment(**found)


def extract_status_probe(page: str) -> Optional[Fragment]:
    """Class hints, data attributes and embedded JSON keys, in that order."""
    status = _first_candidate(page, STATUS_PROBES, STATUS_LENGTH)
    return Fragment(status=status) if status else None


def extract_location_probe(page: str) -> Optional[Fragment]:
    location = _first_candidate(page, LOCATION_PROBES, LOCATION_LENGTH)
    return Fragment(location=location) if location else None


def extract_checkpoints(page: str) -> Optional[Fragment]:
    """
    Embedded "checkpoints": [...] history.

    Keeps the first MAX_CHECKPOINTS entries and offers the last entry's
    status/location as a backfill for fields that are still open.
    """
    match = _CHECKPOINTS_RE.search(page)
    if not match:
        return None

    try:
        entries, _ = json.JSONDecoder().raw_decode(page, match.end() - 1)
    except ValueError as e:
        logger.debug(f"Skipping checkpoints block: {e}")
        return None

    if not isinstance(entries, list):
        return None
    entries = [e for e in entries if isinstance(e, dict)]
    if not entries:
        return None

    checkpoints = tuple(
        Checkpoint(
            status=_first_str(cp, CHECKPOINT_STATUS_KEYS) or "Unknown",
            location=_first_str(cp, CHECKPOINT_LOCATION_KEYS) or "",
            time=_first_str(cp, CHECKPOINT_TIME_KEYS) or "",
        )
        for cp in entries[:MAX_CHECKPOINTS]
    )

    latest = entries[-1]
    return Fragment(
        status=_first_str(latest, LATEST_STATUS_KEYS),
        location=_first_str(latest, CHECKPOINT_LOCATION_KEYS),
        checkpoints=checkpoints,
    )


def extract_carrier_probe(page: str) -> Optional[Fragment]:
    """Courier slug or name from embedded JSON; 'dhl-express' -> 'dhl express'."""
    for pattern in CARRIER_PROBES:
        match = pattern.search(page)
        if match:
            return Fragment(carrier=match.group(1).replace("-", " "))
    return None


STRATEGIES: Tuple[Tuple[str, Strategy], ...] = (
    ("title_carrier", extract_title_carrier),
    ("og_description", extract_og_description),
    ("json_ld", extract_json_ld),
    ("status_probe", extract_status_probe),
    ("location_probe", extract_location_probe),
    ("checkpoints", extract_checkpoints),
    ("carrier_probe", extract_carrier_probe),
)


# ---------------------------------------------------------------------------
# Cascade
# ---------------------------------------------------------------------------

def _is_open(name: str, value: Optional[str], provisional: bool) -> bool:
    if value is None or provisional:
        return True
    if name == "status":
        return len(value) >= STATUS_QUALITY_LIMIT
    return False


def sanitize_status(status: Optional[str]) -> Optional[str]:
    """
    Drop help-text leaks and marketing copy that slipped in as a status.

    Long values, or values mentioning "tracking numbers", are cut at the
    first sentence/clause boundary. If the cut is still implausible the
    status is discarded.
    """
    if status is None:
        return None
    if len(status) <= STATUS_SANITIZE_LIMIT and "tracking numbers" not in status.lower():
        return status

    short = status.split(".")[0].split(",")[0].strip()
    low, high = SHORT_STATUS_LENGTH
    if low < len(short) < high and "tracking" not in short.lower():
        return short
    return None


def parse_tracking_html(
    page: str,
    strategies: Sequence[Tuple[str, Strategy]] = STRATEGIES,
) -> ScrapedResult:
    """
    Run the extraction cascade over an aggregator page.

    Args:
        page: Raw HTML (may embed JSON)
        strategies: Ordered (name, strategy) pairs

    Returns:
        ScrapedResult without coordinates
    """
    values: Dict[str, Optional[str]] = {name: None for name in _FIELDS}
    provisional: set = set()
    checkpoints: Tuple[Checkpoint, ...] = ()

    for name, strategy in strategies:
        try:
            fragment = strategy(page)
        except Exception as e:
            logger.warning(f"Extraction strategy '{name}' failed: {e}")
            continue
        if fragment is None:
            continue

        for field_name in _FIELDS:
            value = getattr(fragment, field_name)
            if value is None:
                continue
            if _is_open(field_name, values[field_name], field_name in provisional):
                values[field_name] = value
                if field_name in fragment.provisional:
                    provisional.add(field_name)
                else:
                    provisional.discard(field_name)

        if fragment.checkpoints and not checkpoints:
            checkpoints = fragment.checkpoints

    return ScrapedResult(
        carrier=values["carrier"],
        status=sanitize_status(values["status"]),
        location=values["location"],
        checkpoints=checkpoints,
    )


def describe(result: ScrapedResult) -> Dict[str, Any]:
    """Compact summary for logging."""
    return {
        "carrier": result.carrier,
        "status": result.status,
        "location": result.location,
        "checkpoints": len(result.checkpoints),
    }
