"""
Trackline Models - Data structures shared by the resolution pipeline

This module defines:
- CarrierTag / CarrierMatch: outcome of identifier pattern matching
- Checkpoint / ScrapedResult: the unified tracking shape every source maps into
- ShipmentRecord: a row from the internal shipment registry
- NormalizedStatus / BusinessPhase: closed vocabularies for map and status UI
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union
from urllib.parse import quote

# (latitude, longitude) in WGS-84 degrees
Coordinates = Tuple[float, float]


class CarrierTag(str, Enum):
    """Carriers recognized from the identifier alone."""
    SRILANKAN_CARGO = "srilankan_cargo"
    UPS = "ups"
    DHL = "dhl"
    FEDEX = "fedex"


class NormalizedStatus(str, Enum):
    """Reduced status vocabulary that drives map visuals."""
    PROCESSING = "Processing"
    DEPARTED = "Departed"
    DELIVERED = "Delivered"


class BusinessPhase(str, Enum):
    """Shipment phase that drives the trust/status copy."""
    ESCROW = "escrow"
    AIRLINE = "airline"
    TRANSIT = "transit"
    DELIVERED = "delivered"


@dataclass(frozen=True)
class TrackingQuery:
    """A trimmed tracking identifier."""
    identifier: str

    @classmethod
    def from_raw(cls, raw: Optional[str]) -> "TrackingQuery":
        return cls(identifier=(raw or "").strip())

    @property
    def is_empty(self) -> bool:
        return not self.identifier


@dataclass(frozen=True)
class CarrierMatch:
    """
    Result of running the carrier rules against an identifier.

    A match with a redirect template is terminal: the caller opens the
    rendered URL and stops resolving.
    """
    carrier_tag: Optional[CarrierTag] = None
    redirect_url_template: Optional[str] = None

    @property
    def matched(self) -> bool:
        return self.carrier_tag is not None

    @property
    def is_redirect(self) -> bool:
        return self.redirect_url_template is not None

    def redirect_url(self, identifier: str) -> Optional[str]:
        if not self.redirect_url_template:
            return None
        return self.redirect_url_template.format(id=quote(identifier, safe=""))


@dataclass(frozen=True)
class Checkpoint:
    """One scan event, in the order the source supplied it."""
    status: str
    location: str = ""
    time: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"status": self.status, "location": self.location, "time": self.time}


@dataclass(frozen=True)
class ScrapedResult:
    """
    Unified tracking data, whichever source produced it.

    Instances are never patched in place; enrichment returns a copy via
    with_coordinates().
    """
    carrier: Optional[str] = None
    status: Optional[str] = None
    location: Optional[str] = None
    checkpoints: Tuple[Checkpoint, ...] = field(default_factory=tuple)
    coordinates: Optional[Coordinates] = None

    @property
    def verified(self) -> bool:
        """True when something attributable to a carrier scan was found."""
        return bool(self.carrier or self.status or self.location or self.checkpoints)

    def with_coordinates(self, coordinates: Optional[Coordinates]) -> "ScrapedResult":
        return replace(self, coordinates=coordinates)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "verified": self.verified,
            "carrier": self.carrier,
            "status": self.status,
            "location": self.location,
            "coordinates": list(self.coordinates) if self.coordinates else None,
            "checkpoints": [cp.to_dict() for cp in self.checkpoints],
        }


@dataclass(frozen=True)
class ShipmentRecord:
    """A shipment row owned by the internal registry."""
    tracking_number: str
    status: Optional[str] = None
    location: Optional[str] = None
    carrier: Optional[str] = None
    created_at: Optional[Union[datetime, str]] = None
    updated_at: Optional[Union[datetime, str]] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ShipmentRecord":
        return cls(
            tracking_number=row["tracking_number"],
            status=row.get("status"),
            location=row.get("location"),
            carrier=row.get("carrier"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    def to_scraped(self) -> ScrapedResult:
        return ScrapedResult(carrier=self.carrier, status=self.status, location=self.location)

    def to_dict(self, coordinates: Optional[Coordinates] = None) -> Dict[str, Any]:
        return {
            "tracking_number": self.tracking_number,
            "status": self.status,
            "location": self.location,
            "carrier": self.carrier,
            "coordinates": list(coordinates) if coordinates else None,
            "updated_at": _iso(self.updated_at),
            "created_at": _iso(self.created_at),
        }


def _iso(value: Optional[Union[datetime, str]]) -> Optional[str]:
    if isinstance(value, datetime):
        return value.isoformat()
    return value
