"""
Trackline Orchestrator Models - Configuration and collaborator protocols

This module defines:
- ShipmentLookup: the registry interface the orchestrator consumes
- OrchestratorConfig: rule table, map anchors and path resolution
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Tuple

from ..constants import (
    DEFAULT_DESTINATION_COORDS,
    DEFAULT_DESTINATION_LABEL,
    DEFAULT_PATH_POINTS,
    ORIGIN_COORDS,
)
from ..models import Coordinates, ShipmentRecord
from ..providers.shipment.carrier_detector import CarrierRule, get_rules


class ShipmentLookup(Protocol):
    """Exact-match registry lookup. Returns None when the id is unknown."""

    async def get_by_tracking_number(self, tracking_number: str) -> Optional[ShipmentRecord]: ...


def _coords(value: Any, default: Coordinates) -> Coordinates:
    if not value:
        return default
    lat, lon = value
    return float(lat), float(lon)


@dataclass(frozen=True)
class OrchestratorConfig:
    """
    Configuration for the resolution orchestrator.

    Attributes:
        rules: Carrier rule table used during matching
        origin: Start of the flight arc
        default_destination: Used when the location cannot be geocoded
        default_destination_label: Label for the default destination
        path_points: Number of great-circle segments
    """
    rules: Tuple[CarrierRule, ...] = get_rules("standard")
    origin: Coordinates = ORIGIN_COORDS
    default_destination: Coordinates = DEFAULT_DESTINATION_COORDS
    default_destination_label: str = DEFAULT_DESTINATION_LABEL
    path_points: int = DEFAULT_PATH_POINTS

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any]) -> "OrchestratorConfig":
        """Build from the `carriers` and `map` config sections."""
        carriers = cfg.get("carriers") or {}
        map_cfg = cfg.get("map") or {}
        destination = map_cfg.get("default_destination") or {}
        return cls(
            rules=get_rules(carriers.get("rule_set", "standard")),
            origin=_coords(map_cfg.get("origin"), ORIGIN_COORDS),
            default_destination=_coords(destination.get("coordinates"), DEFAULT_DESTINATION_COORDS),
            default_destination_label=destination.get("label", DEFAULT_DESTINATION_LABEL),
            path_points=int(map_cfg.get("path_points", DEFAULT_PATH_POINTS)),
        )
