"""
Map scene - Declarative description of the tracking map

The scene is what a front end draws: the ground leg from the hub to the
origin airport, the flight arc split into fading segments, and the hub,
airport and destination markers. Colors follow the normalized status.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..constants import HUB_COORDS, HUB_LABEL, ORIGIN_COORDS, ORIGIN_LABEL
from ..models import Coordinates, NormalizedStatus

GOLD = "#d4af37"
GREEN = "#00cc66"
MUTED = "#557799"
GROUND_IDLE = "#335577"

ARC_SEGMENTS = 5

STATUS_CAPTIONS: Dict[NormalizedStatus, str] = {
    NormalizedStatus.PROCESSING: "Processing at Hub",
    NormalizedStatus.DEPARTED: "In Flight",
    NormalizedStatus.DELIVERED: "Delivered",
}


@dataclass(frozen=True)
class Polyline:
    points: Tuple[Coordinates, ...]
    color: str
    weight: float
    opacity: float
    dash_array: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "points": [list(p) for p in self.points],
            "color": self.color,
            "weight": self.weight,
            "opacity": self.opacity,
            "dash_array": self.dash_array,
        }


@dataclass(frozen=True)
class Marker:
    """A pulsing dot with its label."""
    coordinates: Coordinates
    label: str
    color: str
    size: int
    active: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "coordinates": list(self.coordinates),
            "label": self.label,
            "color": self.color,
            "size": self.size,
            "active": self.active,
        }


@dataclass(frozen=True)
class MapScene:
    status: NormalizedStatus
    caption: str
    polylines: Tuple[Polyline, ...]
    markers: Tuple[Marker, ...]
    bounds: Tuple[Coordinates, ...] = field(default_factory=tuple)

    @property
    def animated(self) -> bool:
        return self.status == NormalizedStatus.DEPARTED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "caption": self.caption,
            "animated": self.animated,
            "polylines": [p.to_dict() for p in self.polylines],
            "markers": [m.to_dict() for m in self.markers],
            "bounds": [list(c) for c in self.bounds],
        }


def arc_segments(path: Sequence[Coordinates], count: int = ARC_SEGMENTS) -> List[Tuple[Coordinates, ...]]:
    """Split the arc into `count` overlapping runs so each can fade separately."""
    size = len(path) // count
    if size == 0:
        return [tuple(path)] if len(path) >= 2 else []
    segments = []
    for i in range(count):
        start = i * size
        end = min(start + size + 1, len(path))
        if end - start >= 2:
            segments.append(tuple(path[start:end]))
    return segments


def build_scene(
    status: NormalizedStatus,
    destination_label: str,
    destination_coords: Coordinates,
    path: Sequence[Coordinates],
    hub: Coordinates = HUB_COORDS,
    origin: Coordinates = ORIGIN_COORDS,
    hub_label: str = HUB_LABEL,
    origin_label: str = ORIGIN_LABEL,
) -> MapScene:
    is_processing = status == NormalizedStatus.PROCESSING
    is_delivered = status == NormalizedStatus.DELIVERED

    polylines = [
        Polyline(
            points=(hub, origin),
            color=GOLD if is_processing else GROUND_IDLE,
            weight=2,
            opacity=0.7,
            dash_array="6 4",
        )
    ]

    segments = arc_segments(path)
    for i, points in enumerate(segments):
        polylines.append(
            Polyline(
                points=points,
                color=GREEN if is_delivered else GOLD,
                weight=2.5,
                opacity=0.3 + (i / ARC_SEGMENTS) * 0.7,
                dash_array="8 6" if status == NormalizedStatus.DEPARTED else None,
            )
        )

    markers = (
        Marker(hub, hub_label, GOLD if is_processing else MUTED, 16 if is_processing else 10, is_processing),
        Marker(origin, origin_label, MUTED, 8),
        Marker(
            destination_coords,
            destination_label,
            GREEN if is_delivered else MUTED,
            16 if is_delivered else 10,
            is_delivered,
        ),
    )

    return MapScene(
        status=status,
        caption=STATUS_CAPTIONS[status],
        polylines=tuple(polylines),
        markers=markers,
        bounds=(hub, origin, destination_coords),
    )
