"""
Trackline Result - Standardized resolution results

Provides a unified result structure for every tracking query, whichever
branch of the pipeline produced it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .models import BusinessPhase, Checkpoint, Coordinates, NormalizedStatus


class ResolutionState(str, Enum):
    """Resolution pipeline states"""
    IDLE = "idle"
    MATCHING = "matching"
    REDIRECTING = "redirecting"
    RESOLVING = "resolving"
    ENRICHING = "enriching"
    NORMALIZING = "normalizing"
    READY = "ready"
    FAILED = "failed"


class ResolutionSource(str, Enum):
    REGISTRY = "registry"
    AGGREGATOR = "aggregator"


@dataclass(frozen=True)
class MapPayload:
    """What the map renderer consumes."""
    status: NormalizedStatus
    destination_label: str
    destination_coordinates: Coordinates

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "destination_label": self.destination_label,
            "destination_coordinates": list(self.destination_coordinates),
        }


@dataclass(frozen=True)
class ResolutionResult:
    """
    Outcome of resolving one tracking identifier

    Attributes:
        tracking_id: The trimmed identifier
        state: Terminal state (idle, redirecting, ready or failed)
        transitions: Every state visited, in order
        redirect_url: Carrier page to open when state is redirecting
        source: Where the tracking data came from
        verified: Whether attributable carrier data was found

    Example:
        result = ResolutionResult(
            tracking_id="1Z999AA10123456784",
            state=ResolutionState.REDIRECTING,
            carrier_tag="ups",
            redirect_url="https://www.ups.com/track?tracknum=1Z999AA10123456784",
        )
    """
    tracking_id: str
    state: ResolutionState
    transitions: Tuple[ResolutionState, ...] = ()

    # Matching
    carrier_tag: Optional[str] = None
    redirect_url: Optional[str] = None

    # Resolving / enriching
    source: Optional[ResolutionSource] = None
    verified: bool = False
    carrier: Optional[str] = None
    status: Optional[str] = None
    location: Optional[str] = None
    checkpoints: Tuple[Checkpoint, ...] = ()
    coordinates: Optional[Coordinates] = None

    # Normalizing
    map_status: NormalizedStatus = NormalizedStatus.PROCESSING
    phase: BusinessPhase = BusinessPhase.ESCROW
    phase_message: str = ""
    map: Optional[MapPayload] = None
    path: Tuple[Coordinates, ...] = ()

    # Viewer links
    viewer_url: Optional[str] = None
    fallback_url: Optional[str] = None

    error_message: Optional[str] = None
    error_type: Optional[str] = None

    def is_ready(self) -> bool:
        return self.state == ResolutionState.READY

    def is_redirect(self) -> bool:
        return self.state == ResolutionState.REDIRECTING

    def is_failed(self) -> bool:
        return self.state == ResolutionState.FAILED

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary"""
        return {
            "tracking_id": self.tracking_id,
            "state": self.state.value,
            "transitions": [s.value for s in self.transitions],
            "carrier_tag": self.carrier_tag,
            "redirect_url": self.redirect_url,
            "source": self.source.value if self.source else None,
            "verified": self.verified,
            "carrier": self.carrier,
            "status": self.status,
            "location": self.location,
            "checkpoints": [cp.to_dict() for cp in self.checkpoints],
            "coordinates": list(self.coordinates) if self.coordinates else None,
            "map_status": self.map_status.value,
            "phase": self.phase.value,
            "phase_message": self.phase_message,
            "map": self.map.to_dict() if self.map else None,
            "path": [list(p) for p in self.path],
            "viewer_url": self.viewer_url,
            "fallback_url": self.fallback_url,
            "error_message": self.error_message,
            "error_type": self.error_type,
        }
