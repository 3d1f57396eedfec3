"""
Trackline Orchestrator - Resolution state machine and query supersession
"""

from .models import OrchestratorConfig, ShipmentLookup
from .orchestrator import ResolutionOrchestrator
from .session import TrackingSession

__all__ = [
    "OrchestratorConfig",
    "ResolutionOrchestrator",
    "ShipmentLookup",
    "TrackingSession",
]
