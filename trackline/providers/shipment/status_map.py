"""
Status map - Ordered keyword tables for status and business-phase vocabulary
"""

from typing import Dict, Optional, Tuple

from ...models import BusinessPhase, NormalizedStatus

# Ordered (status, keywords) rows. Delivered is checked before transit so
# "Delivered to recipient after transit" stays Delivered.
NORMALIZED_STATUS_RULES: Tuple[Tuple[NormalizedStatus, Tuple[str, ...]], ...] = (
    (NormalizedStatus.DELIVERED, ("deliver", "completed", "picked up by")),
    (
        NormalizedStatus.DEPARTED,
        ("transit", "depart", "arrived", "customs", "flight", "in transit"),
    ),
)

BUSINESS_PHASE_RULES: Tuple[Tuple[BusinessPhase, Tuple[str, ...]], ...] = (
    (BusinessPhase.DELIVERED, ("delivered",)),
    (BusinessPhase.TRANSIT, ("intransit", "in_transit", "in transit", "departed")),
    (BusinessPhase.AIRLINE, ("pickup", "picked_up")),
)

STATUS_PHASES: Dict[NormalizedStatus, BusinessPhase] = {
    NormalizedStatus.PROCESSING: BusinessPhase.ESCROW,
    NormalizedStatus.DEPARTED: BusinessPhase.TRANSIT,
    NormalizedStatus.DELIVERED: BusinessPhase.DELIVERED,
}

PHASE_MESSAGES: Dict[BusinessPhase, str] = {
    BusinessPhase.ESCROW: "Funds securely held until carrier scan",
    BusinessPhase.AIRLINE: "Escrow released, handed to airline",
    BusinessPhase.TRANSIT: "Package in international transit",
    BusinessPhase.DELIVERED: "Successfully delivered",
}


def to_normalized_status(status: Optional[str]) -> NormalizedStatus:
    """Map free-text carrier status onto Processing / Departed / Delivered."""
    s = (status or "").lower()
    if not s:
        return NormalizedStatus.PROCESSING
    for normalized, keywords in NORMALIZED_STATUS_RULES:
        if any(k in s for k in keywords):
            return normalized
    return NormalizedStatus.PROCESSING


def to_business_phase(status: Optional[str]) -> BusinessPhase:
    """Map a registry status value onto a business phase (exact match)."""
    s = (status or "").strip().lower()
    for phase, values in BUSINESS_PHASE_RULES:
        if s in values:
            return phase
    return BusinessPhase.ESCROW


def phase_for_status(status: NormalizedStatus) -> BusinessPhase:
    """Phase implied by a normalized status, for sources without registry enums."""
    return STATUS_PHASES.get(status, BusinessPhase.ESCROW)


def phase_for_milestone(active_index: int) -> BusinessPhase:
    """Phase for the active step of the milestone timeline (0-based)."""
    if active_index <= 1:
        return BusinessPhase.ESCROW
    if active_index == 2:
        return BusinessPhase.AIRLINE
    if active_index <= 4:
        return BusinessPhase.TRANSIT
    return BusinessPhase.DELIVERED
