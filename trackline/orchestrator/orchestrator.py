"""
Trackline Orchestrator - Resolve one tracking identifier end to end

State flow:
1. MATCHING    -> carrier rules; a redirect match ends the run (REDIRECTING)
2. RESOLVING   -> registry lookup, falling back to the aggregator scrape
3. ENRICHING   -> geocode the resolved location
4. NORMALIZING -> status/phase vocabulary and the great-circle path
5. READY | FAILED

Network calls are awaited one after another: the geocode depends on the
location produced by the resolving step.
"""

import logging
from typing import List, Optional, Tuple

from ..errors import InputEmpty, NoDataExtracted, UpstreamFetchFailed
from ..models import ScrapedResult, TrackingQuery
from ..providers.geo.geocoder import NominatimGeocoder
from ..providers.geo.great_circle import great_circle_points
from ..providers.shipment.carrier_detector import get_fallback_url, get_viewer_url, match_carrier
from ..providers.shipment.scraper import AggregatorScraper, user_friendly_error
from ..providers.shipment.status_map import (
    PHASE_MESSAGES,
    phase_for_status,
    to_business_phase,
    to_normalized_status,
)
from ..result import MapPayload, ResolutionResult, ResolutionSource, ResolutionState
from .models import OrchestratorConfig, ShipmentLookup

logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = "No carrier data found"
FETCH_FAILED_MESSAGE = "Failed to fetch tracking data. Please try again."


class ResolutionOrchestrator:
    """
    Sequences matching, resolving, enriching and normalizing for a query.

    resolve() never raises for pipeline failures; they are reported on the
    returned ResolutionResult.

    Example:
        orchestrator = ResolutionOrchestrator(
            scraper=AggregatorScraper(),
            geocoder=NominatimGeocoder(),
            registry=ShipmentRepository(db),
        )
        result = await orchestrator.resolve("ALK-2026-00482")
        if result.is_redirect():
            open_url(result.redirect_url)
    """

    def __init__(
        self,
        scraper: AggregatorScraper,
        geocoder: NominatimGeocoder,
        registry: Optional[ShipmentLookup] = None,
        config: Optional[OrchestratorConfig] = None,
    ):
        self.scraper = scraper
        self.geocoder = geocoder
        self.registry = registry
        self.config = config or OrchestratorConfig()

    async def resolve(self, raw_identifier: Optional[str]) -> ResolutionResult:
        query = TrackingQuery.from_raw(raw_identifier)
        transitions: List[ResolutionState] = [ResolutionState.IDLE]

        if query.is_empty:
            logger.debug("Empty tracking identifier, nothing to resolve")
            return ResolutionResult(
                tracking_id="",
                state=ResolutionState.IDLE,
                transitions=tuple(transitions),
            )

        tracking_id = query.identifier

        # 1. Matching
        transitions.append(ResolutionState.MATCHING)
        match = match_carrier(tracking_id, self.config.rules)
        if match.is_redirect:
            transitions.append(ResolutionState.REDIRECTING)
            redirect_url = match.redirect_url(tracking_id)
            logger.info(f"{tracking_id} matched {match.carrier_tag.value}, redirecting to {redirect_url}")
            return ResolutionResult(
                tracking_id=tracking_id,
                state=ResolutionState.REDIRECTING,
                transitions=tuple(transitions),
                carrier_tag=match.carrier_tag.value,
                redirect_url=redirect_url,
            )

        # 2. Resolving
        transitions.append(ResolutionState.RESOLVING)
        fallback_url = get_fallback_url(tracking_id)
        try:
            tracking, source = await self._resolve_tracking(tracking_id)
        except (UpstreamFetchFailed, InputEmpty) as e:
            transitions.append(ResolutionState.FAILED)
            message = user_friendly_error(e) if isinstance(e, UpstreamFetchFailed) else FETCH_FAILED_MESSAGE
            logger.warning(f"Resolution failed for {tracking_id}: {e}")
            return ResolutionResult(
                tracking_id=tracking_id,
                state=ResolutionState.FAILED,
                transitions=tuple(transitions),
                carrier_tag=match.carrier_tag.value if match.carrier_tag else None,
                viewer_url=fallback_url,
                fallback_url=fallback_url,
                error_message=message,
                error_type=e.error_type,
            )

        # 3. Enriching
        transitions.append(ResolutionState.ENRICHING)
        coordinates = await self.geocoder.geocode(tracking.location) if tracking.location else None
        tracking = tracking.with_coordinates(coordinates)

        # 4. Normalizing
        transitions.append(ResolutionState.NORMALIZING)
        map_status = to_normalized_status(tracking.status)
        if source == ResolutionSource.REGISTRY:
            phase = to_business_phase(tracking.status)
        else:
            phase = phase_for_status(map_status)

        map_payload = MapPayload(
            status=map_status,
            destination_label=tracking.location or self.config.default_destination_label,
            destination_coordinates=coordinates or self.config.default_destination,
        )
        path = great_circle_points(
            self.config.origin,
            map_payload.destination_coordinates,
            self.config.path_points,
        )

        transitions.append(ResolutionState.READY)
        error_message, error_type = self._no_data(tracking)
        return ResolutionResult(
            tracking_id=tracking_id,
            state=ResolutionState.READY,
            transitions=tuple(transitions),
            carrier_tag=match.carrier_tag.value if match.carrier_tag else None,
            source=source,
            verified=tracking.verified,
            carrier=tracking.carrier,
            status=tracking.status,
            location=tracking.location,
            checkpoints=tracking.checkpoints,
            coordinates=coordinates,
            map_status=map_status,
            phase=phase,
            phase_message=PHASE_MESSAGES[phase],
            map=map_payload,
            path=tuple(path),
            viewer_url=get_viewer_url(tracking.carrier, tracking_id),
            fallback_url=fallback_url,
            error_message=error_message,
            error_type=error_type,
        )

    async def _resolve_tracking(self, tracking_id: str) -> Tuple[ScrapedResult, ResolutionSource]:
        """Registry first; the aggregator only on a miss."""
        if self.registry is not None:
            try:
                record = await self.registry.get_by_tracking_number(tracking_id)
            except UpstreamFetchFailed as e:
                logger.warning(f"Registry unavailable for {tracking_id}, falling back to aggregator: {e}")
                record = None
            except Exception as e:
                logger.error(f"Registry lookup error for {tracking_id}, falling back to aggregator: {e}", exc_info=True)
                record = None
            if record is not None:
                logger.info(f"{tracking_id} resolved from registry")
                return record.to_scraped(), ResolutionSource.REGISTRY

        tracking = await self.scraper.fetch_and_parse(tracking_id)
        return tracking, ResolutionSource.AGGREGATOR

    @staticmethod
    def _no_data(tracking: ScrapedResult) -> Tuple[Optional[str], Optional[str]]:
        if tracking.verified:
            return None, None
        return NO_DATA_MESSAGE, NoDataExtracted.error_type

