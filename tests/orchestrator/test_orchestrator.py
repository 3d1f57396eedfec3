"""
Tests for trackline.orchestrator - resolution state machine

Tests cover:
- Empty input and carrier redirects
- Registry hits, misses and registry failures
- Aggregator scrape, enrichment and normalization
- Failure results with the universal fallback link
"""

from unittest.mock import AsyncMock, MagicMock

import asyncpg
import pytest

from trackline.errors import UpstreamFetchFailed
from trackline.models import BusinessPhase, Checkpoint, NormalizedStatus, ScrapedResult, ShipmentRecord
from trackline.orchestrator import OrchestratorConfig, ResolutionOrchestrator
from trackline.providers.shipment.carrier_detector import NUMERIC_FIRST_RULES
from trackline.providers.shipment.extractors import parse_tracking_html
from trackline.providers.shipment.shipment_repo import ShipmentRepository
from trackline.result import ResolutionSource, ResolutionState

DOHA = (25.2854, 51.531)


def _scraper(result=None, error=None):
    scraper = MagicMock()
    scraper.fetch_and_parse = AsyncMock(return_value=result, side_effect=error)
    return scraper


def _registry(record=None, error=None):
    registry = MagicMock()
    registry.get_by_tracking_number = AsyncMock(return_value=record, side_effect=error)
    return registry


# =============================================================================
# Matching
# =============================================================================

class TestMatching:

    @pytest.mark.asyncio
    async def test_empty_input_is_idle(self, geocoder):
        scraper = _scraper()
        orchestrator = ResolutionOrchestrator(scraper=scraper, geocoder=geocoder)
        result = await orchestrator.resolve("   ")
        assert result.state == ResolutionState.IDLE
        assert result.transitions == (ResolutionState.IDLE,)
        scraper.fetch_and_parse.assert_not_called()

    @pytest.mark.asyncio
    async def test_ups_redirect_skips_everything(self, geocoder):
        scraper = _scraper()
        registry = _registry()
        orchestrator = ResolutionOrchestrator(scraper=scraper, geocoder=geocoder, registry=registry)

        result = await orchestrator.resolve("1Z999AA10123456784")

        assert result.is_redirect()
        assert result.carrier_tag == "ups"
        assert result.redirect_url == "https://www.ups.com/track?tracknum=1Z999AA10123456784"
        assert result.transitions == (
            ResolutionState.IDLE,
            ResolutionState.MATCHING,
            ResolutionState.REDIRECTING,
        )
        scraper.fetch_and_parse.assert_not_called()
        registry.get_by_tracking_number.assert_not_called()
        assert geocoder.calls == []

    @pytest.mark.asyncio
    async def test_srilankan_redirect_before_registry(self, geocoder):
        registry = _registry(ShipmentRecord(tracking_number="16012345675", status="delivered"))
        orchestrator = ResolutionOrchestrator(scraper=_scraper(), geocoder=geocoder, registry=registry)
        result = await orchestrator.resolve("16012345675")
        assert result.redirect_url == "https://www.srilankancargo.com/tracking?awb=16012345675"
        registry.get_by_tracking_number.assert_not_called()

    @pytest.mark.asyncio
    async def test_numeric_first_rule_set(self, geocoder):
        config = OrchestratorConfig(rules=NUMERIC_FIRST_RULES)
        orchestrator = ResolutionOrchestrator(scraper=_scraper(), geocoder=geocoder, config=config)
        result = await orchestrator.resolve("1234567890")
        assert result.carrier_tag == "dhl"
        assert result.is_redirect()


# =============================================================================
# Aggregator path
# =============================================================================

class TestAggregatorPath:

    @pytest.mark.asyncio
    async def test_alk_fixture_end_to_end(self, alk_page, geocoder):
        scraper = _scraper(parse_tracking_html(alk_page))
        orchestrator = ResolutionOrchestrator(scraper=scraper, geocoder=geocoder, registry=_registry(None))

        result = await orchestrator.resolve("ALK-2026-00482")

        assert result.is_ready()
        assert result.source == ResolutionSource.AGGREGATOR
        assert result.status == "Arrived at sort facility"
        assert result.map_status == NormalizedStatus.DEPARTED
        assert result.phase == BusinessPhase.TRANSIT
        assert result.verified
        assert geocoder.calls == ["Doha, QA"]
        assert result.coordinates == DOHA
        assert result.map.destination_label == "Doha, QA"
        assert result.map.destination_coordinates == DOHA
        assert len(result.path) == 101
        assert result.transitions == (
            ResolutionState.IDLE,
            ResolutionState.MATCHING,
            ResolutionState.RESOLVING,
            ResolutionState.ENRICHING,
            ResolutionState.NORMALIZING,
            ResolutionState.READY,
        )
        scraper.fetch_and_parse.assert_awaited_once_with("ALK-2026-00482")

    @pytest.mark.asyncio
    async def test_ungeocodable_location_uses_default_destination(self, geocoder):
        scraped = ScrapedResult(carrier="aramex", status="Shipment information received", location="Atlantis")
        orchestrator = ResolutionOrchestrator(scraper=_scraper(scraped), geocoder=geocoder)

        result = await orchestrator.resolve("ALK-1")

        assert result.coordinates is None
        assert result.map.destination_label == "Atlantis"
        assert result.map.destination_coordinates == (51.47, -0.4543)
        assert result.map_status == NormalizedStatus.PROCESSING
        assert result.viewer_url.startswith("https://www.aramex.com/")

    @pytest.mark.asyncio
    async def test_no_location_skips_geocoding(self, geocoder):
        scraped = ScrapedResult(status="Delivered to recipient")
        orchestrator = ResolutionOrchestrator(scraper=_scraper(scraped), geocoder=geocoder)

        result = await orchestrator.resolve("ALK-1")

        assert geocoder.calls == []
        assert result.map.destination_label == "London (LHR)"
        assert result.phase == BusinessPhase.DELIVERED

    @pytest.mark.asyncio
    async def test_unverified_is_ready_with_no_data_error(self, geocoder):
        orchestrator = ResolutionOrchestrator(scraper=_scraper(ScrapedResult()), geocoder=geocoder)

        result = await orchestrator.resolve("ALK-1")

        assert result.is_ready()
        assert not result.verified
        assert result.error_type == "no_data_extracted"
        assert result.error_message == "No carrier data found"
        assert result.fallback_url == "https://www.17track.net/en/track?nums=ALK-1"
        assert result.viewer_url == result.fallback_url

    @pytest.mark.asyncio
    async def test_checkpoints_carried_through(self, geocoder):
        scraped = ScrapedResult(status="In transit", checkpoints=(Checkpoint("Picked up", "Colombo, LK"),))
        orchestrator = ResolutionOrchestrator(scraper=_scraper(scraped), geocoder=geocoder)
        result = await orchestrator.resolve("ALK-1")
        assert result.checkpoints == scraped.checkpoints

    @pytest.mark.asyncio
    async def test_upstream_failure(self, geocoder):
        scraper = _scraper(error=UpstreamFetchFailed("Aggregator returned 503", status_code=503))
        orchestrator = ResolutionOrchestrator(scraper=scraper, geocoder=geocoder)

        result = await orchestrator.resolve("ALK-1")

        assert result.is_failed()
        assert result.error_type == "upstream_fetch_failed"
        assert result.error_message == "Tracking service is experiencing issues. Please try again later."
        assert result.fallback_url == "https://www.17track.net/en/track?nums=ALK-1"
        assert result.transitions[-1] == ResolutionState.FAILED
        assert ResolutionState.ENRICHING not in result.transitions
        assert geocoder.calls == []


# =============================================================================
# Registry path
# =============================================================================

class TestRegistryPath:

    @pytest.mark.asyncio
    async def test_registry_hit_skips_scrape(self, geocoder):
        record = ShipmentRecord(tracking_number="ALK-2026-00482", status="in_transit", location="Doha, QA")
        scraper = _scraper()
        orchestrator = ResolutionOrchestrator(scraper=scraper, geocoder=geocoder, registry=_registry(record))

        result = await orchestrator.resolve("ALK-2026-00482")

        assert result.source == ResolutionSource.REGISTRY
        assert result.phase == BusinessPhase.TRANSIT
        assert result.coordinates == DOHA
        scraper.fetch_and_parse.assert_not_called()

    @pytest.mark.asyncio
    async def test_registry_phase_uses_exact_values(self, geocoder):
        record = ShipmentRecord(tracking_number="ALK-1", status="pickup")
        orchestrator = ResolutionOrchestrator(scraper=_scraper(), geocoder=geocoder, registry=_registry(record))
        result = await orchestrator.resolve("ALK-1")
        assert result.phase == BusinessPhase.AIRLINE
        assert result.phase_message == "Escrow released, handed to airline"

    @pytest.mark.asyncio
    async def test_registry_error_falls_back_to_scrape(self, geocoder):
        scraper = _scraper(ScrapedResult(status="In transit"))
        registry = _registry(error=UpstreamFetchFailed("Registry query failed"))
        orchestrator = ResolutionOrchestrator(scraper=scraper, geocoder=geocoder, registry=registry)

        result = await orchestrator.resolve("ALK-1")

        assert result.source == ResolutionSource.AGGREGATOR
        scraper.fetch_and_parse.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_closing_pool_falls_back_to_scrape(self, alk_page, geocoder):
        db = MagicMock()
        db.fetchrow = AsyncMock(side_effect=asyncpg.InterfaceError("pool is closing"))
        scraper = _scraper(parse_tracking_html(alk_page))
        orchestrator = ResolutionOrchestrator(
            scraper=scraper, geocoder=geocoder, registry=ShipmentRepository(db)
        )

        result = await orchestrator.resolve("ALK-2026-00482")

        assert result.state == ResolutionState.READY
        assert result.source == ResolutionSource.AGGREGATOR
        scraper.fetch_and_parse.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unexpected_registry_error_is_a_miss(self, geocoder):
        scraper = _scraper(ScrapedResult(status="In transit"))
        registry = _registry(error=RuntimeError("Database not initialized"))
        orchestrator = ResolutionOrchestrator(scraper=scraper, geocoder=geocoder, registry=registry)

        result = await orchestrator.resolve("ALK-1")

        assert result.state == ResolutionState.READY
        assert result.source == ResolutionSource.AGGREGATOR


# =============================================================================
# Config
# =============================================================================

class TestOrchestratorConfig:

    def test_from_dict(self):
        config = OrchestratorConfig.from_dict({
            "carriers": {"rule_set": "numeric_first"},
            "map": {
                "origin": [1.0, 2.0],
                "default_destination": {"label": "Dubai (DXB)", "coordinates": [25.25, 55.36]},
                "path_points": 20,
            },
        })
        assert config.rules == NUMERIC_FIRST_RULES
        assert config.origin == (1.0, 2.0)
        assert config.default_destination == (25.25, 55.36)
        assert config.default_destination_label == "Dubai (DXB)"
        assert config.path_points == 20

    def test_defaults(self):
        config = OrchestratorConfig.from_dict({})
        assert config == OrchestratorConfig()
