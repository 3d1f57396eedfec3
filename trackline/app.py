"""
Trackline Application - Single entry point for the tracking pipeline.

Usage:
    from trackline import Trackline

    app = Trackline("config.yaml")

    result = await app.resolve("ALK-2026-00482")
    if result.is_redirect():
        ...

    shipment = await app.lookup_shipment("ALK-2026-00482")
    scraped = await app.scrape("ALK-2026-00482")
"""

import asyncio
import logging
import os
import re
from typing import Any, Dict, Optional

import httpx

from .errors import InputEmpty
from .models import ScrapedResult, TrackingQuery
from .result import ResolutionResult

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.yaml"
CONFIG_ENV_VAR = "TRACKLINE_CONFIG"


def _load_config(path: str) -> dict:
    """Read YAML config file with ${VAR} environment variable substitution."""
    import yaml

    with open(path, "r", encoding="utf-8") as f:
        raw = f.read()

    # Replace ${VAR} with environment variable values
    def _replace_env(match):
        var_name = match.group(1)
        value = os.environ.get(var_name)
        if value is None:
            raise ValueError(
                f"Environment variable '{var_name}' not set "
                f"(referenced in config file '{path}')"
            )
        return value

    resolved = re.sub(r"\$\{(\w+)\}", _replace_env, raw)
    return yaml.safe_load(resolved) or {}


def resolve_config_path(path: Optional[str] = None) -> str:
    return path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH


def _database_settings(value: Any) -> Dict[str, Any]:
    """`database` may be a bare DSN or a mapping with `dsn` and pool options."""
    if not value:
        return {}
    if isinstance(value, str):
        return {"dsn": value}
    return dict(value)


class Trackline:
    """
    Trackline Application entry point.

    Sync constructor reads config; network clients and the database pool
    are created on first use.

    Args:
        config: Path to a YAML file, or an already-loaded config dict. When
            omitted, TRACKLINE_CONFIG (then config.yaml) is used, and a missing
            file means built-in defaults.
        client: Optional shared httpx.AsyncClient for both upstreams

    Example:
        app = Trackline({"carriers": {"rule_set": "numeric_first"}})
        result = await app.resolve("1Z999AA10123456784")
        await app.shutdown()
    """

    def __init__(self, config: Any = None, client: Optional[httpx.AsyncClient] = None):
        if isinstance(config, dict):
            self._config = config
        else:
            path = resolve_config_path(config)
            if os.path.exists(path):
                self._config = _load_config(path)
                logger.info(f"Loaded config from {path}")
            elif config:
                raise FileNotFoundError(f"Config file not found: {path}")
            else:
                logger.info(f"No config file at {path}, using built-in defaults")
                self._config = {}

        self._initialized = False
        self._init_lock = asyncio.Lock()
        self._client = client
        self._owns_client = client is None

        # Will be set during lazy initialization
        self._database = None
        self._registry = None
        self._geocoder = None
        self._scraper = None
        self._orchestrator = None

    async def _ensure_initialized(self) -> None:
        """Lazy initialization, runs once on first use."""
        if self._initialized:
            return
        async with self._init_lock:
            if self._initialized:
                return
            await self._initialize()

    async def _initialize(self) -> None:
        cfg = self._config

        # 1. HTTP client shared by the aggregator and the geocoder
        if self._client is None:
            self._client = httpx.AsyncClient(follow_redirects=True)

        # 2. Registry (optional)
        db_cfg = _database_settings(cfg.get("database"))
        if db_cfg.get("dsn"):
            from .db import Database
            from .providers.shipment.shipment_repo import ShipmentRepository

            self._database = Database(
                dsn=db_cfg["dsn"],
                min_size=int(db_cfg.get("min_size", 1)),
                max_size=int(db_cfg.get("max_size", 5)),
            )
            await self._database.initialize()
            self._registry = ShipmentRepository(self._database)
            if db_cfg.get("create_tables"):
                await self._registry.ensure_table()
            logger.info("Shipment registry: enabled")
        else:
            logger.info("Shipment registry: not configured")

        # 3. Providers
        from .providers.geo.geocoder import NominatimGeocoder
        from .providers.shipment.scraper import AggregatorScraper

        self._geocoder = NominatimGeocoder.from_config(cfg.get("geocoder") or {}, client=self._client)
        self._scraper = AggregatorScraper.from_config(
            cfg.get("aggregator") or {},
            client=self._client,
            geocoder=self._geocoder,
        )

        # 4. Orchestrator
        from .orchestrator import OrchestratorConfig, ResolutionOrchestrator

        orchestrator_config = OrchestratorConfig.from_dict(cfg)
        self._orchestrator = ResolutionOrchestrator(
            scraper=self._scraper,
            geocoder=self._geocoder,
            registry=self._registry,
            config=orchestrator_config,
        )
        logger.info(f"Carrier rules: {len(orchestrator_config.rules)} active")

        self._initialized = True

    @property
    def config(self) -> dict:
        """Return a copy of the raw configuration dict."""
        return dict(self._config)

    @property
    def has_registry(self) -> bool:
        return bool(_database_settings(self._config.get("database")).get("dsn"))

    async def shutdown(self) -> None:
        """Shut down the application, closing all connections."""
        if not self._initialized:
            return
        try:
            if self._database:
                await self._database.close()
            if self._client and self._owns_client:
                await self._client.aclose()
        except Exception as e:
            logger.warning(f"Error during shutdown: {e}")
        finally:
            self._initialized = False
            self._database = None
            self._registry = None
            self._geocoder = None
            self._scraper = None
            self._orchestrator = None
            if self._owns_client:
                self._client = None
            logger.info("Trackline shut down")

    # ── Public API ──

    async def resolve(self, tracking_id: Optional[str]) -> ResolutionResult:
        """Run the full pipeline: match, resolve, enrich, normalize."""
        await self._ensure_initialized()
        return await self._orchestrator.resolve(tracking_id)

    async def lookup_shipment(self, tracking_number: Optional[str]) -> Optional[Dict[str, Any]]:
        """
        Registry lookup with the location geocoded.

        Returns:
            Shipment dict, or None when the registry has no such shipment

        Raises:
            InputEmpty: blank tracking number
            RuntimeError: no registry configured
            UpstreamFetchFailed: the registry query failed
        """
        query = TrackingQuery.from_raw(tracking_number)
        if query.is_empty:
            raise InputEmpty("Tracking number is required")

        await self._ensure_initialized()
        if self._registry is None:
            raise RuntimeError("Shipment registry is not configured")

        record = await self._registry.get_by_tracking_number(query.identifier)
        if record is None:
            return None

        coordinates = await self._geocoder.geocode(record.location) if record.location else None
        return record.to_dict(coordinates)

    async def scrape(self, tracking_id: Optional[str]) -> ScrapedResult:
        """
        Aggregator scrape plus geocoding, without carrier matching.

        Raises:
            InputEmpty: blank tracking id
            UpstreamFetchFailed: the aggregator fetch failed
        """
        query = TrackingQuery.from_raw(tracking_id)
        if query.is_empty:
            raise InputEmpty("Tracking ID is required")

        await self._ensure_initialized()
        return await self._scraper.scrape(query.identifier)
