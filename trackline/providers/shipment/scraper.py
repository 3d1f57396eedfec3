"""
Aggregator scraper - Fetch a public tracking page and extract what it shows

The page is fetched once with a browser-like signature. Failures surface as
UpstreamFetchFailed and are not retried.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from ...constants import AGGREGATOR_BASE_URL, BROWSER_HEADERS, DEFAULT_TIMEOUT
from ...errors import InputEmpty, UpstreamFetchFailed
from ...models import ScrapedResult
from ..geo.geocoder import NominatimGeocoder
from .carrier_detector import normalize_tracking_number
from .extractors import describe, parse_tracking_html

logger = logging.getLogger(__name__)


class AggregatorScraper:
    """
    Scrape-and-parse engine for a tracking aggregator.

    Args:
        base_url: Aggregator root; pages live at {base_url}/track/{id}
        headers: Request headers (browser-like by default)
        timeout: Request timeout in seconds
        client: Optional shared httpx.AsyncClient (a fresh one per call otherwise)
        geocoder: Used by scrape() to enrich the extracted location
    """

    def __init__(
        self,
        base_url: str = AGGREGATOR_BASE_URL,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
        geocoder: Optional[NominatimGeocoder] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.headers = dict(headers or BROWSER_HEADERS)
        self.timeout = timeout
        self._client = client
        self.geocoder = geocoder

    @classmethod
    def from_config(
        cls,
        cfg: Dict[str, Any],
        client: Optional[httpx.AsyncClient] = None,
        geocoder: Optional[NominatimGeocoder] = None,
    ) -> "AggregatorScraper":
        headers = dict(BROWSER_HEADERS)
        if cfg.get("user_agent"):
            headers["User-Agent"] = cfg["user_agent"]
        return cls(
            base_url=cfg.get("base_url", AGGREGATOR_BASE_URL),
            headers=headers,
            timeout=float(cfg.get("timeout", DEFAULT_TIMEOUT)),
            client=client,
            geocoder=geocoder,
        )

    def page_url(self, tracking_id: str) -> str:
        return f"{self.base_url}/track/{quote(tracking_id, safe='')}"

    async def fetch_page(self, tracking_id: str) -> str:
        """
        Fetch the aggregator page for a tracking number.

        Raises:
            InputEmpty: blank tracking number
            UpstreamFetchFailed: non-2xx response or transport error
        """
        tracking_id = normalize_tracking_number(tracking_id)
        if not tracking_id:
            raise InputEmpty("tracking_id is required")

        url = self.page_url(tracking_id)
        logger.info(f"Fetching aggregator page: {url}")

        try:
            if self._client is not None:
                response = await self._client.get(url, headers=self.headers, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(follow_redirects=True) as client:
                    response = await client.get(url, headers=self.headers, timeout=self.timeout)
        except httpx.HTTPError as e:
            logger.error(f"Aggregator request failed for {tracking_id}: {e}")
            raise UpstreamFetchFailed(f"Aggregator request failed: {e}")

        if not response.is_success:
            logger.error(f"Aggregator returned {response.status_code} for {tracking_id}")
            raise UpstreamFetchFailed(
                f"Aggregator returned {response.status_code}",
                status_code=response.status_code,
            )

        page = response.text
        logger.info(f"Aggregator page length: {len(page)}")
        return page

    async def fetch_and_parse(self, tracking_id: str) -> ScrapedResult:
        """Fetch and run the extraction cascade. No geocoding."""
        page = await self.fetch_page(tracking_id)
        result = parse_tracking_html(page)
        logger.info(f"Parsed {tracking_id}: {describe(result)}")
        return result

    async def scrape(self, tracking_id: str) -> ScrapedResult:
        """Fetch, parse and merge geocoded coordinates for the location."""
        result = await self.fetch_and_parse(tracking_id)
        if self.geocoder is None or not result.location:
            return result
        coordinates = await self.geocoder.geocode(result.location)
        return result.with_coordinates(coordinates)


def user_friendly_error(error: UpstreamFetchFailed) -> str:
    """Convert an upstream failure to a message fit for the UI."""
    status_code = error.status_code
    if status_code is None:
        return "Unable to reach the tracking service right now. Please try again in a few minutes."
    if status_code == 404:
        return "No tracking page found for this number."
    if status_code == 429:
        return "Too many tracking requests. Please try again later."
    if status_code >= 500:
        return "Tracking service is experiencing issues. Please try again later."
    return f"Tracking service returned {status_code}."
