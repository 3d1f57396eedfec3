"""
Geocoding via the Nominatim search API

geocode() never raises: an empty result, a non-2xx response, a transport
error or a malformed payload all come back as None, and callers fall back
to the default destination.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from ...constants import DEFAULT_TIMEOUT, GEOCODER_BASE_URL, GEOCODER_USER_AGENT
from ...errors import GeocodeUnavailable
from ...models import Coordinates

logger = logging.getLogger(__name__)


class NominatimGeocoder:
    """Resolve a free-text location to (latitude, longitude)."""

    def __init__(
        self,
        base_url: str = GEOCODER_BASE_URL,
        user_agent: str = GEOCODER_USER_AGENT,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_config(cls, cfg: Dict[str, Any], client: Optional[httpx.AsyncClient] = None) -> "NominatimGeocoder":
        return cls(
            base_url=cfg.get("base_url", GEOCODER_BASE_URL),
            user_agent=cfg.get("user_agent", GEOCODER_USER_AGENT),
            timeout=float(cfg.get("timeout", DEFAULT_TIMEOUT)),
            client=client,
        )

    async def geocode(self, location: Optional[str]) -> Optional[Coordinates]:
        """
        Look up a location string.

        Args:
            location: Free-text place, e.g. "Doha, QA"

        Returns:
            (lat, lon) of the first candidate, or None
        """
        try:
            return await self.lookup(location)
        except GeocodeUnavailable as e:
            logger.info(f"Geocoding unavailable: {e}")
            return None

    async def lookup(self, location: Optional[str]) -> Coordinates:
        """
        Strict variant of geocode().

        Raises:
            GeocodeUnavailable: blank input, no match, or the request failed
        """
        query = (location or "").strip()
        if not query:
            raise GeocodeUnavailable("location is empty")

        url = f"{self.base_url}/search"
        params = {"q": query, "format": "json", "limit": 1}
        headers = {"User-Agent": self.user_agent}

        try:
            if self._client is not None:
                response = await self._client.get(url, params=params, headers=headers, timeout=self.timeout)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.get(url, params=params, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            candidates = response.json()
        except httpx.HTTPError as e:
            logger.warning(f"Geocoding request failed for '{query}': {e}")
            raise GeocodeUnavailable(f"request failed for '{query}'")
        except ValueError as e:
            logger.warning(f"Geocoding returned invalid JSON for '{query}': {e}")
            raise GeocodeUnavailable(f"invalid response for '{query}'")

        if not isinstance(candidates, list) or not candidates:
            raise GeocodeUnavailable(f"no match for '{query}'")

        first = candidates[0]
        try:
            return float(first["lat"]), float(first["lon"])
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Malformed geocoding candidate for '{query}': {e}")
            raise GeocodeUnavailable(f"malformed candidate for '{query}'")
