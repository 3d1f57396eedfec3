"""Tests for trackline.providers.shipment.scraper - page fetch via httpx.MockTransport"""

import httpx
import pytest

from trackline.constants import BROWSER_HEADERS
from trackline.errors import InputEmpty, UpstreamFetchFailed
from trackline.providers.shipment.scraper import AggregatorScraper, user_friendly_error


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestFetchPage:

    @pytest.mark.asyncio
    async def test_requests_track_page_with_browser_headers(self, alk_page):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, text=alk_page)

        async with _client(handler) as client:
            scraper = AggregatorScraper(client=client)
            page = await scraper.fetch_page("  ALK-2026-00482 ")

        assert page == alk_page
        assert str(seen[0].url) == "https://www.aftership.com/track/ALK-2026-00482"
        assert seen[0].headers["user-agent"] == BROWSER_HEADERS["User-Agent"]
        assert seen[0].headers["accept-language"] == BROWSER_HEADERS["Accept-Language"]

    @pytest.mark.asyncio
    async def test_non_2xx_raises_with_status(self):
        async with _client(lambda request: httpx.Response(404)) as client:
            scraper = AggregatorScraper(client=client)
            with pytest.raises(UpstreamFetchFailed) as exc_info:
                await scraper.fetch_page("ALK-1")
        assert exc_info.value.status_code == 404
        assert "404" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            scraper = AggregatorScraper(client=client)
            with pytest.raises(UpstreamFetchFailed) as exc_info:
                await scraper.fetch_page("ALK-1")
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_blank_id_raises_input_empty(self):
        scraper = AggregatorScraper()
        with pytest.raises(InputEmpty):
            await scraper.fetch_page("   ")

    @pytest.mark.asyncio
    async def test_no_retry(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(503)

        async with _client(handler) as client:
            with pytest.raises(UpstreamFetchFailed):
                await AggregatorScraper(client=client).fetch_page("ALK-1")
        assert len(calls) == 1


class TestScrape:

    @pytest.mark.asyncio
    async def test_fetch_and_parse_skips_geocoding(self, alk_page, geocoder):
        async with _client(lambda request: httpx.Response(200, text=alk_page)) as client:
            scraper = AggregatorScraper(client=client, geocoder=geocoder)
            result = await scraper.fetch_and_parse("ALK-2026-00482")
        assert result.status == "Arrived at sort facility"
        assert result.coordinates is None
        assert geocoder.calls == []

    @pytest.mark.asyncio
    async def test_scrape_merges_coordinates(self, alk_page, geocoder):
        async with _client(lambda request: httpx.Response(200, text=alk_page)) as client:
            scraper = AggregatorScraper(client=client, geocoder=geocoder)
            result = await scraper.scrape("ALK-2026-00482")
        assert result.location == "Doha, QA"
        assert result.coordinates == (25.2854, 51.531)
        assert geocoder.calls == ["Doha, QA"]


class TestConfig:

    def test_from_config(self):
        scraper = AggregatorScraper.from_config({
            "base_url": "https://tracker.example/",
            "user_agent": "TestAgent/1.0",
            "timeout": 5,
        })
        assert scraper.page_url("A B") == "https://tracker.example/track/A%20B"
        assert scraper.headers["User-Agent"] == "TestAgent/1.0"
        assert scraper.headers["Accept"] == BROWSER_HEADERS["Accept"]
        assert scraper.timeout == 5.0


class TestUserFriendlyError:

    @pytest.mark.parametrize("status_code, fragment", [
        (None, "Unable to reach"),
        (404, "No tracking page"),
        (429, "Too many"),
        (502, "experiencing issues"),
        (403, "returned 403"),
    ])
    def test_messages(self, status_code, fragment):
        err = UpstreamFetchFailed("failed", status_code=status_code)
        assert fragment in user_friendly_error(err)
