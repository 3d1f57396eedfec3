"""Tests for trackline.providers.geo.geocoder"""

import httpx
import pytest

from trackline.errors import GeocodeUnavailable
from trackline.providers.geo.geocoder import NominatimGeocoder


def _geocoder(handler, **kwargs):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return NominatimGeocoder(client=client, **kwargs), client


class TestGeocode:

    @pytest.mark.asyncio
    async def test_first_candidate(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=[
                {"lat": "25.2854", "lon": "51.5310", "display_name": "Doha"},
                {"lat": "0", "lon": "0"},
            ])

        geocoder, client = _geocoder(handler, user_agent="TracklineTest/1.0")
        async with client:
            coords = await geocoder.geocode("Doha, QA")

        assert coords == (25.2854, 51.531)
        request = seen[0]
        assert request.url.path == "/search"
        assert request.url.params["q"] == "Doha, QA"
        assert request.url.params["format"] == "json"
        assert request.url.params["limit"] == "1"
        assert request.headers["user-agent"] == "TracklineTest/1.0"

    @pytest.mark.asyncio
    async def test_empty_list(self):
        geocoder, client = _geocoder(lambda request: httpx.Response(200, json=[]))
        async with client:
            assert await geocoder.geocode("Nowhere") is None

    @pytest.mark.asyncio
    async def test_server_error(self):
        geocoder, client = _geocoder(lambda request: httpx.Response(500))
        async with client:
            assert await geocoder.geocode("Doha") is None

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        geocoder, client = _geocoder(handler)
        async with client:
            assert await geocoder.geocode("Doha") is None

    @pytest.mark.asyncio
    async def test_malformed_payload(self):
        geocoder, client = _geocoder(lambda request: httpx.Response(200, json=[{"lat": "north"}]))
        async with client:
            assert await geocoder.geocode("Doha") is None

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        geocoder, client = _geocoder(lambda request: httpx.Response(200, text="<html>"))
        async with client:
            assert await geocoder.geocode("Doha") is None

    @pytest.mark.asyncio
    async def test_blank_input_makes_no_request(self):
        calls = []
        geocoder, client = _geocoder(lambda request: calls.append(request) or httpx.Response(200, json=[]))
        async with client:
            assert await geocoder.geocode("   ") is None
            assert await geocoder.geocode(None) is None
        assert calls == []


class TestLookup:

    @pytest.mark.asyncio
    async def test_no_match_raises(self):
        geocoder, client = _geocoder(lambda request: httpx.Response(200, json=[]))
        async with client:
            with pytest.raises(GeocodeUnavailable, match="no match"):
                await geocoder.lookup("Nowhere")

    def test_from_config(self):
        geocoder = NominatimGeocoder.from_config({"base_url": "https://geo.example/", "timeout": 3})
        assert geocoder.base_url == "https://geo.example"
        assert geocoder.timeout == 3.0
