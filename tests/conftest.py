"""Shared fixtures: aggregator pages and a geocoder double."""

from typing import Dict, List, Optional, Tuple

import pytest


# Aggregator page with the status only in the checkpoint-style JSON keys
ALK_PAGE = """
<html>
<head><title>Shipment ALK-2026-00482</title></head>
<body>
<script>
window.__DATA__ = {"shipment": {"subtag_message":"Arrived at sort facility","location":"Doha, QA"}};
</script>
</body>
</html>
"""

DHL_PAGE = """
<html>
<head>
<title>Track DHL Express Shipments | AfterShip</title>
<meta property="og:description" content="Check the latest status of your parcel">
<script type="application/ld+json">
{"@context": "https://schema.org", "@type": "ParcelDelivery",
 "deliveryStatus": "In transit",
 "carrier": {"@type": "Organization", "name": "DHL Express"},
 "deliveryAddress": {"addressLocality": "Leipzig", "addressCountry": "DE"}}
</script>
</head>
<body>
<script>
var tracking = {"slug":"royal-mail","checkpoints":[
  {"subtag_message":"Shipment picked up","location":"Colombo, LK","checkpoint_time":"2026-01-02T08:00:00"},
  {"tag":"InTransit","city":"Doha","created_at":"2026-01-03T10:30:00"},
  {"message":"Arrived at hub","location":"Leipzig, DE","checkpoint_time":"2026-01-04T05:15:00"}
]};
</script>
</body>
</html>
"""


class FakeGeocoder:
    """Records lookups and answers from a fixed table."""

    def __init__(self, table: Optional[Dict[str, Tuple[float, float]]] = None):
        self.table = table or {}
        self.calls: List[str] = []

    async def geocode(self, location):
        self.calls.append(location)
        return self.table.get(location)


@pytest.fixture
def alk_page():
    return ALK_PAGE


@pytest.fixture
def dhl_page():
    return DHL_PAGE


@pytest.fixture
def geocoder():
    return FakeGeocoder({"Doha, QA": (25.2854, 51.531)})
