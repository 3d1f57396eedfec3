"""
Trackline providers - upstream sources for the resolution pipeline

- shipment: carrier detection, aggregator scraping, status normalization, registry lookup
- geo: geocoding and great-circle paths
"""
