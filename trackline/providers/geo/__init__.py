"""
Geo providers - Geocoding and great-circle paths
"""

from .geocoder import NominatimGeocoder
from .great_circle import angular_distance, great_circle_points, heading

__all__ = ["NominatimGeocoder", "angular_distance", "great_circle_points", "heading"]
