"""
Trackline Rendering - Map scene construction and renderer lifecycle
"""

from .animator import Frame, PathAnimator
from .map_view import STYLE_ID, MapView, StyleRegistry
from .scene import MapScene, Marker, Polyline, build_scene

__all__ = [
    "Frame",
    "MapScene",
    "MapView",
    "Marker",
    "PathAnimator",
    "Polyline",
    "STYLE_ID",
    "StyleRegistry",
    "build_scene",
]
