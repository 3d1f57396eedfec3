"""
Map view - Renderer lifecycle for the tracking map

A MapView owns at most one live PathAnimator. Rendering a new payload stops
the previous animator before the new scene is built, and unmount() stops it
for good. Styles are installed once by an explicit setup() call.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Optional, Sequence

from ..constants import HUB_COORDS, HUB_LABEL, ORIGIN_COORDS, ORIGIN_LABEL
from ..models import Coordinates
from ..providers.geo.great_circle import great_circle_points
from ..result import MapPayload
from .animator import FRAME_INTERVAL, Frame, PathAnimator
from .scene import MapScene, build_scene

logger = logging.getLogger(__name__)

STYLE_ID = "leaflet-tracking-styles"

TRACKING_STYLES = """
@keyframes pulseRing {
  0% { box-shadow: 0 0 0 0 currentColor; opacity: 1; }
  100% { box-shadow: 0 0 0 18px transparent; opacity: 0; }
}
.leaflet-pulsing-dot div { color: inherit; }
.leaflet-plane-icon { transition: transform 0.1s linear; }
.leaflet-label-icon, .leaflet-pulsing-dot, .leaflet-plane-icon {
  background: none !important; border: none !important;
}
"""


class StyleRegistry:
    """Stylesheets keyed by id, as a document head would hold them."""

    def __init__(self):
        self._styles: Dict[str, str] = {}

    def install(self, style_id: str, css: str) -> bool:
        """Install a stylesheet. Returns False if the id is already present."""
        if style_id in self._styles:
            return False
        self._styles[style_id] = css
        return True

    def has(self, style_id: str) -> bool:
        return style_id in self._styles

    def get(self, style_id: str) -> Optional[str]:
        return self._styles.get(style_id)

    def __len__(self) -> int:
        return len(self._styles)


class MapView:
    """
    Renders MapPayloads into scenes and drives the plane animation.

    Example:
        view = MapView()
        view.setup()
        scene = await view.render(result.map, result.path)
        ...
        await view.unmount()
    """

    def __init__(
        self,
        styles: Optional[StyleRegistry] = None,
        hub: Coordinates = HUB_COORDS,
        origin: Coordinates = ORIGIN_COORDS,
        hub_label: str = HUB_LABEL,
        origin_label: str = ORIGIN_LABEL,
        on_frame: Optional[Callable[[Frame], None]] = None,
        interval: float = FRAME_INTERVAL,
    ):
        self.styles = styles or StyleRegistry()
        self.hub = hub
        self.origin = origin
        self.hub_label = hub_label
        self.origin_label = origin_label
        self.on_frame = on_frame
        self.interval = interval
        self.scene: Optional[MapScene] = None
        self._animator: Optional[PathAnimator] = None
        self._ready = False
        self._lock = asyncio.Lock()

    @classmethod
    def from_config(cls, cfg: Dict[str, Any], **kwargs) -> "MapView":
        """Build from the `map` config section (hub and origin anchors)."""
        map_cfg = cfg.get("map") or {}
        hub = map_cfg.get("hub") or {}
        if hub.get("coordinates"):
            lat, lon = hub["coordinates"]
            kwargs.setdefault("hub", (float(lat), float(lon)))
        if hub.get("label"):
            kwargs.setdefault("hub_label", hub["label"])
        if map_cfg.get("origin"):
            lat, lon = map_cfg["origin"]
            kwargs.setdefault("origin", (float(lat), float(lon)))
        if map_cfg.get("origin_label"):
            kwargs.setdefault("origin_label", map_cfg["origin_label"])
        return cls(**kwargs)

    @property
    def animator(self) -> Optional[PathAnimator]:
        return self._animator

    def setup(self) -> bool:
        """
        Install the tracking stylesheet. Safe to call more than once.

        Returns:
            True if the styles were installed by this call
        """
        installed = self.styles.install(STYLE_ID, TRACKING_STYLES)
        self._ready = True
        if installed:
            logger.debug(f"Installed {STYLE_ID}")
        return installed

    async def render(self, payload: MapPayload, path: Optional[Sequence[Coordinates]] = None) -> MapScene:
        """Replace the current scene. The previous animator is stopped first."""
        if not self._ready:
            raise RuntimeError("MapView.setup() must be called before render()")

        async with self._lock:
            await self._stop_animator()

            if not path:
                path = great_circle_points(self.origin, payload.destination_coordinates)

            self.scene = build_scene(
                status=payload.status,
                destination_label=payload.destination_label,
                destination_coords=payload.destination_coordinates,
                path=path,
                hub=self.hub,
                origin=self.origin,
                hub_label=self.hub_label,
                origin_label=self.origin_label,
            )

            if self.scene.animated:
                self._animator = PathAnimator(path, on_frame=self.on_frame, interval=self.interval)
                self._animator.start()

            return self.scene

    async def unmount(self) -> None:
        async with self._lock:
            await self._stop_animator()
            self.scene = None

    async def _stop_animator(self) -> None:
        if self._animator is not None:
            await self._animator.stop()
            self._animator = None
