"""
Path animator - Moves the plane marker along the flight arc

One asyncio task per animator. It advances one point per tick, wraps at the
end of the path and reports each frame to a callback.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

from ..models import Coordinates
from ..providers.geo.great_circle import heading

logger = logging.getLogger(__name__)

FRAME_INTERVAL = 0.08


@dataclass(frozen=True)
class Frame:
    index: int
    position: Coordinates
    heading: Optional[float] = None

    @property
    def rotation(self) -> Optional[float]:
        """Icon rotation in degrees; the plane glyph points north-east at rest."""
        if self.heading is None:
            return None
        return 45 - self.heading


def frame_at(path: Sequence[Coordinates], index: int) -> Frame:
    position = path[index]
    if index < len(path) - 1:
        return Frame(index, position, heading(position, path[index + 1]))
    return Frame(index, position)


class PathAnimator:
    """
    Cycles a marker along `path` every `interval` seconds.

    Example:
        animator = PathAnimator(path, on_frame=lambda f: print(f.position))
        animator.start()
        ...
        await animator.stop()
    """

    def __init__(
        self,
        path: Sequence[Coordinates],
        on_frame: Optional[Callable[[Frame], None]] = None,
        interval: float = FRAME_INTERVAL,
    ):
        if not path:
            raise ValueError("PathAnimator needs at least one point")
        self.path: Tuple[Coordinates, ...] = tuple(path)
        self.on_frame = on_frame
        self.interval = interval
        self.index = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def tick(self) -> Frame:
        """Advance one point and report the frame."""
        self.index = (self.index + 1) % len(self.path)
        frame = frame_at(self.path, self.index)
        if self.on_frame:
            self.on_frame(frame)
        return frame

    def start(self) -> None:
        if self._task is not None:
            return

        async def animate():
            while True:
                await asyncio.sleep(self.interval)
                try:
                    self.tick()
                except Exception as e:
                    logger.error(f"Error in path animation frame: {e}")

        self._task = asyncio.create_task(animate(), name="path-animator")
        logger.debug(f"Started path animator over {len(self.path)} points")

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.debug("Stopped path animator")
