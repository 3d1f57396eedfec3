"""
Tracking session - Commit only the most recent query's result

There is no cancellation: every submit() takes a new query token, and a
finished resolution is committed only if its token is still the latest.
"""

import logging
from typing import Optional

from ..models import TrackingQuery
from ..result import ResolutionResult
from .orchestrator import ResolutionOrchestrator

logger = logging.getLogger(__name__)


class TrackingSession:
    """Holds the visible result for one view."""

    def __init__(self, orchestrator: ResolutionOrchestrator):
        self._orchestrator = orchestrator
        self._latest_token = 0
        self._identifier: Optional[str] = None
        self._current: Optional[ResolutionResult] = None

    @property
    def current(self) -> Optional[ResolutionResult]:
        """The last committed result."""
        return self._current

    @property
    def identifier(self) -> Optional[str]:
        return self._identifier

    async def submit(self, raw_identifier: Optional[str]) -> Optional[ResolutionResult]:
        """
        Resolve a new identifier, superseding any query still in flight.

        Returns:
            The committed result, or None for empty input and for results
            that were superseded before they finished.
        """
        query = TrackingQuery.from_raw(raw_identifier)
        if query.is_empty:
            return None

        self._latest_token += 1
        token = self._latest_token
        self._identifier = query.identifier

        result = await self._orchestrator.resolve(query.identifier)

        if token != self._latest_token:
            logger.info(f"Discarding stale result for {query.identifier}")
            return None

        self._current = result
        return result

    async def refresh(self) -> Optional[ResolutionResult]:
        """Re-resolve the current identifier on explicit request."""
        if not self._identifier:
            return None
        return await self.submit(self._identifier)

    def close(self) -> None:
        """Drop the visible result and orphan anything still in flight."""
        self._latest_token += 1
        self._identifier = None
        self._current = None
