"""
Shipment Repository - Lookup-by-id against the internal shipment registry.
"""

import logging
from typing import Optional

import asyncpg

from ...db import Repository
from ...errors import UpstreamFetchFailed
from ...models import ShipmentRecord

logger = logging.getLogger(__name__)


class ShipmentRepository(Repository):
    TABLE_NAME = "shipments"
    CREATE_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS shipments (
        id              UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        tracking_number TEXT NOT NULL UNIQUE,
        status          TEXT DEFAULT 'pending',
        location        TEXT,
        carrier         TEXT,
        created_at      TIMESTAMPTZ DEFAULT NOW(),
        updated_at      TIMESTAMPTZ DEFAULT NOW()
    );
    """

    async def get_by_tracking_number(self, tracking_number: str) -> Optional[ShipmentRecord]:
        """
        Exact-match query by tracking number.

        Returns:
            ShipmentRecord, or None when the registry has no such shipment

        Raises:
            UpstreamFetchFailed: the query itself failed
        """
        try:
            row = await self._fetch_one("tracking_number", tracking_number)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            logger.error(f"Registry query failed for {tracking_number}: {e}")
            raise UpstreamFetchFailed(f"Registry query failed: {e}")

        if row is None:
            logger.info(f"Shipment {tracking_number} not in registry")
            return None
        return ShipmentRecord.from_row(row)
