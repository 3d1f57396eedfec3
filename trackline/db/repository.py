"""
Trackline Repository - Base class for table-scoped data access.

Subclasses define TABLE_NAME, CREATE_TABLE_SQL and their query methods.
"""

import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class Repository:
    """Table-scoped access on top of a shared Database."""

    TABLE_NAME: str = ""
    CREATE_TABLE_SQL: str = ""

    def __init__(self, db: "Database"):
        self._db = db

    async def ensure_table(self) -> None:
        """Create the table if it does not exist."""
        if self.CREATE_TABLE_SQL:
            await self._db.execute(self.CREATE_TABLE_SQL)
            logger.debug(f"Ensured table: {self.TABLE_NAME}")

    async def _fetch_one(self, column: str, value: Any) -> Optional[Dict[str, Any]]:
        """Exact-match lookup on a single column."""
        row = await self._db.fetchrow(
            f"SELECT * FROM {self.TABLE_NAME} WHERE {column} = $1 LIMIT 1",
            value,
        )
        return dict(row) if row else None
