"""
Trackline Database - asyncpg-based access to the shipment registry.

- Database: shared connection pool manager (one per app)
- Repository: base class for table-scoped data access
"""

from .database import Database
from .repository import Repository

__all__ = ["Database", "Repository"]
