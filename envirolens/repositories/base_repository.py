"""
Base Repository.

Shared plumbing for repositories that read and write the remote
document store: the ``DatabaseManager`` reference, the logger, and a
helper that normalises query responses.
"""

from __future__ import annotations

from typing import Any

from supabase import Client as SupabaseClient

from envirolens.database import DatabaseManager
from envirolens.logger import StructuredLogger


class BaseRepository:
    """Base class for all repositories.  Receives dependencies via __init__."""

    TABLE: str = ""

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        self._db = db
        self._logger = logger

    @property
    def supabase(self) -> SupabaseClient:
        """Return the Supabase client.  Raises ``RuntimeError`` when offline."""
        return self._db.supabase

    @property
    def is_online(self) -> bool:
        """``False`` when no remote client is configured."""
        return self._db.is_online

    @staticmethod
    def _rows(response: Any) -> list[dict[str, Any]]:
        """Extract the row list from a query response.

        Raises:
            ValueError: If the payload is not a list of objects.
        """
        data = getattr(response, "data", None)
        if data is None:
            return []
        if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
            raise ValueError(f"Unexpected response payload from {type(response).__name__}")
        return data
