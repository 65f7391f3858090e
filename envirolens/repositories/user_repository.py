"""
User Repository.

Reads and writes user profile documents in the remote ``users``
collection.  Profiles are keyed by the identity provider's user id.
"""

from __future__ import annotations

from typing import Optional

from envirolens.database import DatabaseManager
from envirolens.logger import StructuredLogger
from envirolens.models.user import UserProfile
from envirolens.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository):
    """Data access layer for ``UserProfile`` documents.

    All methods let remote and decoding exceptions propagate; callers
    decide how to classify them.
    """

    TABLE = "users"

    def __init__(
        self,
        db: DatabaseManager,
        logger: StructuredLogger,
        table: str = "users",
    ) -> None:
        super().__init__(db, logger)
        self.TABLE = table

    def emails_for_username(self, username: str) -> list[Optional[str]]:
        """Return the ``email`` field of every document matching *username*.

        Order is whatever the store returns.  Uniqueness is enforced only
        at registration time, so more than one match is possible.  A
        document without a string ``email`` yields ``None``.
        """
        response = (
            self.supabase.table(self.TABLE)
            .select("email")
            .eq("username", username)
            .execute()
        )
        emails: list[Optional[str]] = []
        for row in self._rows(response):
            email = row.get("email")
            emails.append(email if isinstance(email, str) and email else None)
        return emails

    def username_exists(self, username: str) -> bool:
        response = (
            self.supabase.table(self.TABLE)
            .select("id")
            .eq("username", username)
            .limit(1)
            .execute()
        )
        return len(self._rows(response)) > 0

    def create(self, user_id: str, profile: UserProfile) -> None:
        """Write *profile* as the document identified by *user_id*."""
        payload = {"id": user_id, **profile.model_dump(mode="json")}
        self.supabase.table(self.TABLE).insert(payload).execute()
        self._logger.info(
            "Profile document written for %s.",
            profile.username,
            extra={"user_id": user_id},
        )
