"""Builders for fake provider responses."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import Mock


def make_auth_response(user_id: str = "uid-1", email: str = "alice@example.com"):
    """Shape of a provider sign-in / sign-up response."""
    return SimpleNamespace(
        user=SimpleNamespace(id=user_id, email=email),
        session=SimpleNamespace(access_token="access", refresh_token="refresh"),
    )


def query_chain(client: Mock) -> Mock:
    """Return the terminal ``execute`` mock for table().select().eq()."""
    return client.table.return_value.select.return_value.eq.return_value.execute
