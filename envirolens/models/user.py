"""
User Profile Model.

Mirrors a document in the ``users`` collection of the remote store.
The document id is the identity provider's user id and is not part of
the body.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class UserProfile(BaseModel):
    """Profile fields written at registration and read by username lookup."""

    name: str
    username: str
    email: str
    area: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(tz=timezone.utc))

    model_config = {"from_attributes": True, "extra": "ignore"}


class RegistrationForm(BaseModel):
    """Raw values gathered by the registration screen."""

    name: str = ""
    username: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""
    area: str = ""
    accept_terms: bool = False
