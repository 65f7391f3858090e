"""
Authentication Pipeline Models.

Pydantic models for the contracts between the login core and the UI
layer: cached credentials, the authenticated session user, the login
form snapshot, and typed validation / operation results.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from envirolens.models.enums import AuthErrorCode


class Credential(BaseModel):
    """A cached (identifier, secret) pair held by ``CredentialVault``.

    ``identifier`` is always the canonical account email, never a
    username.
    """

    identifier: str
    secret: str

    model_config = {"frozen": True}

    def __repr__(self) -> str:
        return f"Credential(identifier={self.identifier!r}, secret='***')"

    __str__ = __repr__


class SessionUser(BaseModel):
    """The currently authenticated identity returned by the provider."""

    user_id: str
    email: str
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None

    model_config = {"from_attributes": True}


class LoginFormState(BaseModel):
    """Snapshot of the login form as seen by the view layer.

    Attributes
    ----------
    handle:
        Username as last submitted.
    attempted:
        ``True`` after the first submit so validation messages stay
        visible on re-render.
    loading:
        ``True`` while an attempt is in flight; the submit control is
        disabled.
    error_message:
        Text of the last failure, ``None`` when there is nothing to show.
    """

    handle: str = ""
    attempted: bool = False
    loading: bool = False
    error_message: Optional[str] = None


class ValidationResult(BaseModel):
    """Result of a client-side validation check."""

    is_valid: bool
    error_message: Optional[str] = None


class AuthResult(BaseModel):
    """Unified response for registration and other UI-facing operations.

    The UI inspects ``success`` for the happy path and ``error_code`` to
    choose which control to highlight.
    """

    success: bool
    error_code: Optional[AuthErrorCode] = None
    error_message: Optional[str] = None
    user_id: Optional[str] = None
    email: Optional[str] = None
