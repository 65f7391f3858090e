"""
Shared Enumerations for EnviroLens Models.

StrEnum values compare equal to their string equivalents, so they can be
logged and serialised without conversion.
"""

from __future__ import annotations
from enum import StrEnum


class LoginState(StrEnum):
    """States of the login state machine.

    ``IDLE`` is the only initial state.  ``SUCCESS`` and ``FAILED`` end an
    attempt; a new submit from ``FAILED`` starts the next one.
    """

    IDLE = "IDLE"
    VALIDATING = "VALIDATING"
    RESOLVING_HANDLE = "RESOLVING_HANDLE"
    AUTHENTICATING = "AUTHENTICATING"
    BIOMETRIC_CHALLENGE = "BIOMETRIC_CHALLENGE"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class BiometricState(StrEnum):
    """Lifecycle of a single biometric challenge."""

    IDLE = "IDLE"
    EVALUATING = "EVALUATING"
    AUTHENTICATED = "AUTHENTICATED"
    FAILED = "FAILED"


class AuthErrorCode(StrEnum):
    """Categories used by ``AuthResult`` so the UI can branch on failures."""

    VALIDATION_ERROR = "validation_error"
    USERNAME_TAKEN = "username_taken"
    PROVIDER_REJECTED = "provider_rejected"
    NETWORK_ERROR = "network_error"
    STORAGE_ERROR = "storage_error"
