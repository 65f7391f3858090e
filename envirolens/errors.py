"""
Authentication Error Hierarchy.

Leaf components (resolver, authenticator, biometric gate) raise these;
``LoginOrchestrator`` and ``RegistrationService`` catch them and turn
them into user-facing state.  Every error carries a human-readable
``message`` that is safe to display verbatim.
"""

from __future__ import annotations

from typing import Optional

NETWORK_ERROR_MESSAGE: str = "Cannot reach the server. Check your internet connection."


class EnviroLensError(Exception):
    """Base class for every error raised by the login core."""

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        self.message: str = message
        self.original_error: Optional[Exception] = original_error
        super().__init__(self.message)


class ValidationError(EnviroLensError):
    """A form field failed local validation.  Never leaves the device."""


class NotFoundError(EnviroLensError):
    """No account is registered under the requested username."""

    def __init__(self, message: str = "Username not found.") -> None:
        super().__init__(message)


class TransportError(EnviroLensError):
    """Remote service unreachable, offline, or returned undecodable data."""

    def __init__(
        self,
        message: str = NETWORK_ERROR_MESSAGE,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(message, original_error)


class AuthError(EnviroLensError):
    """The identity provider rejected the request.

    ``message`` is the provider's own description, unclassified.
    """


class BiometricUnavailableError(EnviroLensError):
    """The device lacks biometric hardware or enrolment."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or "Biometric authentication not available.")


class BiometricFailedError(EnviroLensError):
    """The user cancelled the prompt or the biometric match failed."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or "Biometric authentication failed.")


class AuthenticationRequiredError(RuntimeError):
    """Raised when the current user is requested while nobody is signed in."""
