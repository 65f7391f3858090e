"""
Data Models Package.

Pydantic models and enumerations shared by services and the UI layer.
"""

from envirolens.models.auth_models import (
    AuthResult,
    Credential,
    LoginFormState,
    SessionUser,
    ValidationResult,
)
from envirolens.models.enums import AuthErrorCode, BiometricState, LoginState
from envirolens.models.user import RegistrationForm, UserProfile

__all__ = [
    "AuthErrorCode",
    "AuthResult",
    "BiometricState",
    "Credential",
    "LoginFormState",
    "LoginState",
    "RegistrationForm",
    "SessionUser",
    "UserProfile",
    "ValidationResult",
]
