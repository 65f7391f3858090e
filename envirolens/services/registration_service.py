"""
Registration Service.

Creates an account in three steps: reject a taken username, create the
identity-provider account, then write the profile document the login
flow later resolves usernames against.
"""

from __future__ import annotations

from typing import Sequence

from envirolens.errors import NETWORK_ERROR_MESSAGE, EnviroLensError, TransportError
from envirolens.logger import StructuredLogger
from envirolens.models.auth_models import AuthResult, ValidationResult
from envirolens.models.enums import AuthErrorCode
from envirolens.models.user import RegistrationForm, UserProfile
from envirolens.repositories.user_repository import UserRepository
from envirolens.services.base_service import BaseService
from envirolens.services.form_validator import FormValidator
from envirolens.services.session_authenticator import SessionAuthenticator


class RegistrationService(BaseService):
    """Validates and submits the registration form.

    Parameters
    ----------
    repo:
        Repository over the ``users`` collection.
    authenticator:
        Creates the identity-provider account.
    logger:
        Structured logger.
    areas:
        Selectable service areas; the form's ``area`` must be one of them.
    """

    def __init__(
        self,
        repo: UserRepository,
        authenticator: SessionAuthenticator,
        logger: StructuredLogger,
        areas: Sequence[str],
    ) -> None:
        super().__init__(logger)
        self._repo: UserRepository = repo
        self._authenticator: SessionAuthenticator = authenticator
        self._areas: tuple[str, ...] = tuple(areas)

    @property
    def areas(self) -> tuple[str, ...]:
        return self._areas

    def validate(self, form: RegistrationForm) -> ValidationResult:
        """Return the first rule *form* breaks, in on-screen field order."""
        checks: list[tuple[bool, str]] = [
            (FormValidator.is_valid_name(form.name), "Please enter your name."),
            (FormValidator.is_valid_username(form.username), "Please enter a valid username."),
            (FormValidator.is_username_allowed(form.username), "This username is reserved."),
            (FormValidator.is_valid_email(form.email), "Please enter a valid email address."),
            (
                FormValidator.is_strong_password(form.password),
                "Password must be at least 8 characters with an uppercase letter, "
                "a lowercase letter, a number and a symbol.",
            ),
            (
                FormValidator.passwords_match(form.password, form.confirm_password),
                "Passwords do not match.",
            ),
            (form.area in self._areas, "Please select an area."),
            (form.accept_terms, "Please accept the terms and conditions."),
        ]
        for passed, message in checks:
            if not passed:
                return ValidationResult(is_valid=False, error_message=message)
        return ValidationResult(is_valid=True)

    def register(self, form: RegistrationForm) -> AuthResult:
        """Register a new account.  Never raises; failures come back typed."""
        validation = self.validate(form)
        if not validation.is_valid:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.VALIDATION_ERROR,
                error_message=validation.error_message,
            )

        if not self._repo.is_online:
            self._logger.warning("Registration attempted while offline: %s", form.username)
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.NETWORK_ERROR,
                error_message=NETWORK_ERROR_MESSAGE,
            )

        try:
            taken = self._repo.username_exists(form.username)
        except Exception as exc:
            self._logger.warning(
                "Username availability check failed for %s: %s", form.username, exc,
            )
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.NETWORK_ERROR,
                error_message=f"Failed to register: {exc}",
            )
        if taken:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.USERNAME_TAKEN,
                error_message="Username already taken.",
            )

        try:
            user_id = self._authenticator.create_account(form.email, form.password)
        except TransportError as exc:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.NETWORK_ERROR,
                error_message=exc.message,
            )
        except EnviroLensError as exc:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.PROVIDER_REJECTED,
                error_message=f"Failed to register: {exc.message}",
            )

        profile = UserProfile(
            name=form.name.strip(),
            username=form.username,
            email=form.email,
            area=form.area,
        )
        try:
            self._repo.create(user_id, profile)
        except Exception as exc:
            self._logger.error(
                "Account %s created but profile write failed: %s", user_id, exc,
                extra={"event": "REGISTER_FAILED"},
            )
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.STORAGE_ERROR,
                error_message=f"Failed to save user data: {exc}",
                user_id=user_id,
            )

        self._logger.info(
            "User registered: %s (%s).", form.username, form.email,
            extra={"event": "REGISTER", "user_id": user_id},
        )
        return AuthResult(success=True, user_id=user_id, email=form.email)
