"""Client-side form rules shared by the login and registration screens."""

from __future__ import annotations

import re

from envirolens.models.auth_models import ValidationResult

_USERNAME_RE: re.Pattern[str] = re.compile(r"^[A-Za-z0-9_]{3,15}$")
_EMAIL_RE: re.Pattern[str] = re.compile(r"^[A-Z0-9a-z._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,64}$")
_STRONG_PASSWORD_RE: re.Pattern[str] = re.compile(
    r"^(?=.*[A-Z])(?=.*[0-9])(?=.*[a-z])(?=.*[!@#$%^&*(),.?\":{}|<>]).{8,}$"
)

RESERVED_USERNAMES: frozenset[str] = frozenset({"admin", "support", "help", "root"})

INVALID_USERNAME_MESSAGE: str = "Please enter a valid username."
EMPTY_PASSWORD_MESSAGE: str = "Password cannot be empty."


class FormValidator:
    """Stateless validation rules.  Every method is a pure predicate."""

    @staticmethod
    def is_valid_name(name: str) -> bool:
        return bool(name.strip())

    @staticmethod
    def is_valid_username(username: str) -> bool:
        """3-15 characters drawn from letters, digits and underscore."""
        return _USERNAME_RE.fullmatch(username) is not None

    @staticmethod
    def is_username_allowed(username: str) -> bool:
        return username.lower() not in RESERVED_USERNAMES

    @staticmethod
    def is_valid_email(email: str) -> bool:
        return _EMAIL_RE.fullmatch(email) is not None

    @staticmethod
    def is_valid_password(password: str) -> bool:
        return len(password) >= 8

    @staticmethod
    def is_strong_password(password: str) -> bool:
        """At least 8 characters with an upper, a lower, a digit and a symbol."""
        return _STRONG_PASSWORD_RE.fullmatch(password) is not None

    @staticmethod
    def passwords_match(password: str, confirm_password: str) -> bool:
        return password == confirm_password

    @staticmethod
    def is_not_blank(value: str) -> bool:
        return bool(value.strip())

    @classmethod
    def validate_login(cls, handle: str, secret: str) -> ValidationResult:
        """Check the login form.  The username rule is reported first."""
        if not cls.is_valid_username(handle):
            return ValidationResult(is_valid=False, error_message=INVALID_USERNAME_MESSAGE)
        if not secret:
            return ValidationResult(is_valid=False, error_message=EMPTY_PASSWORD_MESSAGE)
        return ValidationResult(is_valid=True)
