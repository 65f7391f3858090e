"""
Session Authenticator.

Thin adapter over the identity provider's password flows.  A successful
sign-in publishes the resulting ``SessionUser`` to the shared
``SessionManager``; nothing else in the client talks to the provider's
auth API.
"""

from __future__ import annotations

from envirolens.auth import SessionManager
from envirolens.database import DatabaseManager
from envirolens.errors import AuthError, TransportError
from envirolens.logger import StructuredLogger
from envirolens.models.auth_models import SessionUser
from envirolens.services.base_service import BaseService


class SessionAuthenticator(BaseService):
    """Password sign-in, account creation and sign-out.

    No call is retried here; retrying is the caller's decision.

    Parameters
    ----------
    db:
        Provides the Supabase client (``RuntimeError`` when offline).
    session:
        Shared session context updated on sign-in and sign-out.
    logger:
        Structured logger.
    """

    def __init__(
        self,
        db: DatabaseManager,
        session: SessionManager,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._db: DatabaseManager = db
        self._session: SessionManager = session

    def authenticate(self, identifier: str, secret: str) -> SessionUser:
        """Verify (*identifier*, *secret*) and make the user current.

        *identifier* must be the canonical account email, not a username.

        Raises:
            TransportError: Offline, or the provider could not be reached.
            AuthError: The provider rejected the credentials.  The message
                is the provider's text.
        """
        try:
            response = self._db.supabase.auth.sign_in_with_password({
                "email": identifier,
                "password": secret,
            })
        except Exception as exc:
            raise self._classify(exc, identifier, "LOGIN_FAILED") from exc

        user_data = getattr(response, "user", None)
        if user_data is None:
            raise AuthError("Sign-in did not return a user.")
        session_data = getattr(response, "session", None)

        user = SessionUser(
            user_id=str(user_data.id),
            email=user_data.email or identifier,
            access_token=getattr(session_data, "access_token", None),
            refresh_token=getattr(session_data, "refresh_token", None),
        )
        self._session.set_current_user(user)

        self._logger.info(
            "User authenticated: %s",
            user.email,
            extra={"event": "LOGIN", "user_id": user.user_id},
        )
        return user

    def create_account(self, email: str, secret: str) -> str:
        """Create a provider account and return its user id.

        Raises:
            TransportError: Offline, or the provider could not be reached.
            AuthError: The provider refused the sign-up.
        """
        try:
            response = self._db.supabase.auth.sign_up({
                "email": email,
                "password": secret,
            })
        except Exception as exc:
            raise self._classify(exc, email, "REGISTER_FAILED") from exc

        user_data = getattr(response, "user", None)
        if user_data is None or not getattr(user_data, "id", None):
            raise AuthError("User ID could not be retrieved.")

        self._logger.info(
            "Account created for %s.", email,
            extra={"event": "ACCOUNT_CREATED", "user_id": str(user_data.id)},
        )
        return str(user_data.id)

    def sign_out(self) -> None:
        """End the provider session and clear the local one.

        Provider failures are logged; the local session is cleared
        regardless so the UI always returns to the signed-out screen.
        """
        current = self._session.current_user
        email = current.email if current is not None else "unknown"

        try:
            self._db.supabase.auth.sign_out()
        except RuntimeError:
            self._logger.debug("Offline: skipping provider sign-out for %s.", email)
        except Exception as exc:
            self._logger.warning("Provider sign-out failed for %s: %s", email, exc)

        self._session.clear()
        self._logger.info("User signed out: %s", email, extra={"event": "LOGOUT"})

    def _classify(self, exc: Exception, email: str, event: str) -> Exception:
        """Map a provider exception onto ``TransportError`` or ``AuthError``."""
        if isinstance(exc, (RuntimeError, ConnectionError, TimeoutError)):
            self._logger.warning(
                "Identity provider unreachable for %s: %s", email, exc,
                extra={"event": event, "error_code": "network"},
            )
            return TransportError(original_error=exc)

        message = getattr(exc, "message", None) or str(exc) or type(exc).__name__
        self._logger.warning(
            "Identity provider rejected %s: %s", email, message,
            extra={"event": event, "error_code": "rejected"},
        )
        return AuthError(str(message), original_error=exc)
