from __future__ import annotations

from types import SimpleNamespace

import pytest

from envirolens.errors import AuthError, TransportError
from envirolens.models.auth_models import SessionUser
from envirolens.services.session_authenticator import SessionAuthenticator
from tests.helpers import make_auth_response


class ProviderError(Exception):
    """Stands in for the provider's API error, which carries ``.message``."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


@pytest.fixture
def authenticator(db, session, logger) -> SessionAuthenticator:
    return SessionAuthenticator(db=db, session=session, logger=logger)


def test_authenticate_sets_session(authenticator, supabase_client, session):
    supabase_client.auth.sign_in_with_password.return_value = make_auth_response()

    user = authenticator.authenticate("alice@example.com", "correct")

    supabase_client.auth.sign_in_with_password.assert_called_once_with(
        {"email": "alice@example.com", "password": "correct"}
    )
    assert user == SessionUser(
        user_id="uid-1",
        email="alice@example.com",
        access_token="access",
        refresh_token="refresh",
    )
    assert session.get_current_user() == user


def test_rejection_message_is_passed_through(authenticator, supabase_client, session):
    supabase_client.auth.sign_in_with_password.side_effect = ProviderError(
        "Invalid login credentials"
    )

    with pytest.raises(AuthError) as exc_info:
        authenticator.authenticate("alice@example.com", "wrong")

    assert exc_info.value.message == "Invalid login credentials"
    assert session.is_authenticated is False


def test_plain_exception_text_is_used(authenticator, supabase_client):
    supabase_client.auth.sign_in_with_password.side_effect = ValueError("Email not confirmed")

    with pytest.raises(AuthError, match="Email not confirmed"):
        authenticator.authenticate("alice@example.com", "pw")


def test_connection_failure_is_transport_error(authenticator, supabase_client):
    supabase_client.auth.sign_in_with_password.side_effect = ConnectionError("reset")

    with pytest.raises(TransportError):
        authenticator.authenticate("alice@example.com", "pw")


def test_offline_is_transport_error(offline_db, session, logger):
    authenticator = SessionAuthenticator(db=offline_db, session=session, logger=logger)

    with pytest.raises(TransportError):
        authenticator.authenticate("alice@example.com", "pw")


def test_missing_user_is_auth_error(authenticator, supabase_client, session):
    supabase_client.auth.sign_in_with_password.return_value = SimpleNamespace(
        user=None, session=None
    )

    with pytest.raises(AuthError):
        authenticator.authenticate("alice@example.com", "pw")
    assert session.current_user is None


def test_create_account_returns_user_id(authenticator, supabase_client):
    supabase_client.auth.sign_up.return_value = make_auth_response(user_id="new-id")

    assert authenticator.create_account("new@example.com", "Strong@123") == "new-id"
    supabase_client.auth.sign_up.assert_called_once_with(
        {"email": "new@example.com", "password": "Strong@123"}
    )


def test_create_account_without_id_fails(authenticator, supabase_client):
    supabase_client.auth.sign_up.return_value = SimpleNamespace(user=None)

    with pytest.raises(AuthError, match="User ID could not be retrieved."):
        authenticator.create_account("new@example.com", "Strong@123")


def test_sign_out_clears_session(authenticator, supabase_client, session):
    session.set_current_user(SessionUser(user_id="u", email="alice@example.com"))

    authenticator.sign_out()

    supabase_client.auth.sign_out.assert_called_once_with()
    assert session.is_authenticated is False


def test_sign_out_clears_session_when_provider_fails(authenticator, supabase_client, session):
    session.set_current_user(SessionUser(user_id="u", email="alice@example.com"))
    supabase_client.auth.sign_out.side_effect = ConnectionError("down")

    authenticator.sign_out()

    assert session.is_authenticated is False


def test_sign_out_offline(offline_db, session, logger):
    session.set_current_user(SessionUser(user_id="u", email="alice@example.com"))
    SessionAuthenticator(db=offline_db, session=session, logger=logger).sign_out()
    assert session.current_user is None
