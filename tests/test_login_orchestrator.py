from __future__ import annotations

import threading
from unittest.mock import Mock

import pytest

from envirolens.errors import (
    NETWORK_ERROR_MESSAGE,
    AuthError,
    BiometricFailedError,
    BiometricUnavailableError,
    NotFoundError,
    TransportError,
)
from envirolens.models.auth_models import Credential, SessionUser
from envirolens.models.enums import BiometricState, LoginState
from envirolens.services.biometric_gate import BiometricGate
from envirolens.services.credential_vault import CredentialVault
from envirolens.services.identity_resolver import IdentityResolver
from envirolens.services.login_orchestrator import (
    NO_SAVED_CREDENTIALS_MESSAGE,
    UNEXPECTED_ERROR_MESSAGE,
    VAULT_SAVE_FAILED_MESSAGE,
    LoginOrchestrator,
)
from envirolens.services.session_authenticator import SessionAuthenticator
from tests.helpers import make_auth_response

ALICE = SessionUser(user_id="uid-alice", email="alice@example.com")
BOB = SessionUser(user_id="uid-bob", email="bob@example.com")


class TaskQueue:
    """Collects tasks instead of running them, for spawn or dispatch."""

    def __init__(self) -> None:
        self.tasks: list = []

    def __call__(self, task) -> None:
        self.tasks.append(task)

    def run_all(self) -> None:
        while self.tasks:
            self.tasks.pop(0)()


def run_inline(task) -> None:
    task()


@pytest.fixture
def resolver() -> Mock:
    mock = Mock(spec=IdentityResolver)
    mock.resolve.return_value = "alice@example.com"
    return mock


@pytest.fixture
def authenticator() -> Mock:
    mock = Mock(spec=SessionAuthenticator)
    mock.authenticate.return_value = ALICE
    return mock


@pytest.fixture
def gate() -> Mock:
    mock = Mock(spec=BiometricGate)
    mock.challenge.return_value = BiometricState.AUTHENTICATED
    return mock


@pytest.fixture
def make_orchestrator(resolver, authenticator, gate, vault, logger):
    def factory(spawn=run_inline, dispatch=None, vault_override=None) -> LoginOrchestrator:
        return LoginOrchestrator(
            resolver=resolver,
            authenticator=authenticator,
            vault=vault_override or vault,
            biometric_gate=gate,
            logger=logger,
            spawn=spawn,
            dispatch=dispatch,
        )

    return factory


# ----------------------------------------------------------------------
# Password flow
# ----------------------------------------------------------------------


def test_invalid_username_fails_locally(make_orchestrator, resolver, authenticator):
    orchestrator = make_orchestrator()

    assert orchestrator.submit("x", "anything") is False

    assert orchestrator.state is LoginState.FAILED
    assert orchestrator.error_message == "Please enter a valid username."
    assert orchestrator.is_loading is False
    assert orchestrator.form.attempted is True
    resolver.resolve.assert_not_called()
    authenticator.authenticate.assert_not_called()


def test_empty_password_fails_locally(make_orchestrator, resolver):
    orchestrator = make_orchestrator()

    assert orchestrator.submit("valid_user", "") is False

    assert orchestrator.error_message == "Password cannot be empty."
    resolver.resolve.assert_not_called()


def test_unknown_username(make_orchestrator, resolver, authenticator):
    resolver.resolve.side_effect = NotFoundError()
    orchestrator = make_orchestrator()

    assert orchestrator.submit("ghost", "pw") is True

    assert orchestrator.state is LoginState.FAILED
    assert orchestrator.error_message == "Username not found."
    authenticator.authenticate.assert_not_called()


def test_lookup_transport_failure(make_orchestrator, resolver, authenticator):
    resolver.resolve.side_effect = TransportError()
    orchestrator = make_orchestrator()

    orchestrator.submit("alice", "pw")

    assert orchestrator.state is LoginState.FAILED
    assert orchestrator.error_message == NETWORK_ERROR_MESSAGE
    authenticator.authenticate.assert_not_called()


def test_successful_login_caches_credential(make_orchestrator, resolver, authenticator, vault):
    orchestrator = make_orchestrator()

    assert orchestrator.submit("alice", "correct") is True

    resolver.resolve.assert_called_once_with("alice")
    authenticator.authenticate.assert_called_once_with("alice@example.com", "correct")
    assert orchestrator.state is LoginState.SUCCESS
    assert orchestrator.is_loading is False
    assert orchestrator.error_message is None
    assert orchestrator.vault_warning is None
    assert orchestrator.session_user == ALICE
    assert vault.retrieve() == Credential(identifier="alice@example.com", secret="correct")


def test_rejected_password_leaves_vault_untouched(make_orchestrator, authenticator, vault):
    authenticator.authenticate.side_effect = AuthError("Invalid login credentials")
    orchestrator = make_orchestrator()

    orchestrator.submit("alice", "wrong")

    assert orchestrator.state is LoginState.FAILED
    assert orchestrator.error_message == "Invalid login credentials"
    assert vault.retrieve() is None


def test_sign_in_transport_failure(make_orchestrator, authenticator):
    authenticator.authenticate.side_effect = TransportError()
    orchestrator = make_orchestrator()

    orchestrator.submit("alice", "pw")

    assert orchestrator.error_message == NETWORK_ERROR_MESSAGE


def test_vault_save_failure_is_reported(make_orchestrator):
    broken_vault = Mock(spec=CredentialVault)
    broken_vault.save.return_value = False
    orchestrator = make_orchestrator(vault_override=broken_vault)

    orchestrator.submit("alice", "correct")

    assert orchestrator.state is LoginState.SUCCESS
    assert orchestrator.vault_warning == VAULT_SAVE_FAILED_MESSAGE
    broken_vault.save.assert_called_once_with("alice@example.com", "correct")


def test_unexpected_exception_becomes_generic_failure(make_orchestrator, resolver):
    resolver.resolve.side_effect = KeyError("boom")
    orchestrator = make_orchestrator()

    orchestrator.submit("alice", "pw")

    assert orchestrator.state is LoginState.FAILED
    assert orchestrator.error_message == UNEXPECTED_ERROR_MESSAGE
    assert orchestrator.is_loading is False


def test_retry_after_failure_clears_error(make_orchestrator, resolver):
    resolver.resolve.side_effect = [NotFoundError(), "alice@example.com"]
    orchestrator = make_orchestrator()

    orchestrator.submit("alice", "pw")
    assert orchestrator.state is LoginState.FAILED

    assert orchestrator.submit("alice", "pw") is True
    assert orchestrator.state is LoginState.SUCCESS
    assert orchestrator.error_message is None


def test_listener_sees_every_transition(make_orchestrator):
    orchestrator = make_orchestrator()
    seen: list[LoginState] = []
    orchestrator.subscribe(lambda state, form: seen.append(state))

    orchestrator.submit("alice", "correct")

    assert seen == [
        LoginState.VALIDATING,
        LoginState.RESOLVING_HANDLE,
        LoginState.AUTHENTICATING,
        LoginState.SUCCESS,
    ]


def test_form_never_holds_the_secret(make_orchestrator):
    orchestrator = make_orchestrator()
    forms = []
    orchestrator.subscribe(lambda state, form: forms.append(form))

    orchestrator.submit("alice", "correct-horse")

    assert forms
    for form in forms:
        assert "correct-horse" not in form.model_dump_json()
    assert orchestrator.form.handle == "alice"


def test_unsubscribed_listener_is_not_called(make_orchestrator):
    orchestrator = make_orchestrator()
    listener = Mock()
    unsubscribe = orchestrator.subscribe(listener)
    unsubscribe()

    orchestrator.submit("alice", "correct")

    listener.assert_not_called()


def test_raising_listener_does_not_break_flow(make_orchestrator):
    orchestrator = make_orchestrator()
    orchestrator.subscribe(Mock(side_effect=RuntimeError("render failed")))

    orchestrator.submit("alice", "correct")

    assert orchestrator.state is LoginState.SUCCESS


# ----------------------------------------------------------------------
# Biometric flow
# ----------------------------------------------------------------------


def test_biometric_login_uses_cached_credential(
    make_orchestrator, resolver, authenticator, gate, vault,
):
    vault.save("bob@example.com", "pw1")
    authenticator.authenticate.return_value = BOB
    orchestrator = make_orchestrator()

    assert orchestrator.submit_biometric() is True

    gate.challenge.assert_called_once_with()
    authenticator.authenticate.assert_called_once_with("bob@example.com", "pw1")
    resolver.resolve.assert_not_called()
    assert orchestrator.state is LoginState.SUCCESS
    assert orchestrator.session_user == BOB


def test_biometric_login_ignores_form_fields(make_orchestrator, authenticator, vault):
    vault.save("bob@example.com", "pw1")
    orchestrator = make_orchestrator()
    orchestrator.submit("x", "")

    orchestrator.submit_biometric()

    authenticator.authenticate.assert_called_once_with("bob@example.com", "pw1")


def test_biometric_with_empty_vault(make_orchestrator, authenticator):
    orchestrator = make_orchestrator()

    orchestrator.submit_biometric()

    assert orchestrator.state is LoginState.FAILED
    assert orchestrator.error_message == NO_SAVED_CREDENTIALS_MESSAGE
    authenticator.authenticate.assert_not_called()


def test_biometric_unavailable(make_orchestrator, gate, authenticator, vault):
    vault.save("bob@example.com", "pw1")
    gate.challenge.side_effect = BiometricUnavailableError()
    orchestrator = make_orchestrator()

    orchestrator.submit_biometric()

    assert orchestrator.error_message == "Biometric authentication not available."
    authenticator.authenticate.assert_not_called()


def test_gate_is_reset_before_each_challenge(make_orchestrator, gate, vault):
    vault.save("bob@example.com", "pw1")
    orchestrator = make_orchestrator()

    orchestrator.submit_biometric()

    assert [call[0] for call in gate.mock_calls[:2]] == ["reset", "challenge"]


def test_biometric_retry_after_failure(resolver, authenticator, vault, logger):
    vault.save("bob@example.com", "pw1")
    prompt = Mock()
    prompt.can_evaluate.return_value = (True, None)
    prompt.evaluate.side_effect = [(False, "No match."), (True, None)]
    authenticator.authenticate.return_value = BOB
    orchestrator = LoginOrchestrator(
        resolver=resolver,
        authenticator=authenticator,
        vault=vault,
        biometric_gate=BiometricGate(prompt=prompt, logger=logger),
        logger=logger,
        spawn=run_inline,
    )

    orchestrator.submit_biometric()
    assert orchestrator.error_message == "No match."

    orchestrator.submit_biometric()
    assert orchestrator.state is LoginState.SUCCESS
    authenticator.authenticate.assert_called_once_with("bob@example.com", "pw1")


def test_biometric_mismatch(make_orchestrator, gate, authenticator, vault):
    vault.save("bob@example.com", "pw1")
    gate.challenge.side_effect = BiometricFailedError()
    orchestrator = make_orchestrator()

    orchestrator.submit_biometric()

    assert orchestrator.state is LoginState.FAILED
    assert orchestrator.error_message == "Biometric authentication failed."
    authenticator.authenticate.assert_not_called()


def test_biometric_success_does_not_rewrite_vault(make_orchestrator, authenticator):
    cached = Mock(spec=CredentialVault)
    cached.retrieve.return_value = Credential(identifier="bob@example.com", secret="pw1")
    authenticator.authenticate.return_value = BOB
    orchestrator = make_orchestrator(vault_override=cached)

    orchestrator.submit_biometric()

    assert orchestrator.state is LoginState.SUCCESS
    cached.save.assert_not_called()


# ----------------------------------------------------------------------
# Concurrency
# ----------------------------------------------------------------------


def test_second_submit_while_loading_is_ignored(make_orchestrator, resolver):
    spawn = TaskQueue()
    orchestrator = make_orchestrator(spawn=spawn)

    assert orchestrator.submit("alice", "correct") is True
    assert orchestrator.is_loading is True
    assert orchestrator.state is LoginState.RESOLVING_HANDLE

    assert orchestrator.submit("alice", "correct") is False
    assert orchestrator.submit_biometric() is False
    assert len(spawn.tasks) == 1

    spawn.run_all()

    resolver.resolve.assert_called_once_with("alice")
    assert orchestrator.state is LoginState.SUCCESS
    assert orchestrator.is_loading is False
    assert orchestrator.submit("alice", "correct") is True


def test_results_are_applied_through_dispatch(make_orchestrator):
    dispatch = TaskQueue()
    orchestrator = make_orchestrator(dispatch=dispatch)

    orchestrator.submit("alice", "correct")

    assert orchestrator.state is LoginState.RESOLVING_HANDLE
    assert orchestrator.is_loading is True

    dispatch.run_all()

    assert orchestrator.state is LoginState.SUCCESS
    assert orchestrator.is_loading is False


def test_ui_results_after_teardown_are_discarded(make_orchestrator, authenticator):
    spawn = TaskQueue()
    cached = Mock(spec=CredentialVault)
    cached.save.return_value = True
    orchestrator = make_orchestrator(spawn=spawn, vault_override=cached)
    listener = Mock()

    orchestrator.submit("alice", "correct")
    orchestrator.subscribe(listener)
    orchestrator.teardown()
    spawn.run_all()

    assert orchestrator.state is LoginState.RESOLVING_HANDLE
    assert orchestrator.session_user is None
    assert orchestrator.vault_warning is None
    listener.assert_not_called()
    cached.save.assert_called_once_with("alice@example.com", "correct")


def test_credential_cached_when_new_session_tears_view_down(
    resolver, vault, db, session, logger, supabase_client,
):
    supabase_client.auth.sign_in_with_password.return_value = make_auth_response()
    orchestrator = LoginOrchestrator(
        resolver=resolver,
        authenticator=SessionAuthenticator(db=db, session=session, logger=logger),
        vault=vault,
        biometric_gate=Mock(spec=BiometricGate),
        logger=logger,
        spawn=run_inline,
    )
    # Navigation destroys the login view as soon as a user is published.
    session.subscribe(lambda user: orchestrator.teardown() if user else None)

    assert orchestrator.submit("alice", "correct") is True

    assert session.is_authenticated is True
    assert vault.retrieve() == Credential(identifier="alice@example.com", secret="correct")


def test_submit_after_teardown_is_rejected(make_orchestrator, resolver):
    orchestrator = make_orchestrator()
    orchestrator.teardown()

    assert orchestrator.submit("alice", "correct") is False
    assert orchestrator.submit_biometric() is False
    assert orchestrator.state is LoginState.IDLE
    resolver.resolve.assert_not_called()


def test_default_spawn_runs_in_background(make_orchestrator):
    done = threading.Event()
    orchestrator = make_orchestrator(spawn=None)
    orchestrator.subscribe(
        lambda state, form: done.set()
        if state in (LoginState.SUCCESS, LoginState.FAILED)
        else None
    )

    assert orchestrator.submit("alice", "correct") is True
    assert done.wait(timeout=5)
    assert orchestrator.state is LoginState.SUCCESS
