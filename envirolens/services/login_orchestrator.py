"""
Login Orchestrator.

State machine behind the login screen.  Two entry points:

- ``submit(handle, secret)``: validate -> resolve username -> sign in ->
  cache the credential.
- ``submit_biometric()``: biometric challenge -> read the cached
  credential -> sign in.

Remote and biometric work runs off the caller's thread via an injected
``spawn``; results are applied through an injected ``dispatch`` so a UI
toolkit can marshal them back to its main loop.  Every attempt carries a
generation number, and results from a superseded generation (after
``teardown()``) are dropped without touching state.  A credential the
provider has accepted is cached even when its attempt has gone stale.

**Thin UI Rule**: views read ``state`` / ``form`` and call ``submit``;
all decisions live here.
"""

from __future__ import annotations

import threading
from typing import Callable, Optional

from envirolens.errors import EnviroLensError
from envirolens.logger import StructuredLogger
from envirolens.models.auth_models import LoginFormState, SessionUser
from envirolens.models.enums import LoginState
from envirolens.services.base_service import BaseService
from envirolens.services.biometric_gate import BiometricGate
from envirolens.services.credential_vault import CredentialVault
from envirolens.services.form_validator import FormValidator
from envirolens.services.identity_resolver import IdentityResolver
from envirolens.services.session_authenticator import SessionAuthenticator

Task = Callable[[], None]
Spawn = Callable[[Task], None]
Dispatch = Callable[[Task], None]
LoginListener = Callable[[LoginState, LoginFormState], None]

NO_SAVED_CREDENTIALS_MESSAGE: str = "No saved credentials found."
VAULT_SAVE_FAILED_MESSAGE: str = "Biometric login unavailable: could not save credentials."
UNEXPECTED_ERROR_MESSAGE: str = "An unexpected error occurred. Please try again later."


def _thread_spawn(task: Task) -> None:
    threading.Thread(target=task, daemon=True).start()


def _inline_dispatch(task: Task) -> None:
    task()


class LoginOrchestrator(BaseService):
    """Drives one login attempt at a time.

    Parameters
    ----------
    resolver:
        Username -> email lookup.
    authenticator:
        Password sign-in against the identity provider.
    vault:
        Single-slot credential cache used by the biometric path.
    biometric_gate:
        Pass/fail wrapper around the platform prompt.
    logger:
        Structured logger.
    spawn:
        Runs a background task.  Defaults to a daemon thread.
    dispatch:
        Applies a result on the UI thread.  Defaults to calling inline.
    """

    def __init__(
        self,
        resolver: IdentityResolver,
        authenticator: SessionAuthenticator,
        vault: CredentialVault,
        biometric_gate: BiometricGate,
        logger: StructuredLogger,
        spawn: Optional[Spawn] = None,
        dispatch: Optional[Dispatch] = None,
    ) -> None:
        super().__init__(logger)
        self._resolver: IdentityResolver = resolver
        self._authenticator: SessionAuthenticator = authenticator
        self._vault: CredentialVault = vault
        self._biometric_gate: BiometricGate = biometric_gate
        self._spawn: Spawn = spawn or _thread_spawn
        self._dispatch: Dispatch = dispatch or _inline_dispatch

        self._lock: threading.Lock = threading.Lock()
        self._state: LoginState = LoginState.IDLE
        self._form: LoginFormState = LoginFormState()
        self._vault_warning: Optional[str] = None
        self._session_user: Optional[SessionUser] = None
        self._generation: int = 0
        self._torn_down: bool = False
        self._listeners: list[LoginListener] = []

    # ------------------------------------------------------------------
    # Read-only view state
    # ------------------------------------------------------------------

    @property
    def state(self) -> LoginState:
        with self._lock:
            return self._state

    @property
    def form(self) -> LoginFormState:
        """A copy of the current form snapshot."""
        with self._lock:
            return self._form.model_copy()

    @property
    def error_message(self) -> Optional[str]:
        with self._lock:
            return self._form.error_message

    @property
    def is_loading(self) -> bool:
        with self._lock:
            return self._form.loading

    @property
    def vault_warning(self) -> Optional[str]:
        """Set when sign-in succeeded but the credential could not be cached."""
        with self._lock:
            return self._vault_warning

    @property
    def session_user(self) -> Optional[SessionUser]:
        with self._lock:
            return self._session_user

    def subscribe(self, listener: LoginListener) -> Callable[[], None]:
        """Register *listener* for state changes; returns an unsubscribe callable."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def submit(self, handle: str, secret: str) -> bool:
        """Start a username + password attempt.

        Returns ``False`` without side effects while another attempt is
        loading or after teardown, and ``False`` when validation fails
        (state ``FAILED`` with the validation message).  Returns ``True``
        once the background attempt has been started.
        """
        with self._lock:
            if self._torn_down or self._form.loading:
                return False
            self._form.attempted = True
            self._form.handle = handle
            self._state = LoginState.VALIDATING
        self._notify()

        validation = FormValidator.validate_login(handle, secret)
        if not validation.is_valid:
            with self._lock:
                self._state = LoginState.FAILED
                self._form.error_message = validation.error_message
            self._logger.debug("Login form rejected: %s", validation.error_message)
            self._notify()
            return False

        generation = self._begin(LoginState.RESOLVING_HANDLE)
        self._spawn(lambda: self._run_password_flow(generation, handle, secret))
        return True

    def submit_biometric(self) -> bool:
        """Start a biometric attempt.  Ignores the form fields entirely.

        Returns ``False`` while another attempt is loading or after
        teardown.
        """
        with self._lock:
            if self._torn_down or self._form.loading:
                return False
        generation = self._begin(LoginState.BIOMETRIC_CHALLENGE)
        self._spawn(lambda: self._run_biometric_flow(generation))
        return True

    def teardown(self) -> None:
        """Detach from the view.  In-flight UI results are discarded."""
        with self._lock:
            self._torn_down = True
            self._generation += 1
            self._listeners.clear()

    # ------------------------------------------------------------------
    # Background flows
    # ------------------------------------------------------------------

    def _run_password_flow(self, generation: int, handle: str, secret: str) -> None:
        try:
            identifier = self._resolver.resolve(handle)
        except EnviroLensError as exc:
            self._fail(generation, exc.message)
            return
        except Exception as exc:
            self._fail_unexpected(generation, exc)
            return

        self._transition(generation, LoginState.AUTHENTICATING)
        self._authenticate(generation, identifier, secret, cache_credential=True)

    def _run_biometric_flow(self, generation: int) -> None:
        try:
            self._biometric_gate.reset()
            self._biometric_gate.challenge()
        except EnviroLensError as exc:
            self._fail(generation, exc.message)
            return
        except Exception as exc:
            self._fail_unexpected(generation, exc)
            return

        credential = self._vault.retrieve()
        if credential is None:
            self._fail(generation, NO_SAVED_CREDENTIALS_MESSAGE)
            return

        self._transition(generation, LoginState.AUTHENTICATING)
        self._authenticate(
            generation,
            credential.identifier,
            credential.secret,
            cache_credential=False,
            event="BIOMETRIC_LOGIN",
        )

    def _authenticate(
        self,
        generation: int,
        identifier: str,
        secret: str,
        cache_credential: bool,
        event: str = "LOGIN",
    ) -> None:
        try:
            user = self._authenticator.authenticate(identifier, secret)
        except EnviroLensError as exc:
            self._fail(generation, exc.message)
            return
        except Exception as exc:
            self._fail_unexpected(generation, exc)
            return

        # Signing in already published the session, which may have torn this
        # orchestrator down; the credential is cached either way.
        warning: Optional[str] = None
        if cache_credential and not self._vault.save(identifier, secret):
            warning = VAULT_SAVE_FAILED_MESSAGE
            self._logger.warning(
                "Credential for %s was not cached; biometric login will be unavailable.",
                identifier,
                extra={"event": "VAULT_SAVE_FAILED"},
            )

        self._logger.info(
            "Login flow completed for %s.", identifier, extra={"event": event},
        )

        def apply() -> None:
            self._state = LoginState.SUCCESS
            self._form.loading = False
            self._form.error_message = None
            self._vault_warning = warning
            self._session_user = user

        self._apply(generation, apply)

    # ------------------------------------------------------------------
    # State helpers
    # ------------------------------------------------------------------

    def _begin(self, state: LoginState) -> int:
        with self._lock:
            self._generation += 1
            generation = self._generation
            self._state = state
            self._form.loading = True
            self._form.error_message = None
            self._vault_warning = None
        self._notify()
        return generation

    def _transition(self, generation: int, state: LoginState) -> None:
        def apply() -> None:
            self._state = state

        self._apply(generation, apply)

    def _fail(self, generation: int, message: str) -> None:
        self._logger.info("Login attempt failed: %s", message, extra={"event": "LOGIN_FAILED"})

        def apply() -> None:
            self._state = LoginState.FAILED
            self._form.loading = False
            self._form.error_message = message

        self._apply(generation, apply)

    def _fail_unexpected(self, generation: int, exc: Exception) -> None:
        self._logger.error(
            "Unexpected error during login: %s", exc,
            exc_info=True, extra={"event": "LOGIN_FAILED"},
        )
        self._fail(generation, UNEXPECTED_ERROR_MESSAGE)

    def _apply(self, generation: int, mutate: Task) -> None:
        """Run *mutate* on the dispatch thread if *generation* is still live."""

        def run() -> None:
            with self._lock:
                if self._torn_down or generation != self._generation:
                    return
                mutate()
            self._notify()

        self._dispatch(run)

    def _notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
            state = self._state
            form = self._form.model_copy()
        for listener in listeners:
            try:
                listener(state, form)
            except Exception as exc:
                self._logger.warning("Login listener raised: %s", exc)
