"""
Authentication & Session State.

Provides an injectable ``SessionManager`` holding the one authenticated
``SessionUser`` for the lifetime of the process.  The view layer
subscribes to it to switch between the signed-out and signed-in
screens; no module-level globals are involved.

Usage::

    session = SessionManager()
    unsubscribe = session.subscribe(lambda user: print("now", user))
    session.set_current_user(SessionUser(user_id="abc", email="a@b.c"))
    unsubscribe()
"""

from __future__ import annotations

import threading
from typing import Callable, Optional

from envirolens.errors import AuthenticationRequiredError
from envirolens.logger import StructuredLogger
from envirolens.models.auth_models import SessionUser

SessionListener = Callable[[Optional[SessionUser]], None]


class SessionManager:
    """Injectable holder for the current authenticated user.

    Pass a single instance through the dependency-injection layer so every
    component observes the same session.  Listeners are called on the
    thread that changed the session, outside the internal lock.
    """

    def __init__(self, logger: Optional[StructuredLogger] = None) -> None:
        self._lock: threading.RLock = threading.RLock()
        self._current_user: Optional[SessionUser] = None
        self._listeners: list[SessionListener] = []
        self._logger: Optional[StructuredLogger] = logger

    def set_current_user(self, user: SessionUser) -> None:
        """Record *user* as the authenticated session user."""
        with self._lock:
            self._current_user = user
        self._notify(user)

    def get_current_user(self) -> SessionUser:
        """Return the authenticated user.

        Raises:
            AuthenticationRequiredError: If nobody is signed in.
        """
        with self._lock:
            if self._current_user is None:
                raise AuthenticationRequiredError(
                    "No user is currently authenticated. Login required."
                )
            return self._current_user

    @property
    def current_user(self) -> Optional[SessionUser]:
        with self._lock:
            return self._current_user

    @property
    def is_authenticated(self) -> bool:
        """``True`` when a user is currently signed in."""
        with self._lock:
            return self._current_user is not None

    def clear(self) -> None:
        """End the session.  Listeners fire only if a user was present."""
        with self._lock:
            had_user = self._current_user is not None
            self._current_user = None
        if had_user:
            self._notify(None)

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register *listener* and return a callable that removes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, user: Optional[SessionUser]) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(user)
            except Exception as exc:
                if self._logger is not None:
                    self._logger.warning("Session listener raised: %s", exc)
