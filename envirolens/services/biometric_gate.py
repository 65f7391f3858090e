"""
Biometric Gate.

Wraps the platform's biometric prompt into a pass/fail signal.  The gate
knows nothing about credentials; ``LoginOrchestrator`` decides what a
pass unlocks.
"""

from __future__ import annotations

import threading
from typing import Optional, Protocol

from envirolens.errors import BiometricFailedError, BiometricUnavailableError
from envirolens.logger import StructuredLogger
from envirolens.models.enums import BiometricState
from envirolens.services.base_service import BaseService


class BiometricPrompt(Protocol):
    """Platform seam for the native biometric dialog."""

    def can_evaluate(self) -> tuple[bool, Optional[str]]:
        """Return ``(available, reason_if_not)``."""
        ...

    def evaluate(self, reason: str) -> tuple[bool, Optional[str]]:
        """Show the prompt and block until it closes.

        Returns ``(success, error_text)``.
        """
        ...


class UnavailableBiometricPrompt:
    """Prompt used on platforms without biometric support."""

    def can_evaluate(self) -> tuple[bool, Optional[str]]:
        return False, "Biometric authentication not available."

    def evaluate(self, reason: str) -> tuple[bool, Optional[str]]:
        return False, "Biometric authentication not available."


class BiometricGate(BaseService):
    """IDLE -> EVALUATING -> AUTHENTICATED | FAILED.

    No timeout is applied; ``challenge`` blocks for as long as the
    platform prompt stays open.
    """

    def __init__(
        self,
        prompt: BiometricPrompt,
        logger: StructuredLogger,
        reason: str = "Authenticate with Face ID",
    ) -> None:
        super().__init__(logger)
        self._prompt: BiometricPrompt = prompt
        self._reason: str = reason
        self._lock: threading.Lock = threading.Lock()
        self._state: BiometricState = BiometricState.IDLE

    @property
    def state(self) -> BiometricState:
        with self._lock:
            return self._state

    def reset(self) -> None:
        """Return to IDLE so another challenge can be issued."""
        self._set_state(BiometricState.IDLE)

    def challenge(self) -> BiometricState:
        """Run one biometric check.

        Returns:
            ``BiometricState.AUTHENTICATED`` on a successful match.

        Raises:
            BiometricUnavailableError: No hardware or no enrolment.
            BiometricFailedError: Cancelled, or the match failed.
            RuntimeError: The gate is not IDLE; call ``reset()`` first.
        """
        with self._lock:
            if self._state != BiometricState.IDLE:
                raise RuntimeError(
                    f"Biometric challenge requires IDLE state, gate is {self._state}."
                )
            self._state = BiometricState.EVALUATING

        available, unavailable_reason = self._prompt.can_evaluate()
        if not available:
            self._set_state(BiometricState.FAILED)
            self._logger.info("Biometric prompt unavailable: %s", unavailable_reason)
            raise BiometricUnavailableError(unavailable_reason)

        try:
            success, error_text = self._prompt.evaluate(self._reason)
        except Exception as exc:
            self._set_state(BiometricState.FAILED)
            raise BiometricFailedError(str(exc) or None) from exc

        if not success:
            self._set_state(BiometricState.FAILED)
            self._logger.info("Biometric challenge failed: %s", error_text)
            raise BiometricFailedError(error_text)

        self._set_state(BiometricState.AUTHENTICATED)
        return BiometricState.AUTHENTICATED

    def _set_state(self, state: BiometricState) -> None:
        with self._lock:
            self._state = state
