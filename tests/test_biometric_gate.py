from __future__ import annotations

from unittest.mock import Mock

import pytest

from envirolens.errors import BiometricFailedError, BiometricUnavailableError
from envirolens.models.enums import BiometricState
from envirolens.services.biometric_gate import BiometricGate, UnavailableBiometricPrompt


def make_prompt(available=(True, None), result=(True, None)) -> Mock:
    prompt = Mock()
    prompt.can_evaluate.return_value = available
    prompt.evaluate.return_value = result
    return prompt


def test_success(logger):
    prompt = make_prompt()
    gate = BiometricGate(prompt=prompt, logger=logger, reason="Authenticate with Face ID")

    assert gate.state is BiometricState.IDLE
    assert gate.challenge() is BiometricState.AUTHENTICATED
    assert gate.state is BiometricState.AUTHENTICATED
    prompt.evaluate.assert_called_once_with("Authenticate with Face ID")


def test_unavailable_uses_platform_reason(logger):
    gate = BiometricGate(prompt=make_prompt(available=(False, "No biometrics enrolled.")), logger=logger)

    with pytest.raises(BiometricUnavailableError, match="No biometrics enrolled."):
        gate.challenge()
    assert gate.state is BiometricState.FAILED


def test_unavailable_default_message(logger):
    gate = BiometricGate(prompt=UnavailableBiometricPrompt(), logger=logger)

    with pytest.raises(BiometricUnavailableError) as exc_info:
        gate.challenge()
    assert exc_info.value.message == "Biometric authentication not available."


def test_mismatch_fails(logger):
    prompt = make_prompt(result=(False, "User canceled."))
    gate = BiometricGate(prompt=prompt, logger=logger)

    with pytest.raises(BiometricFailedError, match="User canceled."):
        gate.challenge()
    assert gate.state is BiometricState.FAILED


def test_mismatch_without_text_uses_default(logger):
    gate = BiometricGate(prompt=make_prompt(result=(False, None)), logger=logger)

    with pytest.raises(BiometricFailedError) as exc_info:
        gate.challenge()
    assert exc_info.value.message == "Biometric authentication failed."


def test_prompt_exception_is_failure(logger):
    prompt = make_prompt()
    prompt.evaluate.side_effect = OSError("prompt crashed")
    gate = BiometricGate(prompt=prompt, logger=logger)

    with pytest.raises(BiometricFailedError):
        gate.challenge()
    assert gate.state is BiometricState.FAILED


def test_reset_returns_to_idle(logger):
    gate = BiometricGate(prompt=make_prompt(result=(False, None)), logger=logger)
    with pytest.raises(BiometricFailedError):
        gate.challenge()

    gate.reset()
    assert gate.state is BiometricState.IDLE


def test_challenge_requires_idle(logger):
    prompt = make_prompt()
    gate = BiometricGate(prompt=prompt, logger=logger)
    gate.challenge()

    with pytest.raises(RuntimeError):
        gate.challenge()
    assert gate.state is BiometricState.AUTHENTICATED
    prompt.evaluate.assert_called_once()

    gate.reset()
    assert gate.challenge() is BiometricState.AUTHENTICATED
