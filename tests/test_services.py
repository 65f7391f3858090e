from __future__ import annotations

from types import SimpleNamespace

import pytest

from envirolens.config import AppConfig
from envirolens.errors import BiometricUnavailableError
from envirolens.models.enums import LoginState
from envirolens.services import create_login_orchestrator, create_services
from tests.helpers import make_auth_response, query_chain


def test_composition_root_wires_a_working_login(db, session, supabase_client, tmp_path):
    config = AppConfig(VAULT_KDF_ITERATIONS=1_000, USERS_TABLE="users")
    services = create_services(
        db=db, config=config, session=session, vault_salt_path=tmp_path / "salt",
    )
    query_chain(supabase_client).return_value = SimpleNamespace(
        data=[{"email": "alice@example.com"}]
    )
    supabase_client.auth.sign_in_with_password.return_value = make_auth_response()

    orchestrator = create_login_orchestrator(services, spawn=lambda task: task())
    orchestrator.submit("alice", "correct")

    assert orchestrator.state is LoginState.SUCCESS
    assert session.get_current_user().email == "alice@example.com"
    credential = services["credential_vault"].retrieve()
    assert credential is not None
    assert credential.identifier == "alice@example.com"


def test_default_biometric_prompt_is_unavailable(db, session, tmp_path):
    services = create_services(
        db=db,
        config=AppConfig(VAULT_KDF_ITERATIONS=1_000),
        session=session,
        vault_salt_path=tmp_path / "salt",
    )

    with pytest.raises(BiometricUnavailableError):
        services["biometric_gate"].challenge()
