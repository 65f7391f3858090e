"""
Business Logic Services Package.

``create_services()`` wires every repository and service together and
returns a typed container the UI layer consumes without knowing the
dependency graph.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, TypedDict

from envirolens.auth import SessionManager
from envirolens.config import AppConfig
from envirolens.database import DatabaseManager
from envirolens.logger import get_logger
from envirolens.repositories.user_repository import UserRepository
from envirolens.services.biometric_gate import (
    BiometricGate,
    BiometricPrompt,
    UnavailableBiometricPrompt,
)
from envirolens.services.credential_vault import CredentialVault
from envirolens.services.identity_resolver import IdentityResolver
from envirolens.services.login_orchestrator import Dispatch, LoginOrchestrator, Spawn
from envirolens.services.registration_service import RegistrationService
from envirolens.services.session_authenticator import SessionAuthenticator


class ServiceContainer(TypedDict):
    """Typed container for all application services."""

    credential_vault: CredentialVault
    identity_resolver: IdentityResolver
    session_authenticator: SessionAuthenticator
    biometric_gate: BiometricGate
    registration_service: RegistrationService


def create_services(
    db: DatabaseManager,
    config: AppConfig,
    session: SessionManager,
    biometric_prompt: Optional[BiometricPrompt] = None,
    vault_salt_path: Optional[Path] = None,
) -> ServiceContainer:
    """Wire all repositories and services together.

    This is the single composition root for the service layer.  Login
    orchestrators are per-view and built with :func:`create_login_orchestrator`.
    """
    logger = get_logger("services")

    user_repo = UserRepository(db=db, logger=logger, table=config.USERS_TABLE)

    credential_vault = CredentialVault(
        db=db,
        logger=logger,
        service_name=config.VAULT_SERVICE_NAME,
        kdf_iterations=config.VAULT_KDF_ITERATIONS,
        salt_path=vault_salt_path,
    )
    identity_resolver = IdentityResolver(repo=user_repo, logger=logger)
    session_authenticator = SessionAuthenticator(db=db, session=session, logger=logger)
    biometric_gate = BiometricGate(
        prompt=biometric_prompt or UnavailableBiometricPrompt(),
        logger=logger,
        reason=config.BIOMETRIC_REASON,
    )

    registration_service = RegistrationService(
        repo=user_repo,
        authenticator=session_authenticator,
        logger=logger,
        areas=config.REGISTRATION_AREAS,
    )

    return ServiceContainer(
        credential_vault=credential_vault,
        identity_resolver=identity_resolver,
        session_authenticator=session_authenticator,
        biometric_gate=biometric_gate,
        registration_service=registration_service,
    )


def create_login_orchestrator(
    services: ServiceContainer,
    spawn: Optional[Spawn] = None,
    dispatch: Optional[Dispatch] = None,
) -> LoginOrchestrator:
    """Build a fresh orchestrator for one login screen instance."""
    return LoginOrchestrator(
        resolver=services["identity_resolver"],
        authenticator=services["session_authenticator"],
        vault=services["credential_vault"],
        biometric_gate=services["biometric_gate"],
        logger=get_logger("login"),
        spawn=spawn,
        dispatch=dispatch,
    )
