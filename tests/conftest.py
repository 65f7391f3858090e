"""Shared fixtures for the login core tests."""

from __future__ import annotations

import io
import os
import tempfile
from pathlib import Path
from unittest.mock import Mock

import pytest

# Keep the rotating log file out of the working tree; must be set before
# the first get_config() call.
os.environ.setdefault("LOG_FILE", os.path.join(tempfile.mkdtemp(), "envirolens-test.log"))

from envirolens.auth import SessionManager  # noqa: E402
from envirolens.database import DatabaseManager  # noqa: E402
from envirolens.logger import StructuredLogger  # noqa: E402
from envirolens.schema import initialize_schema  # noqa: E402
from envirolens.services.credential_vault import CredentialVault  # noqa: E402


@pytest.fixture
def logger() -> StructuredLogger:
    return StructuredLogger(name="envirolens.tests", stream=io.StringIO())


@pytest.fixture
def supabase_client() -> Mock:
    return Mock(name="supabase")


@pytest.fixture
def db(tmp_path: Path, logger: StructuredLogger, supabase_client: Mock):
    manager = DatabaseManager(
        supabase_url="",
        supabase_key="",
        sqlite_path=tmp_path / "test.db",
        logger=logger,
        supabase_client=supabase_client,
    )
    initialize_schema(manager.sqlite, logger)
    yield manager
    manager.close()


@pytest.fixture
def offline_db(tmp_path: Path, logger: StructuredLogger):
    manager = DatabaseManager(
        supabase_url="",
        supabase_key="",
        sqlite_path=tmp_path / "offline.db",
        logger=logger,
    )
    initialize_schema(manager.sqlite, logger)
    yield manager
    manager.close()


@pytest.fixture
def vault(db: DatabaseManager, logger: StructuredLogger, tmp_path: Path) -> CredentialVault:
    return CredentialVault(
        db=db,
        logger=logger,
        kdf_iterations=1_000,
        salt_path=tmp_path / "vault_salt",
    )


@pytest.fixture
def session(logger: StructuredLogger) -> SessionManager:
    return SessionManager(logger=logger)
