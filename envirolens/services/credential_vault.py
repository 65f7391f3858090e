"""
Encrypted Credential Vault.

Caches exactly one (identifier, secret) pair so that a later biometric
unlock can replay the password sign-in without retyping.  The pair lives
in the local SQLite ``credential_vault`` table, one row per service
name, encrypted at rest.

Security model
--------------
- The AES key is derived at runtime from machine identity
  (hostname + OS user + service name) with PBKDF2-HMAC-SHA256 and a
  per-machine random salt.  The key is never written to disk.
- Payloads use AES-256-GCM, so tampering or a changed machine identity
  shows up as an authentication failure on read.
- The vault degrades silently: ``save`` reports ``False``, ``retrieve``
  reports ``None``, ``delete`` never raises.  Callers cannot tell a
  storage fault from an empty vault, and do not need to.
"""

from __future__ import annotations

import getpass
import json
import os
import socket
import stat
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from Crypto.Cipher import AES
from Crypto.Hash import SHA256
from Crypto.Protocol.KDF import PBKDF2

from envirolens.database import DatabaseManager
from envirolens.logger import StructuredLogger
from envirolens.models.auth_models import Credential


class CredentialVault:
    """Single-slot encrypted store for the last successful credential.

    Parameters
    ----------
    db:
        ``DatabaseManager`` whose SQLite connection holds the vault table.
    logger:
        Structured logger.
    service_name:
        Fixed key the slot is stored under.
    kdf_iterations:
        PBKDF2 iteration count for key derivation.
    salt_path:
        Location of the per-machine salt file.  Defaults to
        ``~/.envirolens_vault_salt``.
    """

    _KEY_LENGTH: int = 32  # 256 bits
    _SALT_LENGTH: int = 32

    def __init__(
        self,
        db: DatabaseManager,
        logger: StructuredLogger,
        service_name: str = "com.enviroLens.login",
        kdf_iterations: int = 600_000,
        salt_path: Optional[Path] = None,
    ) -> None:
        self._db: DatabaseManager = db
        self._logger: StructuredLogger = logger
        self._service: str = service_name
        self._iterations: int = kdf_iterations
        self._salt_path: Path = salt_path or Path.home() / ".envirolens_vault_salt"

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def save(self, identifier: str, secret: str) -> bool:
        """Replace the stored credential with (*identifier*, *secret*).

        Returns
        -------
        bool
            ``True`` when the pair was encrypted and written.  ``False``
            on any encryption, salt-file or database failure (logged).
        """
        plaintext: bytes = json.dumps(
            {
                "identifier": identifier,
                "secret": secret,
                "saved_at": datetime.now(tz=timezone.utc).isoformat(),
            },
            ensure_ascii=False,
        ).encode("utf-8")

        try:
            cipher = AES.new(self._derive_key(), AES.MODE_GCM)
            ciphertext, tag = cipher.encrypt_and_digest(plaintext)
            nonce: bytes = cipher.nonce
        except Exception as exc:
            self._logger.warning("Failed to encrypt credential: %s", exc)
            return False

        try:
            with self._db.write_lock:
                self._db.sqlite.execute(
                    "DELETE FROM credential_vault WHERE service = ?",
                    (self._service,),
                )
                self._db.sqlite.execute(
                    """
                    INSERT INTO credential_vault (service, encrypted_payload, nonce, tag)
                    VALUES (?, ?, ?, ?)
                    """,
                    (self._service, ciphertext, nonce, tag),
                )
                self._db.sqlite.commit()
        except Exception as exc:
            self._rollback()
            self._logger.warning("Failed to write credential to vault: %s", exc)
            return False

        self._logger.info("Credential cached for %s.", identifier)
        return True

    def retrieve(self) -> Optional[Credential]:
        """Return the stored credential, or ``None``.

        ``None`` covers an empty slot, a read failure, a failed GCM tag
        check (corruption or changed machine identity) and a malformed
        payload alike.
        """
        try:
            row = self._db.sqlite.execute(
                "SELECT encrypted_payload, nonce, tag FROM credential_vault WHERE service = ?",
                (self._service,),
            ).fetchone()
        except Exception as exc:
            self._logger.warning("Failed to read credential vault: %s", exc)
            return None

        if row is None:
            self._logger.debug("Credential vault is empty.")
            return None

        try:
            cipher = AES.new(self._derive_key(), AES.MODE_GCM, nonce=row["nonce"])
            plaintext: bytes = cipher.decrypt_and_verify(row["encrypted_payload"], row["tag"])
        except (ValueError, KeyError) as exc:
            self._logger.warning(
                "Vault decryption failed (corrupted data or machine identity changed): %s",
                exc,
            )
            return None
        except Exception as exc:
            self._logger.warning("Unexpected error during vault decryption: %s", exc)
            return None

        try:
            data = json.loads(plaintext.decode("utf-8"))
            return Credential(identifier=data["identifier"], secret=data["secret"])
        except (ValueError, KeyError, TypeError) as exc:
            self._logger.warning("Vault payload is malformed: %s", exc)
            return None

    def delete(self) -> None:
        """Remove the stored credential.  Idempotent; never raises."""
        try:
            with self._db.write_lock:
                self._db.sqlite.execute(
                    "DELETE FROM credential_vault WHERE service = ?",
                    (self._service,),
                )
                self._db.sqlite.commit()
            self._logger.info("Credential vault cleared.")
        except Exception as exc:
            self._rollback()
            self._logger.error("Failed to clear credential vault: %s", exc)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _rollback(self) -> None:
        try:
            self._db.sqlite.rollback()
        except Exception as exc:
            self._logger.debug("Vault rollback failed: %s", exc)

    def _derive_key(self) -> bytes:
        """Derive the 256-bit AES key from machine identity and salt.

        The key binds the vault to this machine, OS account and service
        name: a copied database file does not decrypt elsewhere.

        Raises
        ------
        OSError
            If the salt file cannot be read or created.
        """
        password: str = f"{socket.gethostname()}:{getpass.getuser()}:{self._service}"
        return PBKDF2(
            password=password,
            salt=self._get_or_create_salt(),
            dkLen=self._KEY_LENGTH,
            count=self._iterations,
            hmac_hash_module=SHA256,
        )

    def _get_or_create_salt(self) -> bytes:
        """Return the per-machine salt, creating it (mode 0o600) on first use."""
        if self._salt_path.exists():
            data: bytes = self._salt_path.read_bytes()
            if len(data) == self._SALT_LENGTH:
                return data
            self._logger.warning(
                "Vault salt file has unexpected length (%d); regenerating.",
                len(data),
            )
        salt: bytes = os.urandom(self._SALT_LENGTH)
        self._salt_path.parent.mkdir(parents=True, exist_ok=True)
        self._salt_path.write_bytes(salt)
        if os.name != "nt":
            self._salt_path.chmod(stat.S_IRUSR | stat.S_IWUSR)
        self._logger.info("Vault salt created at %s.", self._salt_path)
        return salt
