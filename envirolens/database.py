"""
Connection Management.

Owns the two backing stores used by the login core:

- **Supabase**: identity provider (password sign-in, sign-up, sign-out)
  and the ``users`` document collection used for username lookup.
  Optional; without credentials the client runs offline and every remote
  call fails.

- **SQLite (local)**: holds the encrypted credential vault.

This module only manages the raw connections; query logic lives in the
repositories and services.

Usage::

    db = DatabaseManager(
        supabase_url=config.SUPABASE_URL,
        supabase_key=config.SUPABASE_ANON_KEY.get_secret_value(),
        sqlite_path=Path(config.SQLITE_PATH),
        logger=StructuredLogger(name="database"),
    )
"""

from __future__ import annotations

import sqlite3
import threading
from pathlib import Path
from typing import Optional

from supabase import create_client, Client as SupabaseClient

from envirolens.logger import StructuredLogger


class DatabaseManager:
    """Manages the Supabase client and the local SQLite connection.

    When ``supabase_url`` or ``supabase_key`` is empty the Supabase client
    is not created.  The ``supabase`` property then raises
    ``RuntimeError``, which the services translate into
    ``TransportError``.

    Parameters
    ----------
    supabase_url:
        The Supabase project URL.  May be empty (offline).
    supabase_key:
        The Supabase anonymous key.  May be empty (offline).
    sqlite_path:
        Filesystem path for the local SQLite database.  ``:memory:`` is
        accepted.
    logger:
        A ``StructuredLogger`` instance.
    supabase_client:
        Pre-built client, used instead of ``create_client`` when given.
    """

    def __init__(
        self,
        supabase_url: str,
        supabase_key: str,
        sqlite_path: Path,
        logger: StructuredLogger,
        supabase_client: Optional[SupabaseClient] = None,
    ) -> None:
        self._logger: StructuredLogger = logger
        self._write_lock: threading.RLock = threading.RLock()
        self._closed: bool = False

        self._supabase: Optional[SupabaseClient] = supabase_client
        if self._supabase is None and supabase_url and supabase_key:
            try:
                self._supabase = create_client(supabase_url, supabase_key)
                self._logger.info("Supabase client initialized.")
            except (ValueError, TypeError) as exc:
                self._logger.warning(
                    "Supabase credential format error: %s. Running offline.",
                    exc,
                )
            except Exception as exc:
                self._logger.error(
                    "Unexpected Supabase initialization failure: %s. Running offline.",
                    exc,
                    exc_info=True,
                )
        elif self._supabase is None:
            self._logger.warning(
                "Supabase credentials not configured: running offline."
            )

        self._sqlite_conn: sqlite3.Connection = self._connect_sqlite(sqlite_path)

    @property
    def supabase(self) -> SupabaseClient:
        """Return the initialised Supabase client.

        Raises
        ------
        RuntimeError
            If the client was not initialised (offline mode).
        """
        if self._supabase is None:
            raise RuntimeError(
                "Supabase client is not initialised. "
                "The application is running in offline mode."
            )
        return self._supabase

    @property
    def is_online(self) -> bool:
        """``True`` when the Supabase client is available."""
        return self._supabase is not None

    @property
    def sqlite(self) -> sqlite3.Connection:
        return self._sqlite_conn

    @property
    def write_lock(self) -> threading.RLock:
        """Lock every SQLite write (statement + ``commit()``) must hold."""
        return self._write_lock

    def close(self) -> None:
        """Close the local SQLite connection.  Safe to call repeatedly."""
        with self._write_lock:
            if self._closed:
                return
            try:
                self._sqlite_conn.close()
                self._logger.info("SQLite connection closed.")
            except sqlite3.ProgrammingError:
                pass
            self._closed = True

    def _connect_sqlite(self, path: Path) -> sqlite3.Connection:
        """Open (or create) the local database.

        Raises
        ------
        PermissionError
            If the OS denies access to the database file or its directory.
        """
        try:
            conn = sqlite3.connect(str(path), check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA journal_mode=WAL;")
            self._logger.info("SQLite database opened at %s", path)
            return conn
        except PermissionError as exc:
            msg = (
                f"Cannot open the local database at '{path}'. "
                "The file or its directory may be read-only or locked by "
                "another process."
            )
            self._logger.error(msg)
            raise PermissionError(msg) from exc
