"""
EnviroLens Desktop Client Entry Point.

Bootstraps the dependency graph via constructor injection, initialises
the local SQLite schema, and launches the CustomTkinter GUI.

Usage::

    python main.py
"""

from __future__ import annotations

import atexit
import sys
from pathlib import Path

from envirolens.auth import SessionManager
from envirolens.config import get_config
from envirolens.database import DatabaseManager
from envirolens.logger import StructuredLogger, get_logger
from envirolens.schema import initialize_schema
from envirolens.services import create_services
from envirolens.ui.app_shell import AppShell


def main() -> None:
    """Wire dependencies and launch the GUI."""
    logger: StructuredLogger = get_logger("main")
    logger.info("Starting EnviroLens...")

    # ------------------------------------------------------------------
    # 1. Configuration (from .env / environment variables)
    # ------------------------------------------------------------------
    config = get_config()

    # ------------------------------------------------------------------
    # 2. Connections (Supabase optional, SQLite always)
    # ------------------------------------------------------------------
    db = DatabaseManager(
        supabase_url=config.SUPABASE_URL,
        supabase_key=config.SUPABASE_ANON_KEY.get_secret_value(),
        sqlite_path=Path(config.SQLITE_PATH),
        logger=StructuredLogger(name="database"),
    )
    atexit.register(db.close)

    # ------------------------------------------------------------------
    # 3. Local schema (idempotent)
    # ------------------------------------------------------------------
    initialize_schema(db.sqlite, StructuredLogger(name="schema"))

    # ------------------------------------------------------------------
    # 4. Session context + services
    # ------------------------------------------------------------------
    session = SessionManager(logger=StructuredLogger(name="session"))
    services = create_services(db=db, config=config, session=session)

    # ------------------------------------------------------------------
    # 5. GUI (blocks until the window closes)
    # ------------------------------------------------------------------
    app = AppShell(session=session, services=services, logger=get_logger("ui"))
    try:
        app.mainloop()
    finally:
        db.close()
        logger.info("EnviroLens shut down.")


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass
    except Exception as exc:
        sys.stderr.write(f"FATAL: {type(exc).__name__}: {exc}\n")
        sys.exit(1)
