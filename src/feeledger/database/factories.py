"""Factories for the storage backend."""

import os
from pathlib import Path
from typing import Optional

from feeledger.database.sqlalchemy_db import SQLAlchemyDatabase

DB_PATH_ENV = "FEELEDGER_DB_PATH"


def default_database_path() -> Path:
    """Ledger file used when no path is configured: ~/.feeledger/feeledger.db."""
    return Path.home() / ".feeledger" / "feeledger.db"


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Open the school ledger stored in a SQLite file.

    Resolution order: the explicit path, then FEELEDGER_DB_PATH, then
    ``default_database_path()``. The parent directory is created if missing.

    Raises:
        ConnectivityError: If the file cannot be opened as a database
    """
    path = Path(database_path or os.environ.get(DB_PATH_ENV) or default_database_path())
    path.expanduser().parent.mkdir(parents=True, exist_ok=True)
    return SQLAlchemyDatabase(f"sqlite:///{path.expanduser()}")
