"""Database layer for feeledger application."""

from feeledger.database.base import Database
from feeledger.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
