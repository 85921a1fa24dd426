"""Database layer for equiptrack application."""

from equiptrack.database.base import Database
from equiptrack.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
