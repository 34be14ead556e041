"""Database layer for catalogit application."""

from catalogit.database.base import Database
from catalogit.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
