"""Database layer for finclassify."""

from finclassify.database.base import Database
from finclassify.database.factories import create_sqlite_database
from finclassify.database.sqlalchemy_db import SQLAlchemyDatabase

__all__ = ["Database", "SQLAlchemyDatabase", "create_sqlite_database"]
