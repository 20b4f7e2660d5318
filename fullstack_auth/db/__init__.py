"""Database module for the authentication API.

This module provides the Core API for the account store.
Core encapsulates connection lifetime and exposes one repository per
collection.

ARCHITECTURE:
- Database is built once from Settings and handed to the services that need it
- Every Core owns a fresh connection; no connection is shared between requests
- Core is a context manager: commit on clean exit, rollback on exception,
  connection closed either way
- sqlite3 errors leave Core as DatabaseError, except IntegrityError which
  callers translate themselves (duplicate email -> ConflictError)

    db = Database(settings.database_path)
    with db.get_core() as core:
        row = core.users.find_one(email="a@x.com")

ID GENERATION POLICY:
Document ids and timestamps are assigned by the repository on create().
Callers never supply them.
"""

import logging
import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING

from ..exceptions import DatabaseError
from ..schema import SCHEMA_PATH

if TYPE_CHECKING:
    from .repository import Repository

logger = logging.getLogger(__name__)

# Columns of the users collection, in schema order
USER_FIELDS = ("id", "email", "name", "password_hash", "created_at", "updated_at")

STORE_FAILURE_MESSAGE = "Database operation failed"


def _store_failure(error: sqlite3.Error) -> DatabaseError:
    """Log a driver error and return the DatabaseError that replaces it."""
    logger.error(f"Store failure: {error.__class__.__name__}: {error}")
    return DatabaseError(STORE_FAILURE_MESSAGE)


class Core:
    """
    Database Core with collection repositories.

    Maintains its own connection and transaction state.
    Must be used as a context manager.
    """

    def __init__(self, connection: sqlite3.Connection):
        """Initialize Core with a database connection.

        Args:
            connection: SQLite connection with row_factory set to sqlite3.Row
        """
        self._conn = connection
        self._users = None

    @property
    def users(self) -> "Repository":
        """Repository over the users collection.

        Lazy-loaded and cached for the lifetime of this Core.
        """
        if self._users is None:
            from .repository import Repository
            self._users = Repository(self._conn, "users", USER_FIELDS)
        return self._users

    def __enter__(self) -> "Core":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Commit or roll back, then close the connection.

        sqlite3 errors other than IntegrityError leave the block as
        DatabaseError. IntegrityError is a constraint outcome and reaches
        the caller unchanged.
        """
        try:
            if exc_type is None:
                self._conn.commit()
            else:
                self._conn.rollback()
        except sqlite3.IntegrityError:
            raise
        except sqlite3.Error as e:
            raise _store_failure(e) from e
        finally:
            self._conn.close()

        if isinstance(exc_val, sqlite3.Error) and not isinstance(exc_val, sqlite3.IntegrityError):
            raise _store_failure(exc_val) from exc_val


class Database:
    """Connection factory and schema bootstrap for the sqlite document store."""

    def __init__(self, path: str, timeout: float = 5.0):
        """
        Args:
            path: Filesystem path of the database file
            timeout: Seconds a connection waits on a locked database before
                     the operation fails with DatabaseError
        """
        self.path = path
        self.timeout = timeout

    def connect(self) -> sqlite3.Connection:
        """Create a fresh database connection.

        Returns:
            SQLite connection with row_factory set to sqlite3.Row
            and foreign keys enabled.

        Raises:
            DatabaseError: If the database file cannot be opened
        """
        db_path = Path(self.path)
        db_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            conn = sqlite3.connect(str(db_path), timeout=self.timeout)
        except sqlite3.Error as e:
            raise _store_failure(e) from e

        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error as e:
            conn.close()
            raise _store_failure(e) from e
        return conn

    def get_core(self) -> Core:
        """
        Get a Core bound to a new connection.

        Examples:
            >>> with database.get_core() as core:
            ...     core.users.create({"email": "a@x.com", ...})
            ...     # Commits on exit
        """
        return Core(self.connect())

    def init_schema(self) -> None:
        """Apply schema.sql if the database has not been initialized yet."""
        with self.get_core() as core:
            cursor = core._conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name='_schema_metadata'"
            )
            if cursor.fetchone():
                return

            core._conn.executescript(SCHEMA_PATH.read_text())
            logger.info(f"Applied schema to {self.path}")

    def get_schema_version(self) -> str:
        """Return the schema version recorded in _schema_metadata."""
        with self.get_core() as core:
            row = core._conn.execute(
                "SELECT value FROM _schema_metadata WHERE key = 'version'"
            ).fetchone()
        return row[0] if row else "unknown"


__all__ = ["Core", "Database", "USER_FIELDS"]
