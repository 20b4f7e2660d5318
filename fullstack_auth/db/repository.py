"""Generic document repository.

A Repository treats one table as a collection of documents: a create
operation that stamps id and timestamps, lookup by arbitrary field filter,
and lookup by id.

IMPORT CONVENTION:
- Core accesses these through its collection properties (core.users)
- NO direct import needed when using Core API
"""

import sqlite3
from typing import Any, Iterable

from ..utils import isodatetime, uid

STORE_ASSIGNED_FIELDS = ("id", "created_at", "updated_at")


class Repository:
    """Create and read operations for a single collection.

    Filter and document keys are checked against the collection's declared
    fields before any SQL is built, so column names are never taken from
    untrusted input.
    """

    def __init__(self, conn: sqlite3.Connection, collection: str, fields: Iterable[str]):
        """
        Args:
            conn: SQLite connection with row_factory set to sqlite3.Row
            collection: Table name
            fields: Every column of the table
        """
        self._conn = conn
        self._collection = collection
        self._fields = tuple(fields)

    def _check_fields(self, names: Iterable[str]) -> None:
        unknown = sorted(set(names) - set(self._fields))
        if unknown:
            raise KeyError(
                f"Unknown field(s) for collection '{self._collection}': {', '.join(unknown)}"
            )

    def create(self, document: dict[str, Any]) -> sqlite3.Row:
        """Insert a document and return the stored row.

        The store assigns ``id``, ``created_at`` and ``updated_at``.

        Args:
            document: Field values, excluding store-assigned fields

        Returns:
            sqlite3.Row with the stored document

        Raises:
            KeyError: If the document names unknown or store-assigned fields
            sqlite3.IntegrityError: If a uniqueness constraint is violated
        """
        assigned = set(document) & set(STORE_ASSIGNED_FIELDS)
        if assigned:
            raise KeyError(f"Fields assigned by the store: {', '.join(sorted(assigned))}")
        self._check_fields(document)

        now = isodatetime.now()
        record = {"id": uid.generate_uuid(), **document, "created_at": now, "updated_at": now}

        columns = ", ".join(record)
        placeholders = ", ".join("?" for _ in record)
        self._conn.execute(
            f"INSERT INTO {self._collection} ({columns}) VALUES ({placeholders})",
            tuple(record.values())
        )
        return self.find_by_id(record["id"])

    def find_one(self, **filters: Any) -> sqlite3.Row | None:
        """Return the first document whose fields equal all filters, or None."""
        if not filters:
            raise ValueError("find_one requires at least one filter")
        self._check_fields(filters)

        where = " AND ".join(f"{name} = ?" for name in filters)
        return self._conn.execute(
            f"SELECT * FROM {self._collection} WHERE {where} LIMIT 1",
            tuple(filters.values())
        ).fetchone()

    def find_by_id(self, document_id: str) -> sqlite3.Row | None:
        """Return the document with this id, or None."""
        return self.find_one(id=document_id)
