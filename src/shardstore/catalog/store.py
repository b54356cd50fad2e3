"""
Catalog: SQLite index of catalog entries.

One relation, ``metadata(name, reference, metadata)``, indexed on name,
on reference and on (name, reference). Reference is the de-facto key;
names may repeat.

The connection is shared between threads. Statements are serialized on
an internal mutex; callers provide any coarser locking they need.
"""

from __future__ import annotations

import sqlite3
import threading
from pathlib import Path
from typing import Any

from shardstore.exceptions import NotOpenError, StoreFailureError
from shardstore.logging import get_logger
from shardstore.patterns import ESCAPE_CHAR, build_like_pattern
from shardstore.serialization import decode_metadata
from shardstore.types import CatalogEntry, Lookup

logger = get_logger(__name__)

DB_FILENAME = "metadata.db"

_SCHEMA = (
    "CREATE TABLE IF NOT EXISTS metadata (name TEXT, reference TEXT, metadata TEXT)",
    "CREATE INDEX IF NOT EXISTS idx_metadata_name ON metadata(name)",
    "CREATE INDEX IF NOT EXISTS idx_metadata_reference ON metadata(reference)",
    "CREATE INDEX IF NOT EXISTS idx_metadata_name_reference ON metadata(name, reference)",
)

# Metadata is fetched as bytes so text that is not valid UTF-8 reaches the decoder
_SELECT_ENTRY = "SELECT name, reference, CAST(metadata AS BLOB) AS metadata FROM metadata"


class Catalog:
    """SQLite-backed catalog of name, reference and encoded metadata."""

    def __init__(
        self,
        db_path: Path | str,
        escape_wildcards: bool = False,
        timeout: float = 30.0,
    ) -> None:
        """Initialize Catalog.

        Args:
            db_path: Path to the metadata.db file.
            escape_wildcards: Match % and _ in prefix/postfix literally.
            timeout: Seconds SQLite waits on a locked database.
        """
        self.db_path = Path(db_path)
        self.escape_wildcards = escape_wildcards
        self.timeout = timeout
        self._conn: sqlite3.Connection | None = None
        self._mutex = threading.Lock()

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    def connect(self) -> None:
        """Open the database and create the schema if missing."""
        if self._conn is not None:
            return

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn: sqlite3.Connection | None = None
        try:
            conn = sqlite3.connect(
                str(self.db_path),
                timeout=self.timeout,
                isolation_level="DEFERRED",
                check_same_thread=False,
            )
            conn.row_factory = sqlite3.Row
            for statement in _SCHEMA:
                conn.execute(statement)
            conn.commit()
        except sqlite3.Error as exc:
            if conn is not None:
                conn.close()
            raise StoreFailureError(
                "Failed to open catalog", context={"db_path": str(self.db_path)}
            ) from exc

        self._conn = conn

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            with self._mutex:
                conn, self._conn = self._conn, None
                try:
                    conn.close()
                except sqlite3.Error as exc:
                    raise StoreFailureError(
                        "Failed to close catalog", context={"db_path": str(self.db_path)}
                    ) from exc

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise NotOpenError("Catalog is not connected", context={"db_path": str(self.db_path)})
        return self._conn

    def _query(self, sql: str, params: tuple[Any, ...] = ()) -> list[sqlite3.Row]:
        """Run a read statement and fetch every row."""
        with self._mutex:
            conn = self._get_conn()
            try:
                return conn.execute(sql, params).fetchall()
            except sqlite3.Error as exc:
                raise StoreFailureError("Catalog query failed", context={"sql": sql}) from exc

    def _execute(self, sql: str, params: tuple[Any, ...] = ()) -> int:
        """Run a write statement, commit, and return the affected row count."""
        with self._mutex:
            conn = self._get_conn()
            try:
                cursor = conn.execute(sql, params)
                conn.commit()
            except sqlite3.Error as exc:
                try:
                    conn.rollback()
                except sqlite3.Error as rollback_exc:
                    logger.warning("Catalog rollback failed", error=str(rollback_exc))
                raise StoreFailureError("Catalog write failed", context={"sql": sql}) from exc
            return cursor.rowcount

    def _name_clause(self) -> str:
        if self.escape_wildcards:
            return f"name LIKE ? ESCAPE '{ESCAPE_CHAR}'"
        return "name LIKE ?"

    def _pattern(self, prefix: str, postfix: str) -> str:
        return build_like_pattern(prefix, postfix, escape=self.escape_wildcards)

    def _row_to_entry(self, row: sqlite3.Row) -> CatalogEntry:
        """Convert a database row to a CatalogEntry."""
        return CatalogEntry(
            name=row["name"],
            reference=row["reference"],
            metadata=decode_metadata(row["metadata"], reference=row["reference"]),
        )

    # Lookups

    def lookup_by_reference(self, reference: str) -> Lookup[CatalogEntry]:
        """Find the entry for a reference."""
        rows = self._query(
            _SELECT_ENTRY + " WHERE reference = ? LIMIT 1",
            (reference,),
        )
        if not rows:
            return Lookup.miss(reference)
        return Lookup.hit(self._row_to_entry(rows[0]), reference)

    def lookup_by_name(self, name: str) -> Lookup[CatalogEntry]:
        """Find an entry by name. With duplicate names any one of them is returned."""
        rows = self._query(
            _SELECT_ENTRY + " WHERE name = ? LIMIT 1",
            (name,),
        )
        if not rows:
            return Lookup.miss(name)
        return Lookup.hit(self._row_to_entry(rows[0]), name)

    def has_reference(self, reference: str) -> bool:
        """Check whether any row carries the reference."""
        rows = self._query(
            "SELECT 1 FROM metadata WHERE reference = ? LIMIT 1",
            (reference,),
        )
        return bool(rows)

    def scan_by_pattern(self, prefix: str, postfix: str) -> list[CatalogEntry]:
        """List every entry whose name matches prefix%postfix. Order is unspecified."""
        rows = self._query(
            f"{_SELECT_ENTRY} WHERE {self._name_clause()}",
            (self._pattern(prefix, postfix),),
        )
        return [self._row_to_entry(row) for row in rows]

    def scan_references(self, prefix: str, postfix: str) -> list[str]:
        """List the references whose names match prefix%postfix."""
        rows = self._query(
            f"SELECT reference FROM metadata WHERE {self._name_clause()}",
            (self._pattern(prefix, postfix),),
        )
        return [row["reference"] for row in rows]

    # Mutations

    def insert(self, name: str, reference: str, metadata: str | None) -> None:
        """Insert a row. Metadata must already be encoded (or None)."""
        self._execute(
            "INSERT INTO metadata (name, reference, metadata) VALUES (?, ?, ?)",
            (name, reference, metadata),
        )

    def delete_by_reference(self, reference: str) -> int:
        """Delete the rows for a reference. Missing references are not an error."""
        return self._execute("DELETE FROM metadata WHERE reference = ?", (reference,))

    def delete_by_pattern(self, prefix: str, postfix: str) -> int:
        """Delete every row whose name matches prefix%postfix.

        Snapshot the references with scan_references() first if the
        matching blobs need cleaning up.
        """
        return self._execute(
            f"DELETE FROM metadata WHERE {self._name_clause()}",
            (self._pattern(prefix, postfix),),
        )

    def update_name(self, reference: str, name: str) -> int:
        """Rename the row for a reference; zero rows affected is not an error."""
        return self._execute(
            "UPDATE OR IGNORE metadata SET name = ? WHERE reference = ?",
            (name, reference),
        )

    def update_metadata(self, reference: str, metadata: str | None) -> int:
        """Replace encoded metadata for a reference; zero rows affected is not an error."""
        return self._execute(
            "UPDATE OR IGNORE metadata SET metadata = ? WHERE reference = ?",
            (metadata, reference),
        )
