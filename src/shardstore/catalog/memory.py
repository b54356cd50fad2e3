"""
MemoryCatalog: dict-based catalog for development and testing.

Mirrors Catalog's interface and its LIKE matching semantics.
"""

from __future__ import annotations

import threading

from shardstore.exceptions import NotOpenError
from shardstore.patterns import build_like_pattern, like_to_regex
from shardstore.serialization import decode_metadata
from shardstore.types import CatalogEntry, Lookup


class MemoryCatalog:
    """In-memory catalog. Rows survive close()/connect() on the same instance."""

    def __init__(self, escape_wildcards: bool = False) -> None:
        self.escape_wildcards = escape_wildcards
        # (name, reference, encoded metadata) in insertion order
        self._rows: list[tuple[str, str, str | None]] = []
        self._connected = False
        self._mutex = threading.Lock()

    @property
    def is_connected(self) -> bool:
        return self._connected

    def connect(self) -> None:
        self._connected = True

    def close(self) -> None:
        self._connected = False

    def _check(self) -> None:
        if not self._connected:
            raise NotOpenError("Catalog is not connected")

    def _matcher(self, prefix: str, postfix: str):
        pattern = build_like_pattern(prefix, postfix, escape=self.escape_wildcards)
        return like_to_regex(pattern, escape=self.escape_wildcards).fullmatch

    def _entry(self, row: tuple[str, str, str | None]) -> CatalogEntry:
        name, reference, metadata = row
        return CatalogEntry(
            name=name,
            reference=reference,
            metadata=decode_metadata(metadata, reference=reference),
        )

    def _first(self, index: int, key: str) -> Lookup[CatalogEntry]:
        with self._mutex:
            self._check()
            row = next((r for r in self._rows if r[index] == key), None)
        if row is None:
            return Lookup.miss(key)
        return Lookup.hit(self._entry(row), key)

    def lookup_by_reference(self, reference: str) -> Lookup[CatalogEntry]:
        return self._first(1, reference)

    def lookup_by_name(self, name: str) -> Lookup[CatalogEntry]:
        return self._first(0, name)

    def has_reference(self, reference: str) -> bool:
        return bool(self._first(1, reference))

    def scan_by_pattern(self, prefix: str, postfix: str) -> list[CatalogEntry]:
        match = self._matcher(prefix, postfix)
        with self._mutex:
            self._check()
            rows = [r for r in self._rows if match(r[0])]
        return [self._entry(r) for r in rows]

    def scan_references(self, prefix: str, postfix: str) -> list[str]:
        return [entry.reference for entry in self.scan_by_pattern(prefix, postfix)]

    def insert(self, name: str, reference: str, metadata: str | None) -> None:
        with self._mutex:
            self._check()
            self._rows.append((name, reference, metadata))

    def _delete_where(self, predicate) -> int:
        with self._mutex:
            self._check()
            kept = [r for r in self._rows if not predicate(r)]
            removed = len(self._rows) - len(kept)
            self._rows = kept
        return removed

    def delete_by_reference(self, reference: str) -> int:
        return self._delete_where(lambda r: r[1] == reference)

    def delete_by_pattern(self, prefix: str, postfix: str) -> int:
        match = self._matcher(prefix, postfix)
        return self._delete_where(lambda r: match(r[0]) is not None)

    def _update(self, reference: str, index: int, value: str | None) -> int:
        changed = 0
        with self._mutex:
            self._check()
            for i, row in enumerate(self._rows):
                if row[1] == reference:
                    updated = list(row)
                    updated[index] = value
                    self._rows[i] = (updated[0], updated[1], updated[2])
                    changed += 1
        return changed

    def update_name(self, reference: str, name: str) -> int:
        return self._update(reference, 0, name)

    def update_metadata(self, reference: str, metadata: str | None) -> int:
        return self._update(reference, 2, metadata)
