"""
MemoryStorage: the full storage contract held in process memory.

Entries survive close() and open() on the same instance but nothing is
persisted. Nodes have no filesystem path and no flag writer.
"""

from __future__ import annotations

from shardstore.catalog.memory import MemoryCatalog
from shardstore.content.memory import MemoryContentStore
from shardstore.nodes.memory import MemoryNode
from shardstore.references import DEFAULT_REFERENCE_BYTES, ReferenceGenerator
from shardstore.storage.engine import CatalogStorage
from shardstore.types import CatalogEntry


class MemoryStorage(CatalogStorage):
    """In-memory storage for development and testing."""

    def __init__(
        self,
        generator: ReferenceGenerator | None = None,
        reference_bytes: int = DEFAULT_REFERENCE_BYTES,
        reference_attempts: int = 4,
        escape_wildcards: bool = False,
    ) -> None:
        super().__init__(
            catalog=MemoryCatalog(escape_wildcards=escape_wildcards),
            content=MemoryContentStore(),
            generator=generator,
            reference_bytes=reference_bytes,
            reference_attempts=reference_attempts,
            label="memory",
        )

    def _make_node(self, entry: CatalogEntry) -> MemoryNode:
        return MemoryNode(self, entry)
