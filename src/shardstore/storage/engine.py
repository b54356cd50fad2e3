"""
CatalogStorage: the engine shared by every backend.

State machine: closed -> open -> closed. One reader-writer lock guards
the instance. Lookups and listings take it shared; create, delete,
delete_by, rename and metadata updates take it exclusively, and hold it
across both the catalog call and the blob cleanup. open() and close()
hold it exclusively for the whole transition.

Catalog and blob are not updated in one transaction. Deletes remove the
catalog row first and the blob second, best effort, so a crash in
between leaves an orphaned blob.

Only threads within one process are supported. Two processes opening
the same storage root will corrupt each other.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, BinaryIO, Protocol

from shardstore.exceptions import (
    AlreadyOpenError,
    NotOpenError,
    ReferenceCollisionError,
    SerializationError,
)
from shardstore.locking import ReadWriteLock
from shardstore.logging import get_logger, log_context
from shardstore.references import DEFAULT_REFERENCE_BYTES, ReferenceGenerator, default_generator
from shardstore.serialization import decode_metadata, encode_metadata
from shardstore.storage.base import Storage
from shardstore.types import CatalogEntry, Lookup

if TYPE_CHECKING:
    from shardstore.nodes.base import Node

logger = get_logger(__name__)


class CatalogBackend(Protocol):
    """What the engine needs from a catalog."""

    @property
    def is_connected(self) -> bool: ...

    def connect(self) -> None: ...

    def close(self) -> None: ...

    def lookup_by_reference(self, reference: str) -> Lookup[CatalogEntry]: ...

    def lookup_by_name(self, name: str) -> Lookup[CatalogEntry]: ...

    def has_reference(self, reference: str) -> bool: ...

    def scan_by_pattern(self, prefix: str, postfix: str) -> list[CatalogEntry]: ...

    def scan_references(self, prefix: str, postfix: str) -> list[str]: ...

    def insert(self, name: str, reference: str, metadata: str | None) -> None: ...

    def delete_by_reference(self, reference: str) -> int: ...

    def delete_by_pattern(self, prefix: str, postfix: str) -> int: ...

    def update_name(self, reference: str, name: str) -> int: ...

    def update_metadata(self, reference: str, metadata: str | None) -> int: ...


class ContentBackend(Protocol):
    """What the engine needs from a blob store."""

    def open_for_read(self, reference: str) -> BinaryIO: ...

    def open_for_write(self, reference: str) -> BinaryIO: ...

    def remove(self, reference: str) -> bool: ...


class CatalogStorage(Storage):
    """Storage engine over a catalog backend and a content backend."""

    def __init__(
        self,
        catalog: CatalogBackend,
        content: ContentBackend,
        generator: ReferenceGenerator | None = None,
        reference_bytes: int = DEFAULT_REFERENCE_BYTES,
        reference_attempts: int = 4,
        label: str = "memory",
    ) -> None:
        """Initialize the engine. It starts closed.

        Args:
            catalog: Catalog backend.
            content: Blob backend.
            generator: Reference source; defaults to the process-wide generator.
            reference_bytes: Random bytes per reference.
            reference_attempts: Draws before a reference collision is fatal.
            label: Name used in log context (the storage root for files).
        """
        if reference_attempts < 1:
            raise ValueError("reference_attempts must be >= 1")

        self._catalog = catalog
        self._content = content
        self._generator = generator or default_generator()
        self._reference_bytes = reference_bytes
        self._reference_attempts = reference_attempts
        self._label = label
        self._lock = ReadWriteLock()
        self._is_open = False

    @property
    def is_open(self) -> bool:
        return self._is_open

    @abstractmethod
    def _make_node(self, entry: CatalogEntry) -> Node:
        """Wrap a catalog entry in this backend's node type."""
        ...

    def _prepare(self) -> None:
        """Hook run inside open() before the catalog connects."""

    def _require_open(self, operation: str) -> None:
        if not self._is_open:
            raise NotOpenError("Storage is closed", context={"operation": operation})

    # Lifecycle

    def open(self) -> None:
        """Open the storage.

        Raises:
            AlreadyOpenError: If already open.
            StoreFailureError: If the catalog cannot be opened.
        """
        with self._lock.exclusive(), log_context(storage_root=self._label, operation="open"):
            if self._is_open:
                raise AlreadyOpenError("Storage is already open", context={"root": self._label})
            self._prepare()
            self._catalog.connect()
            self._is_open = True
            logger.info("Storage opened")

    def close(self) -> None:
        """Close the storage.

        Raises:
            NotOpenError: If not open.
        """
        with self._lock.exclusive(), log_context(storage_root=self._label, operation="close"):
            self._require_open("close")
            try:
                self._catalog.close()
            finally:
                self._is_open = False
            logger.info("Storage closed")

    # Reads

    def _lookup_by_reference(self, reference: str) -> Lookup[Node]:
        return self._catalog.lookup_by_reference(reference).map(self._make_node)

    def _lookup_by_name(self, name: str) -> Lookup[Node]:
        return self._catalog.lookup_by_name(name).map(self._make_node)

    def get_by_reference(self, reference: str) -> Lookup[Node]:
        with self._lock.shared():
            self._require_open("get_by_reference")
            return self._lookup_by_reference(reference)

    def get_by_name(self, name: str) -> Lookup[Node]:
        with self._lock.shared():
            self._require_open("get_by_name")
            return self._lookup_by_name(name)

    def exists_by_reference(self, reference: str) -> bool:
        with self._lock.shared():
            self._require_open("exists_by_reference")
            return self._lookup_by_reference(reference).found

    def exists_by_name(self, name: str) -> bool:
        with self._lock.shared():
            self._require_open("exists_by_name")
            return self._lookup_by_name(name).found

    def list_by(self, prefix: str = "", postfix: str = "") -> list[Node]:
        with self._lock.shared():
            self._require_open("list_by")
            return [self._make_node(entry) for entry in self._catalog.scan_by_pattern(prefix, postfix)]

    def list_references(self, prefix: str = "", postfix: str = "") -> list[str]:
        with self._lock.shared():
            self._require_open("list_references")
            return self._catalog.scan_references(prefix, postfix)

    # Writes

    def _draw_reference(self) -> str:
        """Draw a reference not yet present in the catalog."""
        for attempt in range(1, self._reference_attempts + 1):
            reference = self._generator.generate(self._reference_bytes)
            if not self._catalog.has_reference(reference):
                return reference
            logger.warning("Reference collision, drawing again", attempt=attempt)

        raise ReferenceCollisionError(
            "Could not draw an unused reference",
            context={"attempts": self._reference_attempts},
        )

    def create(self, name: str, metadata: Any = None) -> Node:
        """Create an entry. The blob is created lazily on first write.

        Metadata that cannot be serialized is dropped and the entry is
        stored with no metadata.
        """
        with self._lock.exclusive(), log_context(storage_root=self._label, operation="create"):
            self._require_open("create")

            reference = self._draw_reference()
            try:
                encoded = encode_metadata(metadata)
            except SerializationError as exc:
                logger.warning("Dropping unserializable metadata", reference=reference, error=str(exc))
                encoded = None

            self._catalog.insert(name, reference, encoded)
            logger.debug("Created entry", reference=reference)

            entry = CatalogEntry(
                name=name,
                reference=reference,
                metadata=decode_metadata(encoded, reference=reference),
            )
            return self._make_node(entry)

    def delete(self, reference: str) -> None:
        """Delete an entry, then remove its blob best effort."""
        with self._lock.exclusive(), log_context(storage_root=self._label, operation="delete"):
            self._require_open("delete")
            self._catalog.delete_by_reference(reference)
            self._content.remove(reference)
            logger.debug("Deleted entry", reference=reference)

    def delete_by(self, prefix: str, postfix: str) -> int:
        """Delete every entry whose name matches, then remove their blobs.

        If the catalog delete fails no blob is touched.

        Returns:
            Number of catalog rows deleted.
        """
        with self._lock.exclusive(), log_context(storage_root=self._label, operation="delete_by"):
            self._require_open("delete_by")

            references = self._catalog.scan_references(prefix, postfix)
            deleted = self._catalog.delete_by_pattern(prefix, postfix)
            for reference in references:
                self._content.remove(reference)

            logger.debug("Deleted entries by pattern", prefix=prefix, postfix=postfix, count=deleted)
            return deleted

    # Node hooks

    def _update_name(self, reference: str, name: str) -> None:
        with self._lock.exclusive():
            self._require_open("set_name")
            self._catalog.update_name(reference, name)

    def _update_metadata(self, reference: str, encoded: str | None) -> None:
        with self._lock.exclusive():
            self._require_open("set_metadata")
            self._catalog.update_metadata(reference, encoded)

    def _open_reader(self, reference: str) -> BinaryIO:
        with self._lock.shared():
            self._require_open("get_reader")
            return self._content.open_for_read(reference)

    def _open_writer(self, reference: str) -> BinaryIO:
        with self._lock.shared():
            self._require_open("get_writer")
            return self._content.open_for_write(reference)
