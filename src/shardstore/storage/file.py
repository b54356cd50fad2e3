"""
FileStorage: SQLite catalog plus sharded blob files under one root.

Layout::

    <root>/metadata.db
    <root>/<ref[0:2]>/<ref[2:4]>/<ref[4:6]>/<ref>
"""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO

from shardstore.catalog.store import DB_FILENAME, Catalog
from shardstore.config import Settings, get_settings
from shardstore.content.store import ContentStore, WriteFlags
from shardstore.logging import setup_logging_from_settings
from shardstore.nodes.file import FileNode
from shardstore.references import DEFAULT_REFERENCE_BYTES, ReferenceGenerator
from shardstore.storage.engine import CatalogStorage
from shardstore.types import CatalogEntry


class FileStorage(CatalogStorage):
    """Filesystem-backed storage.

    Safe for many threads in one process. Never open the same root from
    two processes at once.
    """

    def __init__(
        self,
        root: Path | str,
        generator: ReferenceGenerator | None = None,
        reference_bytes: int = DEFAULT_REFERENCE_BYTES,
        reference_attempts: int = 4,
        escape_wildcards: bool = False,
        prune_empty_shards: bool = True,
        sqlite_timeout: float = 30.0,
    ) -> None:
        """Initialize FileStorage. Nothing touches the disk until open().

        Args:
            root: Storage root directory.
            generator: Reference source; defaults to the process-wide generator.
            reference_bytes: Random bytes per reference.
            reference_attempts: Draws before a reference collision is fatal.
            escape_wildcards: Match % and _ in name patterns literally.
            prune_empty_shards: Remove empty shard directories after deletes.
            sqlite_timeout: Seconds SQLite waits on a locked database.
        """
        self.root = Path(root).absolute()
        self._files = ContentStore(self.root, prune_empty_shards=prune_empty_shards)
        super().__init__(
            catalog=Catalog(
                self.root / DB_FILENAME,
                escape_wildcards=escape_wildcards,
                timeout=sqlite_timeout,
            ),
            content=self._files,
            generator=generator,
            reference_bytes=reference_bytes,
            reference_attempts=reference_attempts,
            label=str(self.root),
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        generator: ReferenceGenerator | None = None,
    ) -> FileStorage:
        """Build a FileStorage from settings (the cached environment settings by default).

        The logging settings are applied as a side effect.
        """
        settings = settings or get_settings()
        setup_logging_from_settings(settings)
        return cls(
            settings.STORAGE_ROOT,
            generator=generator,
            reference_bytes=settings.REFERENCE_BYTES,
            reference_attempts=settings.REFERENCE_ATTEMPTS,
            escape_wildcards=settings.ESCAPE_WILDCARDS,
            prune_empty_shards=settings.PRUNE_EMPTY_SHARDS,
            sqlite_timeout=settings.SQLITE_TIMEOUT,
        )

    @property
    def db_path(self) -> Path:
        return self.root / DB_FILENAME

    def _prepare(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def _make_node(self, entry: CatalogEntry) -> FileNode:
        return FileNode(self, entry)

    def _blob_path(self, reference: str) -> Path:
        return self._files.path_for(reference)

    def _open_flag_writer(self, reference: str, flags: WriteFlags) -> BinaryIO:
        with self._lock.shared():
            self._require_open("get_flag_writer")
            return self._files.open_with_flags(reference, flags)
