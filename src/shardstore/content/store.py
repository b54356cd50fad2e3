"""
ContentStore: blob files sharded by reference.

A reference ``ab12cd...`` lives at ``<root>/ab/12/cd/ab12cd...``. The three
two-character levels bound directory fan-out, and resolving a reference
never requires listing a directory.
"""

from __future__ import annotations

import enum
import os
from pathlib import Path
from typing import BinaryIO

from shardstore.exceptions import BlobNotFoundError, StoreFailureError
from shardstore.logging import get_logger

logger = get_logger(__name__)

SHARD_LEVELS = 3
SHARD_WIDTH = 2


class WriteFlags(enum.Flag):
    """How a blob is opened for writing."""

    CREATE = enum.auto()
    TRUNCATE = enum.auto()
    APPEND = enum.auto()
    EXCLUSIVE = enum.auto()

    def to_os_flags(self) -> int:
        """Translate into flags for os.open()."""
        flags = os.O_WRONLY
        if WriteFlags.CREATE in self:
            flags |= os.O_CREAT
        if WriteFlags.TRUNCATE in self:
            flags |= os.O_TRUNC
        if WriteFlags.APPEND in self:
            flags |= os.O_APPEND
        if WriteFlags.EXCLUSIVE in self:
            flags |= os.O_EXCL
        return flags | getattr(os, "O_BINARY", 0)


DEFAULT_WRITE_FLAGS = WriteFlags.CREATE | WriteFlags.TRUNCATE


def shard_path(root: Path, reference: str) -> Path:
    """Get the blob path for a reference under root."""
    min_length = SHARD_LEVELS * SHARD_WIDTH
    if len(reference) < min_length:
        raise ValueError(f"Reference must have at least {min_length} characters: {reference!r}")
    if any(sep in reference for sep in ("/", "\\", "\x00")) or reference in (".", ".."):
        raise ValueError(f"Reference is not a valid file name: {reference!r}")

    levels = [reference[i * SHARD_WIDTH:(i + 1) * SHARD_WIDTH] for i in range(SHARD_LEVELS)]
    return root.joinpath(*levels, reference)


class ContentStore:
    """Filesystem blob store keyed by reference.

    Blob files are created lazily on first write. Partial writes are not
    rolled back.
    """

    def __init__(self, root: Path | str, prune_empty_shards: bool = True) -> None:
        """Initialize ContentStore.

        Args:
            root: Storage root; shard directories are created beneath it.
            prune_empty_shards: Remove shard directories left empty by remove().
        """
        self.root = Path(root)
        self.prune_empty_shards = prune_empty_shards

    def path_for(self, reference: str) -> Path:
        """Resolve the blob path for a reference."""
        return shard_path(self.root, reference)

    def exists(self, reference: str) -> bool:
        """Check whether a blob file exists for the reference."""
        return self.path_for(reference).is_file()

    def open_for_read(self, reference: str) -> BinaryIO:
        """Open a blob for reading.

        Raises:
            BlobNotFoundError: If no blob was ever written for the reference.
            StoreFailureError: On any other filesystem error.
        """
        path = self.path_for(reference)
        try:
            return open(path, "rb")
        except FileNotFoundError as exc:
            raise BlobNotFoundError("Blob not found", context={"reference": reference}) from exc
        except OSError as exc:
            raise StoreFailureError(
                "Failed to open blob for reading", context={"reference": reference}
            ) from exc

    def open_for_write(self, reference: str) -> BinaryIO:
        """Open a blob for writing, truncating existing content."""
        return self.open_with_flags(reference, DEFAULT_WRITE_FLAGS)

    def open_with_flags(self, reference: str, flags: WriteFlags) -> BinaryIO:
        """Open a blob for writing with explicit create/truncate/append flags.

        Shard directories are created only when WriteFlags.CREATE is set.
        """
        path = self.path_for(reference)
        try:
            if WriteFlags.CREATE in flags:
                path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(path, flags.to_os_flags(), 0o644)
        except FileNotFoundError as exc:
            # Only reachable without WriteFlags.CREATE
            raise BlobNotFoundError("Blob not found", context={"reference": reference}) from exc
        except OSError as exc:
            raise StoreFailureError(
                "Failed to open blob for writing",
                context={"reference": reference, "flags": str(flags)},
            ) from exc

        mode = "ab" if WriteFlags.APPEND in flags else "wb"
        return os.fdopen(fd, mode)

    def write_bytes(self, reference: str, data: bytes) -> None:
        """Replace a blob's content."""
        with self.open_for_write(reference) as fh:
            fh.write(data)

    def read_bytes(self, reference: str) -> bytes:
        """Read a blob's whole content."""
        with self.open_for_read(reference) as fh:
            return fh.read()

    def remove(self, reference: str) -> bool:
        """Remove a blob file, best effort.

        Errors are logged and swallowed.

        Returns:
            True if a file was removed.
        """
        try:
            path = self.path_for(reference)
        except ValueError:
            logger.warning("Skipping blob removal for malformed reference", reference=reference)
            return False

        removed = False
        try:
            path.unlink()
            removed = True
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Failed to remove blob", reference=reference, error=str(exc))
            return False

        if self.prune_empty_shards:
            self._prune(path.parent)
        return removed

    def _prune(self, directory: Path) -> None:
        """Remove empty shard directories up to (not including) the root."""
        for _ in range(SHARD_LEVELS):
            if directory == self.root:
                break
            try:
                directory.rmdir()
            except OSError:
                # Not empty, already gone, or not ours to remove
                break
            directory = directory.parent
