"""
MemoryContentStore: dict-based blob storage for development and testing.
"""

from __future__ import annotations

import io
import threading
from typing import BinaryIO

from shardstore.exceptions import BlobNotFoundError


class _BlobWriter(io.RawIOBase):
    """Write-only stream appending into a shared bytearray."""

    def __init__(self, buffer: bytearray) -> None:
        super().__init__()
        self._buffer = buffer

    def writable(self) -> bool:
        return True

    def write(self, b) -> int:  # type: ignore[override]
        if self.closed:
            raise ValueError("write to closed blob writer")
        data = bytes(b)
        self._buffer.extend(data)
        return len(data)


class MemoryContentStore:
    """In-memory blob store keyed by reference."""

    def __init__(self) -> None:
        self._blobs: dict[str, bytearray] = {}
        self._mutex = threading.Lock()

    def exists(self, reference: str) -> bool:
        return reference in self._blobs

    def open_for_read(self, reference: str) -> BinaryIO:
        """Open a snapshot of the blob for reading."""
        with self._mutex:
            buffer = self._blobs.get(reference)
            if buffer is None:
                raise BlobNotFoundError("Blob not found", context={"reference": reference})
            return io.BytesIO(bytes(buffer))

    def open_for_write(self, reference: str) -> BinaryIO:
        """Open the blob for writing, replacing existing content."""
        with self._mutex:
            buffer = bytearray()
            self._blobs[reference] = buffer
        return io.BufferedWriter(_BlobWriter(buffer))

    def write_bytes(self, reference: str, data: bytes) -> None:
        with self.open_for_write(reference) as fh:
            fh.write(data)

    def read_bytes(self, reference: str) -> bytes:
        with self.open_for_read(reference) as fh:
            return fh.read()

    def remove(self, reference: str) -> bool:
        with self._mutex:
            return self._blobs.pop(reference, None) is not None
