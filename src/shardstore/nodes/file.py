"""
FileNode: node backed by FileStorage, exposing every capability.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO

from shardstore.content.store import WriteFlags
from shardstore.nodes.base import MutableNodeMixin, Node

if TYPE_CHECKING:
    from shardstore.storage.file import FileStorage


class FileNode(MutableNodeMixin, Node):
    """Node whose blob is a file under the storage root."""

    _storage: FileStorage

    def get_path(self) -> Path:
        """Get the blob's path. The file may not exist until first written."""
        return self._storage._blob_path(self._reference)

    def get_reader(self) -> BinaryIO:
        """Open the blob for reading.

        Raises:
            BlobNotFoundError: If nothing was written yet.
        """
        return self._storage._open_reader(self._reference)

    def get_writer(self) -> BinaryIO:
        """Open the blob for writing, truncating existing content."""
        return self._storage._open_writer(self._reference)

    def get_flag_writer(self, flags: WriteFlags) -> BinaryIO:
        """Open the blob for writing with explicit create/truncate/append flags."""
        return self._storage._open_flag_writer(self._reference, flags)
