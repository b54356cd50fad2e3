"""
MemoryNode: node backed by MemoryStorage.

Supports Mutable, Readable and Writable. There is no path and no flag
writer, so callers probing for Pathable or FlagWritable get nothing.
"""

from __future__ import annotations

from typing import BinaryIO

from shardstore.nodes.base import MutableNodeMixin, Node


class MemoryNode(MutableNodeMixin, Node):
    """Node whose blob is held in process memory."""

    def get_reader(self) -> BinaryIO:
        return self._storage._open_reader(self._reference)

    def get_writer(self) -> BinaryIO:
        return self._storage._open_writer(self._reference)
