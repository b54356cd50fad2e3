"""
Base node and capability protocols.

This module defines:
- Node: Point-in-time view of one catalog entry (reference, name, metadata)
- Mutable, Pathable, Readable, Writable, FlagWritable: Optional capabilities
- Capability / capabilities_of(): Enumerate what a given node supports

A Node is not live-bound to the catalog. Mutating one node updates the
catalog and that node's cached fields only; other nodes for the same
reference keep their old values until fetched again.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, BinaryIO, Protocol, runtime_checkable

from shardstore.serialization import decode_metadata, encode_metadata
from shardstore.types import CatalogEntry

if TYPE_CHECKING:
    from shardstore.content.store import WriteFlags
    from shardstore.storage.engine import CatalogStorage


class Node:
    """Base node: the capabilities every backend provides."""

    def __init__(self, storage: CatalogStorage, entry: CatalogEntry) -> None:
        self._storage = storage
        self._reference = entry.reference
        self._name = entry.name
        self._metadata = entry.metadata

    @property
    def reference(self) -> str:
        return self._reference

    @property
    def name(self) -> str:
        return self._name

    @property
    def metadata(self) -> Any:
        return self._metadata

    def get_reference(self) -> str:
        """Get the node's reference."""
        return self._reference

    def get_name(self) -> str:
        """Get the node's cached name."""
        return self._name

    def get_metadata(self) -> Any:
        """Get the node's cached, decoded metadata."""
        return self._metadata

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(reference={self._reference!r}, name={self._name!r})"


class MutableNodeMixin:
    """Shared Mutable implementation for nodes backed by a CatalogStorage."""

    _storage: CatalogStorage
    _reference: str
    _name: str
    _metadata: Any

    def set_name(self, name: str) -> None:
        """Rename the entry.

        A concurrently deleted entry makes this a no-op for the catalog;
        the cached name is updated regardless.
        """
        self._storage._update_name(self._reference, name)
        self._name = name

    def set_metadata(self, metadata: Any) -> None:
        """Replace the entry's metadata. None clears it.

        Raises:
            SerializationError: If metadata cannot be encoded; nothing is changed.
        """
        encoded = encode_metadata(metadata)
        self._storage._update_metadata(self._reference, encoded)
        self._metadata = decode_metadata(encoded, reference=self._reference)


@runtime_checkable
class Mutable(Protocol):
    """Node whose name and metadata can be changed."""

    def set_name(self, name: str) -> None: ...

    def set_metadata(self, metadata: Any) -> None: ...


@runtime_checkable
class Pathable(Protocol):
    """Node whose blob lives at a filesystem path."""

    def get_path(self) -> Path: ...


@runtime_checkable
class Readable(Protocol):
    """Node whose blob can be opened as a byte stream for reading."""

    def get_reader(self) -> BinaryIO: ...


@runtime_checkable
class Writable(Protocol):
    """Node whose blob can be opened for writing, replacing its content."""

    def get_writer(self) -> BinaryIO: ...


@runtime_checkable
class FlagWritable(Protocol):
    """Node whose blob can be opened for writing with explicit flags."""

    def get_flag_writer(self, flags: WriteFlags) -> BinaryIO: ...


class Capability(str, Enum):
    """Optional node capabilities."""

    MUTABLE = "mutable"
    PATHABLE = "pathable"
    READABLE = "readable"
    WRITABLE = "writable"
    FLAG_WRITABLE = "flag_writable"


_PROTOCOLS: dict[Capability, type] = {
    Capability.MUTABLE: Mutable,
    Capability.PATHABLE: Pathable,
    Capability.READABLE: Readable,
    Capability.WRITABLE: Writable,
    Capability.FLAG_WRITABLE: FlagWritable,
}


def capabilities_of(node: Node) -> frozenset[Capability]:
    """List the optional capabilities a node supports."""
    return frozenset(cap for cap, proto in _PROTOCOLS.items() if isinstance(node, proto))
