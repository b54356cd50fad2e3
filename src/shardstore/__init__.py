"""shardstore: embeddable blob storage with a SQLite catalog."""

import importlib.metadata as importlib_metadata

from shardstore.content import WriteFlags
from shardstore.exceptions import (
    AlreadyOpenError,
    BlobNotFoundError,
    NotFoundError,
    NotOpenError,
    ReferenceCollisionError,
    SerializationError,
    ShardStoreError,
    StoreFailureError,
)
from shardstore.nodes import (
    Capability,
    FlagWritable,
    Mutable,
    Node,
    Pathable,
    Readable,
    Writable,
    capabilities_of,
)
from shardstore.references import ReferenceGenerator, default_generator
from shardstore.storage import FileStorage, MemoryStorage, Storage
from shardstore.types import CatalogEntry, Lookup


def _detect_version() -> str:
    """Return installed package version or a local fallback when metadata is unavailable."""
    try:
        return importlib_metadata.version("shardstore")
    except importlib_metadata.PackageNotFoundError:
        return "0.0.0+unknown"


__version__ = _detect_version()

__all__ = [
    "AlreadyOpenError",
    "BlobNotFoundError",
    "Capability",
    "CatalogEntry",
    "FileStorage",
    "FlagWritable",
    "Lookup",
    "MemoryStorage",
    "Mutable",
    "Node",
    "NotFoundError",
    "NotOpenError",
    "Pathable",
    "Readable",
    "ReferenceCollisionError",
    "ReferenceGenerator",
    "SerializationError",
    "ShardStoreError",
    "Storage",
    "StoreFailureError",
    "WriteFlags",
    "capabilities_of",
    "default_generator",
]
