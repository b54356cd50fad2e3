"""
Storage module: the engines that tie the catalog to blob content.

Provides:
- Storage: Abstract contract every backend satisfies
- CatalogStorage: Locking/state-machine engine over a catalog and a content store
- FileStorage: SQLite catalog plus sharded blob files under one root
- MemoryStorage: Everything in process memory, without paths or flag writers
"""

from shardstore.storage.base import Storage
from shardstore.storage.engine import CatalogStorage
from shardstore.storage.file import FileStorage
from shardstore.storage.memory import MemoryStorage

__all__ = ["CatalogStorage", "FileStorage", "MemoryStorage", "Storage"]
