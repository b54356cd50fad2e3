"""
Catalog module for the name/reference/metadata index.

Provides Catalog, the SQLite-backed relation every storage engine consults.
"""

from shardstore.catalog.store import Catalog

__all__ = ["Catalog"]
