"""
Content module for blob files on disk.

Provides ContentStore and the WriteFlags used to open blobs for writing.
"""

from shardstore.content.store import ContentStore, WriteFlags, shard_path

__all__ = ["ContentStore", "WriteFlags", "shard_path"]
