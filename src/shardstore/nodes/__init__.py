"""
Node module: detached views of catalog entries and their optional capabilities.

Callers probe capabilities with isinstance() or capabilities_of() rather
than assuming a backend supports paths or byte streams.
"""

from shardstore.nodes.base import (
    Capability,
    FlagWritable,
    Mutable,
    Node,
    Pathable,
    Readable,
    Writable,
    capabilities_of,
)
from shardstore.nodes.file import FileNode
from shardstore.nodes.memory import MemoryNode

__all__ = [
    "Capability",
    "FileNode",
    "FlagWritable",
    "MemoryNode",
    "Mutable",
    "Node",
    "Pathable",
    "Readable",
    "Writable",
    "capabilities_of",
]
