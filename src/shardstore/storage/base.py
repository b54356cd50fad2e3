"""
Storage contract.

Every call is synchronous. Lookups return an explicit Lookup result;
misses are never errors for get_* and exists_*.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from shardstore.nodes.base import Node
    from shardstore.types import Lookup


class Storage(ABC):
    """Abstract storage: a catalog of named entries, each with an optional blob."""

    @abstractmethod
    def get_by_reference(self, reference: str) -> Lookup[Node]:
        """Find the node for a reference."""
        ...

    @abstractmethod
    def get_by_name(self, name: str) -> Lookup[Node]:
        """Find a node by name; any match if the name is not unique."""
        ...

    @abstractmethod
    def create(self, name: str, metadata: Any = None) -> Node:
        """Create a new entry and return its node."""
        ...

    @abstractmethod
    def delete(self, reference: str) -> None:
        """Delete an entry and its blob. Unknown references are ignored."""
        ...

    @abstractmethod
    def delete_by(self, prefix: str, postfix: str) -> int:
        """Delete every entry whose name matches prefix...postfix."""
        ...

    @abstractmethod
    def exists_by_name(self, name: str) -> bool:
        """Check whether any entry has the name."""
        ...

    @abstractmethod
    def exists_by_reference(self, reference: str) -> bool:
        """Check whether an entry has the reference."""
        ...

    @abstractmethod
    def list_by(self, prefix: str, postfix: str) -> list[Node]:
        """List nodes whose names match prefix...postfix, in no particular order."""
        ...

    @abstractmethod
    def list_references(self, prefix: str, postfix: str) -> list[str]:
        """List references whose names match prefix...postfix."""
        ...

    @abstractmethod
    def open(self) -> None:
        """Open the storage."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Close the storage."""
        ...

    def __enter__(self) -> Storage:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
