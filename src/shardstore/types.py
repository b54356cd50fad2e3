"""
Core types for shardstore.

This module defines:
- CatalogEntry: One row of the catalog
- Lookup: Explicit present/absent result returned by every lookup
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from shardstore.exceptions import NotFoundError

T = TypeVar("T")


@dataclass(frozen=True)
class CatalogEntry:
    """A catalog row with its metadata already decoded.

    Metadata is None both when nothing was stored and when the stored
    text could not be decoded.
    """

    name: str
    reference: str
    metadata: Any = None


@dataclass(frozen=True)
class Lookup(Generic[T]):
    """Result of a lookup that may or may not find something."""

    found: bool
    value: T | None = None
    key: str | None = None

    @classmethod
    def hit(cls, value: T, key: str | None = None) -> Lookup[T]:
        """Create a result holding a found value."""
        return cls(found=True, value=value, key=key)

    @classmethod
    def miss(cls, key: str | None = None) -> Lookup[T]:
        """Create an empty result."""
        return cls(found=False, value=None, key=key)

    def __bool__(self) -> bool:
        return self.found

    def unwrap(self) -> T:
        """Return the found value.

        Raises:
            NotFoundError: If the lookup found nothing.
        """
        if not self.found:
            raise NotFoundError("Lookup found nothing", context={"key": self.key})
        return self.value  # type: ignore[return-value]

    def map(self, fn: Any) -> Lookup[Any]:
        """Apply fn to the value if present, keeping the key."""
        if not self.found:
            return Lookup.miss(self.key)
        return Lookup.hit(fn(self.value), self.key)
