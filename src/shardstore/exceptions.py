"""
Custom exception hierarchy for shardstore.

All exceptions inherit from ShardStoreError, which provides optional context
for structured error handling and logging.
"""

from __future__ import annotations

from typing import Any


class ShardStoreError(Exception):
    """Base exception for all shardstore errors.

    Attributes:
        message: Human-readable error message.
        context: Optional structured context for logging/debugging.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx_str})"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, context={self.context!r})"


class NotOpenError(ShardStoreError):
    """Raised when an operation is attempted on a closed storage.

    Context should include:
        - operation: The operation that was attempted
    """

    pass


class AlreadyOpenError(ShardStoreError):
    """Raised when open() is called on a storage that is already open."""

    pass


class NotFoundError(ShardStoreError):
    """Raised when a lookup result is unwrapped but nothing was found.

    Context should include:
        - reference or name: The key that was looked up
    """

    pass


class BlobNotFoundError(NotFoundError):
    """Raised when a blob is opened for reading but no file exists for it."""

    pass


class SerializationError(ShardStoreError):
    """Raised when metadata cannot be encoded.

    Context should include:
        - value_type: Type name of the value that failed to encode
    """

    pass


class StoreFailureError(ShardStoreError):
    """Raised when the catalog database or the filesystem fails.

    The original exception is always chained as __cause__.
    """

    pass


class ReferenceCollisionError(StoreFailureError):
    """Raised when no free reference could be drawn for a new entry.

    Context should include:
        - attempts: Number of references drawn
    """

    pass
