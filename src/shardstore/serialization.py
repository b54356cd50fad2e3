"""
Metadata serialization.

Metadata is stored as JSON text encoded with orjson. Encoding failures
raise SerializationError; decoding failures yield None.
"""

from __future__ import annotations

from typing import Any

import orjson

from shardstore.exceptions import SerializationError
from shardstore.logging import get_logger

logger = get_logger(__name__)


def encode_metadata(value: Any) -> str | None:
    """Encode metadata for the catalog.

    Args:
        value: Any JSON-serializable value, or None to store NULL.

    Returns:
        JSON text, or None when value is None.

    Raises:
        SerializationError: If the value cannot be encoded.
    """
    if value is None:
        return None
    try:
        return orjson.dumps(value).decode("utf-8")
    except (orjson.JSONEncodeError, TypeError) as exc:
        raise SerializationError(
            "Metadata is not serializable",
            context={"value_type": type(value).__name__, "error": str(exc)},
        ) from exc


def decode_metadata(raw: str | bytes | None, reference: str | None = None) -> Any:
    """Decode stored metadata, treating undecodable text as absent."""
    if raw is None:
        return None
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError:
        logger.warning("Undecodable metadata treated as absent", reference=reference)
        return None
