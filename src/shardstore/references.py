"""
Reference generation.

References are random lowercase hex strings drawn from a shared
pseudo-random source. They are not content hashes and are not
cryptographically strong.
"""

from __future__ import annotations

import random
import threading
import time

DEFAULT_REFERENCE_BYTES = 24

# A reference must cover three two-character shard levels.
MIN_REFERENCE_BYTES = 3


class ReferenceGenerator:
    """Thread-safe generator of random hex references.

    Seeded once from the clock unless an explicit seed is given.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._random = random.Random(time.time_ns() if seed is None else seed)
        self._lock = threading.Lock()

    def generate(self, byte_length: int = DEFAULT_REFERENCE_BYTES) -> str:
        """Draw a new reference.

        Args:
            byte_length: Number of random bytes; the result has twice as many characters.

        Returns:
            Lowercase hex string.
        """
        if byte_length < MIN_REFERENCE_BYTES:
            raise ValueError(f"byte_length must be >= {MIN_REFERENCE_BYTES}")

        with self._lock:
            raw = self._random.randbytes(byte_length)
        return raw.hex()


class SequenceGenerator(ReferenceGenerator):
    """Generator replaying fixed references, then falling back to random ones.

    Mostly useful for tests that need collisions or known shard paths.
    """

    def __init__(self, references: list[str], seed: int | None = None) -> None:
        super().__init__(seed=seed)
        self._pending = list(references)

    def generate(self, byte_length: int = DEFAULT_REFERENCE_BYTES) -> str:
        with self._lock:
            if self._pending:
                return self._pending.pop(0)
        return super().generate(byte_length)


_default_generator: ReferenceGenerator | None = None
_default_lock = threading.Lock()


def default_generator() -> ReferenceGenerator:
    """Get the process-wide shared generator."""
    global _default_generator
    with _default_lock:
        if _default_generator is None:
            _default_generator = ReferenceGenerator()
        return _default_generator
