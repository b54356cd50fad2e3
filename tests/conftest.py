"""
Pytest configuration and fixtures for shardstore tests.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Generator
from unittest.mock import patch

import pytest

from shardstore.config import clear_settings_cache
from shardstore.logging import PACKAGE_LOGGER
from shardstore.references import ReferenceGenerator
from shardstore.storage import CatalogStorage, FileStorage, MemoryStorage


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test outputs."""
    return tmp_path


@pytest.fixture
def mock_env_vars(temp_dir: Path) -> Generator[dict[str, str], None, None]:
    """Provide mock environment variables for testing."""
    env_vars = {
        "SHARDSTORE_STORAGE_ROOT": str(temp_dir / "env_store"),
        "SHARDSTORE_REFERENCE_BYTES": "16",
        "SHARDSTORE_REFERENCE_ATTEMPTS": "3",
        "SHARDSTORE_ESCAPE_WILDCARDS": "true",
        "SHARDSTORE_PRUNE_EMPTY_SHARDS": "false",
        "SHARDSTORE_SQLITE_TIMEOUT": "5",
        "SHARDSTORE_LOG_LEVEL": "DEBUG",
    }

    with patch.dict(os.environ, env_vars, clear=False):
        clear_settings_cache()
        yield env_vars


@pytest.fixture
def generator() -> ReferenceGenerator:
    """Provide a deterministically seeded reference generator."""
    return ReferenceGenerator(seed=1234)


@pytest.fixture
def storage(temp_dir: Path, generator: ReferenceGenerator) -> Generator[FileStorage, None, None]:
    """Create an opened file storage for testing."""
    store = FileStorage(temp_dir / "store", generator=generator)
    store.open()
    yield store
    if store.is_open:
        store.close()


@pytest.fixture
def memory_storage(generator: ReferenceGenerator) -> Generator[MemoryStorage, None, None]:
    """Create an opened in-memory storage for testing."""
    store = MemoryStorage(generator=generator)
    store.open()
    yield store
    if store.is_open:
        store.close()


@pytest.fixture(params=["file", "memory"])
def any_storage(
    request: pytest.FixtureRequest,
    temp_dir: Path,
    generator: ReferenceGenerator,
) -> Generator[CatalogStorage, None, None]:
    """Create an opened storage of each backend."""
    if request.param == "file":
        store: CatalogStorage = FileStorage(temp_dir / "store", generator=generator)
    else:
        store = MemoryStorage(generator=generator)
    store.open()
    yield store
    if store.is_open:
        store.close()


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Automatically reset settings cache before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def restore_package_logger() -> Generator[None, None, None]:
    """Undo any logging configuration a test applies to the package logger."""
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    handlers = list(package_logger.handlers)
    level = package_logger.level
    propagate = package_logger.propagate
    yield
    for handler in package_logger.handlers:
        if handler not in handlers:
            handler.close()
    package_logger.handlers[:] = handlers
    package_logger.setLevel(level)
    package_logger.propagate = propagate
