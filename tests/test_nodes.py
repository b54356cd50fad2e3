"""
Tests for nodes and their optional capabilities.
"""

from __future__ import annotations

import pytest

from shardstore.content import WriteFlags
from shardstore.exceptions import BlobNotFoundError, NotOpenError, SerializationError
from shardstore.nodes import (
    Capability,
    FileNode,
    FlagWritable,
    MemoryNode,
    Mutable,
    Pathable,
    Readable,
    Writable,
    capabilities_of,
)
from shardstore.storage import CatalogStorage, FileStorage, MemoryStorage


class TestCapabilities:
    """Test capability probing."""

    def test_file_node_has_everything(self, storage: FileStorage) -> None:
        node = storage.create("cats")
        assert isinstance(node, FileNode)
        assert capabilities_of(node) == frozenset(Capability)
        for proto in (Mutable, Pathable, Readable, Writable, FlagWritable):
            assert isinstance(node, proto)

    def test_memory_node_has_no_path_or_flags(self, memory_storage: MemoryStorage) -> None:
        """Test that an absent capability is reported, not raised."""
        node = memory_storage.create("cats")
        assert isinstance(node, MemoryNode)
        assert capabilities_of(node) == {
            Capability.MUTABLE,
            Capability.READABLE,
            Capability.WRITABLE,
        }
        assert not isinstance(node, Pathable)
        assert not isinstance(node, FlagWritable)

    def test_base_accessors(self, any_storage: CatalogStorage) -> None:
        node = any_storage.create("cats", {"legs": 4})
        assert node.get_reference() == node.reference
        assert node.get_name() == node.name == "cats"
        assert node.get_metadata() == node.metadata == {"legs": 4}
        assert "cats" in repr(node)


class TestBlobIO:
    """Test reading and writing blobs through nodes."""

    def test_meow_round_trip(self, any_storage: CatalogStorage) -> None:
        node = any_storage.create("cats", None)
        assert isinstance(node, Writable)
        assert isinstance(node, Readable)

        with node.get_writer() as writer:
            writer.write(b"meow")
        with node.get_reader() as reader:
            assert reader.read() == b"meow"

    def test_reader_before_write_is_not_found(self, any_storage: CatalogStorage) -> None:
        """Test that blobs are only created on first write."""
        node = any_storage.create("empty")
        with pytest.raises(BlobNotFoundError):
            node.get_reader()

    def test_writer_truncates(self, any_storage: CatalogStorage) -> None:
        node = any_storage.create("cats")
        with node.get_writer() as writer:
            writer.write(b"meow meow meow")
        with node.get_writer() as writer:
            writer.write(b"purr")
        with node.get_reader() as reader:
            assert reader.read() == b"purr"

    def test_flag_writer_appends(self, storage: FileStorage) -> None:
        node = storage.create("log")
        with node.get_flag_writer(WriteFlags.CREATE | WriteFlags.APPEND) as writer:
            writer.write(b"one\n")
        with node.get_flag_writer(WriteFlags.CREATE | WriteFlags.APPEND) as writer:
            writer.write(b"two\n")
        with node.get_reader() as reader:
            assert reader.read() == b"one\ntwo\n"

    def test_path_follows_shard_layout(self, storage: FileStorage) -> None:
        node = storage.create("cats")
        ref = node.reference
        expected = storage.root / ref[0:2] / ref[2:4] / ref[4:6] / ref
        assert node.get_path() == expected
        assert not expected.exists()

        with node.get_writer() as writer:
            writer.write(b"meow")
        assert expected.read_bytes() == b"meow"

    def test_io_on_closed_storage(self, storage: FileStorage) -> None:
        node = storage.create("cats")
        storage.close()
        with pytest.raises(NotOpenError):
            node.get_writer()
        with pytest.raises(NotOpenError):
            node.get_reader()


class TestMutable:
    """Test renaming and metadata updates."""

    def test_rename(self, any_storage: CatalogStorage) -> None:
        node = any_storage.create("A")
        node.set_name("B")
        assert node.get_name() == "B"

        assert not any_storage.get_by_name("A")
        assert any_storage.get_by_name("B").unwrap().reference == node.reference
        assert any_storage.get_by_reference(node.reference).unwrap().name == "B"

    def test_other_nodes_are_stale(self, any_storage: CatalogStorage) -> None:
        """Test that nodes are detached snapshots."""
        node = any_storage.create("A", {"v": 1})
        other = any_storage.get_by_reference(node.reference).unwrap()

        node.set_name("B")
        node.set_metadata({"v": 2})

        assert other.name == "A"
        assert other.metadata == {"v": 1}

        fresh = any_storage.get_by_reference(node.reference).unwrap()
        assert fresh.name == "B"
        assert fresh.metadata == {"v": 2}

    def test_set_metadata_none_clears(self, any_storage: CatalogStorage) -> None:
        node = any_storage.create("A", {"v": 1})
        node.set_metadata(None)
        assert node.metadata is None
        assert any_storage.get_by_reference(node.reference).unwrap().metadata is None

    def test_set_unserializable_metadata_fails_unchanged(self, any_storage: CatalogStorage) -> None:
        node = any_storage.create("A", {"v": 1})
        with pytest.raises(SerializationError):
            node.set_metadata({"v": object()})

        assert node.metadata == {"v": 1}
        assert any_storage.get_by_reference(node.reference).unwrap().metadata == {"v": 1}

    def test_rename_after_delete_is_silent(self, any_storage: CatalogStorage) -> None:
        """Test that renaming a deleted entry only updates the node."""
        node = any_storage.create("A")
        any_storage.delete(node.reference)

        node.set_name("B")
        node.set_metadata([1, 2])

        assert node.name == "B"
        assert node.metadata == [1, 2]
        assert not any_storage.exists_by_reference(node.reference)
        assert not any_storage.exists_by_name("B")

    def test_mutation_on_closed_storage(self, any_storage: CatalogStorage) -> None:
        node = any_storage.create("A")
        any_storage.close()
        with pytest.raises(NotOpenError):
            node.set_name("B")
        with pytest.raises(NotOpenError):
            node.set_metadata(None)
        assert node.name == "A"
