"""Tests for the directory-backed store."""

import io

import pytest

from imagecache.cache.disk import DiskStore
from imagecache.errors.exceptions import CacheNotFoundError


class TestResourcePath:
    def test_deterministic(self, tmp_path):
        store = DiskStore(tmp_path / "store")
        assert store.get_resource_path("key", ".jpg") == store.get_resource_path("key", ".jpg")

    def test_distinct_keys_distinct_paths(self, tmp_path):
        store = DiskStore(tmp_path / "store")
        assert store.get_resource_path("a", ".jpg") != store.get_resource_path("b", ".jpg")

    def test_extension_and_prefix_dir(self, tmp_path):
        store = DiskStore(tmp_path / "store")
        path = store.get_resource_path("key", ".JPG")
        assert path.suffix == ".jpg"
        assert path.parent.name == path.name[0]
        assert path.parent.parent == tmp_path / "store"

    def test_extension_without_dot(self, tmp_path):
        store = DiskStore(tmp_path / "store")
        assert store.get_resource_path("key", "png").suffix == ".png"

    def test_literal_filename_without_extension(self, tmp_path):
        store = DiskStore(tmp_path / "store")
        path = store.get_resource_path("abcdef.png")
        assert path.name == "abcdef.png"
        assert path.parent.name == "a"

    def test_empty_key_rejected(self, tmp_path):
        store = DiskStore(tmp_path / "store")
        with pytest.raises(ValueError):
            store.get_resource_path("", ".png")


class TestReadWrite:
    def test_write_then_read(self, tmp_path):
        store = DiskStore(tmp_path / "store")
        path = store.get_resource_path("k1", ".bin")
        store.write(path, b"hello")
        assert store.contains(path)
        assert store.read(path) == b"hello"

    def test_contains_false_when_missing(self, tmp_path):
        store = DiskStore(tmp_path / "store")
        assert not store.contains(store.get_resource_path("missing", ".bin"))

    def test_read_missing_raises(self, tmp_path):
        store = DiskStore(tmp_path / "store")
        with pytest.raises(CacheNotFoundError):
            store.read(store.get_resource_path("missing", ".bin"))

    def test_not_found_is_file_not_found(self, tmp_path):
        store = DiskStore(tmp_path / "store")
        with pytest.raises(FileNotFoundError):
            store.read(store.get_resource_path("missing", ".bin"))

    def test_overwrite(self, tmp_path):
        store = DiskStore(tmp_path / "store")
        path = store.get_resource_path("k1", ".bin")
        store.write(path, b"first")
        store.write(path, b"second")
        assert store.read(path) == b"second"

    def test_no_temp_files_left(self, tmp_path):
        store = DiskStore(tmp_path / "store")
        path = store.get_resource_path("k1", ".bin")
        store.write(path, b"data")
        assert [p.name for p in path.parent.iterdir()] == [path.name]

    def test_copy_to(self, tmp_path):
        store = DiskStore(tmp_path / "store")
        path = store.get_resource_path("k1", ".bin")
        store.write(path, b"payload")
        sink = io.BytesIO()
        assert store.copy_to(path, sink) == 7
        assert sink.getvalue() == b"payload"

    def test_copy_missing_raises(self, tmp_path):
        store = DiskStore(tmp_path / "store")
        with pytest.raises(CacheNotFoundError):
            store.copy_to(store.get_resource_path("nope", ".bin"), io.BytesIO())


class TestHousekeeping:
    def test_entry_count_and_clear(self, tmp_path):
        store = DiskStore(tmp_path / "store")
        for key in ("a", "b", "c"):
            store.write(store.get_resource_path(key, ".bin"), b"x" * 100)
        assert store.entry_count == 3
        assert store.size_mb > 0
        assert store.clear() == 3
        assert store.entry_count == 0

    def test_open(self, tmp_path):
        store = DiskStore(tmp_path / "store")
        path = store.get_resource_path("k1", ".bin")
        store.write(path, b"stream me")
        with store.open(path) as f:
            assert f.read() == b"stream me"

    def test_open_missing_raises(self, tmp_path):
        store = DiskStore(tmp_path / "store")
        with pytest.raises(CacheNotFoundError):
            store.open(store.get_resource_path("nope", ".bin"))
