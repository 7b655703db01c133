"""Tests for the image-size side cache."""

from datetime import timedelta

import pytest

import imagecache.cache.sizes as sizes_module
from imagecache.cache.manager import CacheManager
from imagecache.cache.sizes import SizeMetadataCache, parse_size, serialize_size
from imagecache.concurrency.pool import BackgroundTaskPool
from imagecache.errors.exceptions import CacheNotFoundError, InvalidArgumentError, TransformError
from imagecache.types import ImageSize


@pytest.fixture
def manager(tmp_path):
    return CacheManager(tmp_path / "cache")


@pytest.fixture
def pool(manager):
    return BackgroundTaskPool(on_error=lambda exc: manager.record_background_failure())


@pytest.fixture
def count_decodes(monkeypatch):
    calls = []
    real = sizes_module.read_dimensions

    def counting(path):
        calls.append(path)
        return real(path)

    monkeypatch.setattr(sizes_module, "read_dimensions", counting)
    return calls


class TestSerialization:
    def test_serialize(self):
        assert serialize_size(ImageSize(width=1000, height=562.5)) == "1000|562.5"

    def test_parse(self):
        assert parse_size("1000|562.5\n") == ImageSize(width=1000, height=562.5)

    def test_parse_malformed(self):
        assert parse_size("garbage") is None
        assert parse_size("1,5|2") is None
        assert parse_size("1|2|3") is None
        assert parse_size("nan|nan") is None
        assert parse_size("inf|100") is None
        assert parse_size("-5|10") is None
        assert parse_size("0|10") is None


class TestSizeMetadataCache:
    async def test_reads_header(self, manager, pool, make_image, date_modified):
        path = make_image(size=(320, 240))
        cache = SizeMetadataCache(manager, pool)
        size = await cache.get_image_size(path, date_modified)
        assert size == ImageSize(width=320, height=240)
        await pool.drain()

    async def test_memory_hit_skips_decode(
        self, manager, pool, make_image, date_modified, count_decodes
    ):
        path = make_image()
        cache = SizeMetadataCache(manager, pool)
        await cache.get_image_size(path, date_modified)
        await cache.get_image_size(path, date_modified)
        await pool.drain()
        assert len(count_decodes) == 1
        assert len(cache) == 1

    async def test_persists_to_disk(self, manager, pool, make_image, date_modified, count_decodes):
        path = make_image(size=(64, 32))
        await SizeMetadataCache(manager, pool).get_image_size(path, date_modified)
        await pool.drain()
        assert manager.sizes.entry_count == 1

        # A fresh instance (new process) reads the disk entry instead of decoding
        fresh = SizeMetadataCache(manager, pool)
        size = await fresh.get_image_size(path, date_modified)
        assert size == ImageSize(width=64, height=32)
        assert len(count_decodes) == 1

    async def test_mtime_change_is_new_key(
        self, manager, pool, make_image, date_modified, count_decodes
    ):
        path = make_image()
        cache = SizeMetadataCache(manager, pool)
        await cache.get_image_size(path, date_modified)
        await cache.get_image_size(path, date_modified + timedelta(seconds=1))
        await pool.drain()
        assert len(count_decodes) == 2

    async def test_corrupt_disk_entry_falls_back_to_decode(
        self, manager, pool, make_image, date_modified, count_decodes
    ):
        path = make_image(size=(10, 20))
        name = sizes_module.size_cache_name(path, date_modified)
        manager.sizes.write(manager.sizes.get_resource_path(name, ".txt"), b"not a size")
        size = await SizeMetadataCache(manager, pool).get_image_size(path, date_modified)
        await pool.drain()
        assert size == ImageSize(width=10, height=20)
        assert len(count_decodes) == 1

    async def test_non_finite_disk_entry_falls_back_to_decode(
        self, manager, pool, make_image, date_modified, count_decodes
    ):
        path = make_image(size=(10, 20))
        name = sizes_module.size_cache_name(path, date_modified)
        manager.sizes.write(manager.sizes.get_resource_path(name, ".txt"), b"nan|nan")
        size = await SizeMetadataCache(manager, pool).get_image_size(path, date_modified)
        await pool.drain()
        assert size == ImageSize(width=10, height=20)
        assert len(count_decodes) == 1

    async def test_write_failure_does_not_fail_caller(
        self, manager, pool, make_image, date_modified, monkeypatch
    ):
        def broken_write(path, data):
            raise OSError("disk full")

        monkeypatch.setattr(manager.sizes, "write", broken_write)
        path = make_image(size=(30, 40))
        size = await SizeMetadataCache(manager, pool).get_image_size(path, date_modified)
        await pool.drain()
        assert size == ImageSize(width=30, height=40)
        assert manager.stats().background_write_failures == 1

    async def test_empty_path_rejected(self, manager, pool, date_modified):
        with pytest.raises(InvalidArgumentError):
            await SizeMetadataCache(manager, pool).get_image_size("", date_modified)

    async def test_records_stats(self, manager, pool, make_image, date_modified):
        path = make_image()
        cache = SizeMetadataCache(manager, pool)
        await cache.get_image_size(path, date_modified)
        await cache.get_image_size(path, date_modified)
        await pool.drain()
        stage = manager.stats().stages["sizes"]
        assert stage.misses == 1
        assert stage.hits == 1

    async def test_undecodable_source(self, manager, pool, tmp_path, date_modified):
        bad = tmp_path / "bad.png"
        bad.write_bytes(b"not an image")
        with pytest.raises(TransformError) as exc_info:
            await SizeMetadataCache(manager, pool).get_image_size(str(bad), date_modified)
        assert exc_info.value.stage == "size"

    async def test_missing_source(self, manager, pool, tmp_path, date_modified):
        with pytest.raises(CacheNotFoundError):
            await SizeMetadataCache(manager, pool).get_image_size(
                str(tmp_path / "gone.png"), date_modified
            )
