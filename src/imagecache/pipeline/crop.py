"""Whitespace-crop stage, cached per (source path, mtime)."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from pathlib import Path

from imagecache.cache.disk import DiskStore
from imagecache.cache.keys import cropped_cache_name
from imagecache.cache.manager import CacheManager
from imagecache.concurrency.locks import KeyedLockRegistry
from imagecache.utils.image import crop_whitespace, encode_image, format_for_path, load_image

logger = logging.getLogger(__name__)

# Cropped copies are re-encoded at maximum quality
_CROP_QUALITY = 100


class CropStage:
    """Produces whitespace-cropped copies of source images.

    Cropping is best effort: any failure yields the original path.
    """

    def __init__(self, cache_manager: CacheManager, locks: KeyedLockRegistry) -> None:
        self._cache = cache_manager
        self._store: DiskStore = cache_manager.cropped
        self._locks = locks

    def cache_path(self, source_path: str, date_modified: datetime) -> Path:
        name = cropped_cache_name(source_path, date_modified)
        return self._store.get_resource_path(name, Path(source_path).suffix)

    async def get_cropped_image(self, source_path: str, date_modified: datetime) -> str:
        cropped_path = self.cache_path(source_path, date_modified)

        if self._store.contains(cropped_path):
            self._cache.record_hit("cropped")
            return str(cropped_path)

        async with self._locks.acquire(str(cropped_path)):
            # Check again in case of contention
            if self._store.contains(cropped_path):
                self._cache.record_hit("cropped")
                return str(cropped_path)

            self._cache.record_miss("cropped")
            try:
                await asyncio.to_thread(self._crop, source_path, cropped_path)
            except Exception:
                logger.exception("Error cropping image %s", source_path)
                return source_path

        return str(cropped_path)

    def _crop(self, source_path: str, cropped_path: Path) -> None:
        original = load_image(source_path)
        try:
            fmt = original.format or format_for_path(source_path)
            cropped = crop_whitespace(original)
            try:
                data = encode_image(cropped, fmt, _CROP_QUALITY)
            finally:
                cropped.close()
        finally:
            original.close()
        self._store.write(cropped_path, data)
