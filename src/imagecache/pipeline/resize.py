"""Resize stage: serves or renders the final resized image."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import BinaryIO

from imagecache.cache.disk import DiskStore
from imagecache.cache.keys import resized_cache_name
from imagecache.cache.manager import CacheManager
from imagecache.concurrency.locks import KeyedLockRegistry
from imagecache.concurrency.pool import BackgroundTaskPool
from imagecache.errors.exceptions import CacheNotFoundError, TransformError
from imagecache.pipeline.geometry import pixel_dimensions
from imagecache.types import ImageSize
from imagecache.utils.image import encode_image, format_for_path, load_image, resample

logger = logging.getLogger(__name__)


class ResizeStage:
    """Renders resized images once per cache key and streams them to callers.

    Freshly rendered bytes are written to the caller first and persisted in
    the background. Until that write lands they are served from memory, so a
    caller arriving in between never renders the same key again.
    """

    def __init__(
        self,
        cache_manager: CacheManager,
        locks: KeyedLockRegistry,
        background: BackgroundTaskPool,
    ) -> None:
        self._cache = cache_manager
        self._store: DiskStore = cache_manager.resized
        self._locks = locks
        self._background = background
        self._pending: dict[str, bytes] = {}

    def cache_path(
        self,
        source_path: str,
        output_size: ImageSize,
        quality: int,
        date_modified: datetime,
    ) -> Path:
        name = resized_cache_name(source_path, output_size, quality, date_modified)
        return self._store.get_resource_path(name, Path(source_path).suffix)

    async def process(
        self,
        source_path: str,
        date_modified: datetime,
        output_size: ImageSize,
        quality: int,
        sink: BinaryIO,
    ) -> Path:
        """Write the resized image to ``sink``. Returns its cache path."""
        cache_path = self.cache_path(source_path, output_size, quality, date_modified)
        key = str(cache_path)

        # Grab the cache file if it already exists
        if await self._serve_cached(key, cache_path, sink):
            return cache_path

        async with self._locks.acquire(key):
            # Check again in case of lock contention
            if await self._serve_cached(key, cache_path, sink):
                return cache_path

            self._cache.record_miss("resized")
            width, height = pixel_dimensions(output_size)
            data = await asyncio.to_thread(_render, source_path, width, height, quality)

            self._pending[key] = data
            self._background.submit(
                self._persist,
                key,
                cache_path,
                data,
                description=f"cache resized image {cache_path}",
            )
            await asyncio.to_thread(sink.write, data)

        return cache_path

    async def _serve_cached(self, key: str, cache_path: Path, sink: BinaryIO) -> bool:
        pending = self._pending.get(key)
        if pending is not None:
            self._cache.record_hit("resized")
            await asyncio.to_thread(sink.write, pending)
            return True

        if not self._store.contains(cache_path):
            return False

        self._cache.record_hit("resized")
        logger.debug("Serving cached image %s", cache_path)
        await asyncio.to_thread(self._store.copy_to, cache_path, sink)
        return True

    def _persist(self, key: str, cache_path: Path, data: bytes) -> None:
        try:
            self._store.write(cache_path, data)
        finally:
            self._pending.pop(key, None)


def _render(source_path: str, width: int, height: int, quality: int) -> bytes:
    """Decode, bicubic-resample and re-encode in the source container format."""
    try:
        original = load_image(source_path)
    except FileNotFoundError as exc:
        raise CacheNotFoundError(path=source_path) from exc
    except Exception as exc:
        raise TransformError(
            f"Could not decode {source_path}: {exc}", stage="resize", original=exc
        ) from exc

    try:
        fmt = original.format or format_for_path(source_path)
        thumbnail = resample(original, width, height)
        try:
            return encode_image(thumbnail, fmt, quality)
        finally:
            thumbnail.close()
    except Exception as exc:
        raise TransformError(
            f"Could not resize {source_path} to {width}x{height}: {exc}",
            stage="resize",
            original=exc,
        ) from exc
    finally:
        original.close()
