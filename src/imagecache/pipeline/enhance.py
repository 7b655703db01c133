"""Enhancer-chain stage, cached per enhancer configuration and source file."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from PIL import Image

from imagecache.cache.disk import DiskStore
from imagecache.cache.keys import enhancer_cache_tag
from imagecache.cache.manager import CacheManager
from imagecache.concurrency.locks import KeyedLockRegistry
from imagecache.enhancers.base import ImageEnhancer
from imagecache.errors.exceptions import InvalidArgumentError, TransformError
from imagecache.types import ImageType, MediaItem
from imagecache.utils.image import encode_image, load_image

logger = logging.getLogger(__name__)


class EnhanceStage:
    """Runs the supported enhancers over an image and caches the PNG result.

    Enhancer failures are not masked here: the error propagates and nothing
    is written to the cache.
    """

    def __init__(
        self,
        cache_manager: CacheManager,
        locks: KeyedLockRegistry,
        enhancers: Sequence[ImageEnhancer],
    ) -> None:
        self._cache = cache_manager
        self._store: DiskStore = cache_manager.enhanced
        self._locks = locks
        self._enhancers = enhancers

    def supported_enhancers(self, item: MediaItem, image_type: ImageType) -> list[ImageEnhancer]:
        """Enhancers applicable to this item, in registry order."""
        return [e for e in self._enhancers if e.supports(item, image_type)]

    def get_image_cache_tag(
        self,
        source_path: str,
        date_modified: datetime,
        enhancers: Sequence[ImageEnhancer],
        item: MediaItem,
        image_type: ImageType,
    ) -> str:
        if item is None:
            raise InvalidArgumentError(argument="item")
        if enhancers is None:
            raise InvalidArgumentError(argument="enhancers")
        if not source_path:
            raise InvalidArgumentError(argument="source_path")
        return enhancer_cache_tag(source_path, date_modified, enhancers, item, image_type)

    async def get_enhanced_image(
        self,
        source_path: str,
        date_modified: datetime,
        item: MediaItem,
        image_type: ImageType,
        image_index: int = 0,
    ) -> str:
        if not source_path:
            raise InvalidArgumentError(argument="source_path")
        if item is None:
            raise InvalidArgumentError(argument="item")

        enhancers = self.supported_enhancers(item, image_type)

        # No enhancement - don't cache
        if not enhancers:
            return source_path

        tag = self.get_image_cache_tag(source_path, date_modified, enhancers, item, image_type)

        # Always PNG so enhancers can introduce transparency
        enhanced_path = self._store.get_resource_path(tag + ".png")

        if self._store.contains(enhanced_path):
            self._cache.record_hit("enhanced")
            return str(enhanced_path)

        async with self._locks.acquire(str(enhanced_path)):
            if self._store.contains(enhanced_path):
                self._cache.record_hit("enhanced")
                return str(enhanced_path)

            self._cache.record_miss("enhanced")
            original = await asyncio.to_thread(load_image, source_path)
            result = await self._run_enhancers(enhancers, original, item, image_type, image_index)
            try:
                data = await asyncio.to_thread(encode_image, result, "PNG", 100)
            finally:
                result.close()
            await asyncio.to_thread(self._store.write, enhanced_path, data)

        return str(enhanced_path)

    async def _run_enhancers(
        self,
        enhancers: Sequence[ImageEnhancer],
        image: Image.Image,
        item: MediaItem,
        image_type: ImageType,
        image_index: int,
    ) -> Image.Image:
        """Apply enhancers sequentially; each consumes the previous output."""
        result = image
        for enhancer in enhancers:
            type_name = type(enhancer).__name__
            logger.debug("Running %s for %s", type_name, item.display_name)
            try:
                enhanced = await enhancer.enhance_image(item, result, image_type, image_index)
            except Exception as exc:
                logger.error("%s failed enhancing %s", type_name, item.name, exc_info=True)
                result.close()
                raise TransformError(
                    f"{type_name} failed enhancing {item.name}: {exc}",
                    stage="enhance",
                    original=exc,
                ) from exc
            if enhanced is not result:
                result.close()
            result = enhanced
        return result


def enhanced_path_changed(source_path: str, enhanced_path: str) -> bool:
    """Whether the enhance stage produced a different file than its input."""
    return Path(enhanced_path) != Path(source_path)
