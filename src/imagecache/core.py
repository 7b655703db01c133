"""Top-level entry point: ImageProcessor.process_image()."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Any, BinaryIO

from imagecache.cache.manager import CacheManager
from imagecache.cache.sizes import SizeMetadataCache
from imagecache.cache.stats import CacheStats
from imagecache.concurrency.locks import KeyedLockRegistry
from imagecache.concurrency.pool import BackgroundTaskPool
from imagecache.config.defaults import DEFAULT_MAX_BACKGROUND_WRITES, DEFAULT_QUALITY
from imagecache.config.hierarchy import load_settings
from imagecache.enhancers.base import ImageEnhancer
from imagecache.errors.exceptions import InvalidArgumentError
from imagecache.items import ItemImageResolver, file_modified_time
from imagecache.pipeline.crop import CropStage
from imagecache.pipeline.enhance import EnhanceStage, enhanced_path_changed
from imagecache.pipeline.geometry import resize_dimensions
from imagecache.pipeline.resize import ResizeStage
from imagecache.types import ImageSize, ImageType, MediaItem, TransformRequest

logger = logging.getLogger(__name__)


class ImageProcessor:
    """Crop, enhance and resize images through persisted caches with per-key locks."""

    def __init__(
        self,
        cache_path: Path | str | None = None,
        enhancers: Sequence[ImageEnhancer] | None = None,
        resolver: ItemImageResolver | None = None,
        default_quality: int = DEFAULT_QUALITY,
        max_background_writes: int = DEFAULT_MAX_BACKGROUND_WRITES,
        locks: KeyedLockRegistry | None = None,
    ) -> None:
        self._cache_manager = CacheManager(cache_path)
        self._resolver = resolver or ItemImageResolver()
        self._default_quality = default_quality
        self._locks = locks or KeyedLockRegistry()
        self._background = BackgroundTaskPool(
            max_workers=max_background_writes,
            on_error=lambda exc: self._cache_manager.record_background_failure(),
        )

        self._sizes = SizeMetadataCache(self._cache_manager, self._background)
        self._crop = CropStage(self._cache_manager, self._locks)
        self._enhance = EnhanceStage(self._cache_manager, self._locks, list(enhancers or []))
        self._resize = ResizeStage(self._cache_manager, self._locks, self._background)

    @classmethod
    def from_config(
        cls,
        enhancers: Sequence[ImageEnhancer] | None = None,
        **overrides: Any,
    ) -> ImageProcessor:
        """Build a processor from the merged configuration hierarchy."""
        settings = load_settings(**overrides)
        return cls(
            cache_path=settings.cache_path,
            enhancers=enhancers,
            default_quality=settings.default_quality,
            max_background_writes=settings.max_background_writes,
        )

    @property
    def cache_manager(self) -> CacheManager:
        return self._cache_manager

    @property
    def resolver(self) -> ItemImageResolver:
        return self._resolver

    async def process_image(
        self,
        item: MediaItem,
        image_type: ImageType,
        image_index: int,
        crop_whitespace: bool,
        date_modified: datetime,
        sink: BinaryIO,
        width: int | None = None,
        height: int | None = None,
        max_width: int | None = None,
        max_height: int | None = None,
        quality: int | None = None,
    ) -> None:
        """Write the transformed image to ``sink``.

        Args:
            item: The item that owns the image.
            image_type: Which image of the item.
            image_index: Index for backdrops, screenshots and chapters.
            crop_whitespace: Crop uniform borders before anything else.
            date_modified: Last-write time of the original image file.
            sink: Writable binary stream receiving the encoded bytes.
            width: Fixed output width; aspect ratio kept if height is absent.
            height: Fixed output height; aspect ratio kept if width is absent.
            max_width: Upper bound on output width; aspect ratio kept.
            max_height: Upper bound on output height; aspect ratio kept.
            quality: Encoder quality 0-100; applies to lossy formats.

        Raises:
            InvalidArgumentError: item or sink missing.
            InvalidStateError: the item has no such image.
            TransformError: decoding, resizing or encoding failed.
        """
        if item is None:
            raise InvalidArgumentError(argument="item")
        if sink is None:
            raise InvalidArgumentError(argument="sink")

        image_path = self._resolver.get_image_path(item, image_type, image_index)

        if crop_whitespace:
            image_path = await self._crop.get_cropped_image(image_path, date_modified)

        try:
            enhanced_path = await self._enhance.get_enhanced_image(
                image_path, date_modified, item, image_type, image_index
            )
            # If the path changed update date_modified
            if enhanced_path_changed(image_path, enhanced_path):
                date_modified = await asyncio.to_thread(file_modified_time, enhanced_path)
                image_path = enhanced_path
        except Exception:
            logger.exception("Error enhancing image for %s; using unenhanced source", item.name)

        original_size = await self._sizes.get_image_size(image_path, date_modified)
        new_size = resize_dimensions(original_size, width, height, max_width, max_height)

        if quality is None:
            quality = self._default_quality

        await self._resize.process(image_path, date_modified, new_size, quality, sink)

    async def process_request(self, request: TransformRequest, sink: BinaryIO) -> None:
        await self.process_image(
            request.item,
            request.image_type,
            request.image_index,
            request.crop_whitespace,
            request.date_modified,
            sink,
            width=request.width,
            height=request.height,
            max_width=request.max_width,
            max_height=request.max_height,
            quality=request.quality,
        )

    async def get_image_size(self, image_path: str, date_modified: datetime) -> ImageSize:
        return await self._sizes.get_image_size(image_path, date_modified)

    def get_image_path(self, item: MediaItem, image_type: ImageType, image_index: int = 0) -> str:
        return self._resolver.get_image_path(item, image_type, image_index)

    def get_image_date_modified(
        self, item: MediaItem, image_type: ImageType, image_index: int = 0
    ) -> datetime:
        return self._resolver.get_image_date_modified_for(item, image_type, image_index)

    def get_image_cache_tag(self, item: MediaItem, image_type: ImageType, image_path: str) -> str:
        """Tag identifying the enhanced form of an image; changes when it would."""
        if item is None:
            raise InvalidArgumentError(argument="item")
        if not image_path:
            raise InvalidArgumentError(argument="image_path")
        date_modified = self._resolver.get_image_date_modified(item, image_path)
        enhancers = self._enhance.supported_enhancers(item, image_type)
        return self._enhance.get_image_cache_tag(
            image_path, date_modified, enhancers, item, image_type
        )

    async def get_enhanced_image(
        self,
        image_path: str,
        date_modified: datetime,
        item: MediaItem,
        image_type: ImageType,
        image_index: int = 0,
    ) -> str:
        return await self._enhance.get_enhanced_image(
            image_path, date_modified, item, image_type, image_index
        )

    def stats(self) -> CacheStats:
        return self._cache_manager.stats()

    async def drain(self) -> None:
        """Wait for outstanding background cache writes."""
        await self._background.drain()

    async def close(self) -> None:
        await self.drain()
