"""Image-size side cache: memory first, then disk, then a header-only decode."""

from __future__ import annotations

import asyncio
import logging
import math
from datetime import datetime

from imagecache.cache.keys import format_number, size_cache_name
from imagecache.cache.manager import CacheManager
from imagecache.concurrency.pool import BackgroundTaskPool
from imagecache.errors.exceptions import CacheNotFoundError, InvalidArgumentError, TransformError
from imagecache.types import ImageSize
from imagecache.utils.image import read_dimensions

logger = logging.getLogger(__name__)

_SEPARATOR = "|"


class SizeMetadataCache:
    """Maps (image path, mtime) to decoded dimensions.

    The in-memory map is never evicted; a changed mtime is simply a new key.
    Freshly decoded sizes are persisted through the background pool and a
    failed write only gets logged.
    """

    def __init__(
        self,
        cache_manager: CacheManager,
        background: BackgroundTaskPool,
    ) -> None:
        self._cache = cache_manager
        self._store = cache_manager.sizes
        self._background = background
        self._sizes: dict[str, ImageSize] = {}

    async def get_image_size(self, image_path: str, date_modified: datetime) -> ImageSize:
        if not image_path:
            raise InvalidArgumentError(argument="image_path")

        name = size_cache_name(image_path, date_modified)
        cached = self._sizes.get(name)
        if cached is not None:
            self._cache.record_hit("sizes")
            return cached

        size = await self._load(name, image_path)
        # Keep the first result if a concurrent lookup got there first
        return self._sizes.setdefault(name, size)

    def __len__(self) -> int:
        return len(self._sizes)

    async def _load(self, name: str, image_path: str) -> ImageSize:
        cache_path = self._store.get_resource_path(name, ".txt")

        try:
            text = await asyncio.to_thread(cache_path.read_text, encoding="utf-8")
        except FileNotFoundError:
            text = None

        if text is not None:
            size = parse_size(text)
            if size is not None:
                self._cache.record_hit("sizes")
                return size
            logger.warning("Ignoring unreadable size cache file %s", cache_path)

        self._cache.record_miss("sizes")
        logger.debug("Getting image size for %s", image_path)
        try:
            width, height = await asyncio.to_thread(read_dimensions, image_path)
        except FileNotFoundError as exc:
            raise CacheNotFoundError(path=image_path) from exc
        except (OSError, ValueError) as exc:
            raise TransformError(
                f"Could not read dimensions of {image_path}: {exc}", stage="size", original=exc
            ) from exc
        size = ImageSize(width=width, height=height)

        self._background.submit(
            self._store.write,
            cache_path,
            serialize_size(size).encode("utf-8"),
            description=f"persist image size for {image_path}",
        )
        return size


def serialize_size(size: ImageSize) -> str:
    return format_number(size.width) + _SEPARATOR + format_number(size.height)


def parse_size(text: str) -> ImageSize | None:
    """Parse ``"width|height"``. Returns None for malformed content."""
    parts = text.strip().split(_SEPARATOR)
    if len(parts) != 2:
        return None
    try:
        width, height = float(parts[0]), float(parts[1])
    except ValueError:
        return None
    if not all(math.isfinite(v) and v > 0 for v in (width, height)):
        return None
    return ImageSize(width=width, height=height)
