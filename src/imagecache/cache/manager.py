"""Cache manager: owns the four on-disk stores under one cache root."""

from __future__ import annotations

import logging
from pathlib import Path

from imagecache.cache.disk import DiskStore
from imagecache.cache.stats import CacheStats

logger = logging.getLogger(__name__)

_DEFAULT_CACHE_PATH = Path.home() / ".imagecache" / "cache"


class CacheManager:
    """Image caches rooted at distinct directories, so keys never collide across stages."""

    def __init__(self, cache_path: Path | str | None = None) -> None:
        self._root = Path(cache_path) if cache_path else _DEFAULT_CACHE_PATH
        self.sizes = DiskStore(self._root / "image-sizes")
        self.resized = DiskStore(self._root / "resized-images")
        self.cropped = DiskStore(self._root / "cropped-images")
        self.enhanced = DiskStore(self._root / "enhanced-images")
        self._stats = CacheStats()

    @property
    def root(self) -> Path:
        return self._root

    def record_hit(self, stage: str) -> None:
        self._stats.record_hit(stage)

    def record_miss(self, stage: str) -> None:
        self._stats.record_miss(stage)

    def record_background_failure(self) -> None:
        self._stats.background_write_failures += 1

    def stores(self) -> dict[str, DiskStore]:
        return {
            "sizes": self.sizes,
            "resized": self.resized,
            "cropped": self.cropped,
            "enhanced": self.enhanced,
        }

    def clear(self) -> int:
        """Delete all cached files from every store and reset statistics."""
        count = sum(store.clear() for store in self.stores().values())
        self._stats = CacheStats()
        logger.info("Cleared %d cached files under %s", count, self._root)
        return count

    def stats(self) -> CacheStats:
        """Return aggregate cache statistics."""
        stores = self.stores().values()
        return CacheStats(
            entries=sum(s.entry_count for s in stores),
            size_mb=sum(s.size_mb for s in stores),
            stages={k: v.model_copy() for k, v in self._stats.stages.items()},
            background_write_failures=self._stats.background_write_failures,
        )
