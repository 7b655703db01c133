"""Cache subsystem: content-addressed disk stores plus the image-size side cache."""

from imagecache.cache.disk import DiskStore
from imagecache.cache.keys import (
    enhancer_cache_tag,
    format_number,
    resized_cache_name,
    size_cache_name,
    to_ticks,
)
from imagecache.cache.manager import CacheManager
from imagecache.cache.sizes import SizeMetadataCache
from imagecache.cache.stats import CacheStats, StageStats

__all__ = [
    "CacheManager",
    "CacheStats",
    "DiskStore",
    "SizeMetadataCache",
    "StageStats",
    "enhancer_cache_tag",
    "format_number",
    "resized_cache_name",
    "size_cache_name",
    "to_ticks",
]
