"""Error handling: exception hierarchy shared by every stage."""

from imagecache.errors.exceptions import (
    CacheNotFoundError,
    ImageCacheError,
    InvalidArgumentError,
    InvalidStateError,
    TransformError,
)

__all__ = [
    "ImageCacheError",
    "InvalidArgumentError",
    "InvalidStateError",
    "CacheNotFoundError",
    "TransformError",
]
