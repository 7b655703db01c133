"""Cache key generation. Keys change whenever the source mtime or enhancer setup does."""

from __future__ import annotations

import hashlib
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from imagecache.enhancers.base import ImageEnhancer
    from imagecache.types import ImageSize, ImageType, MediaItem

_TICKS_EPOCH = datetime(1, 1, 1)
_TICKS_PER_SECOND = 10_000_000


def to_ticks(value: datetime) -> int:
    """Convert a timestamp to an integral count of 100ns ticks since 0001-01-01 UTC.

    Naive datetimes are taken to be UTC already.
    """
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    delta = value - _TICKS_EPOCH
    return (delta.days * 86_400 + delta.seconds) * _TICKS_PER_SECOND + delta.microseconds * 10


def format_number(value: float) -> str:
    """Locale-independent number text: integral values drop the fractional part."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def md5_hex(text: str) -> str:
    return hashlib.md5(text.encode("utf-8")).hexdigest()


def size_cache_name(image_path: str, date_modified: datetime) -> str:
    """Key for the image-size side cache and the cropped-image cache."""
    return f"{image_path}datemodified={to_ticks(date_modified)}"


def cropped_cache_name(image_path: str, date_modified: datetime) -> str:
    return size_cache_name(image_path, date_modified)


def resized_cache_name(
    image_path: str,
    output_size: ImageSize,
    quality: int,
    date_modified: datetime,
) -> str:
    """Key for a resized image; every sizing input and the source mtime are part of it."""
    return (
        f"{image_path}"
        f"width={format_number(output_size.width)}"
        f"height={format_number(output_size.height)}"
        f"quality={quality}"
        f"datemodified={to_ticks(date_modified)}"
    )


def enhancer_cache_tag(
    image_path: str,
    date_modified: datetime,
    enhancers: Iterable[ImageEnhancer],
    item: MediaItem,
    image_type: ImageType,
) -> str:
    """MD5 tag over the enhancer chain and the source file.

    Each enhancer contributes its type name and the ticks of its last
    configuration change, in chain order, so reordering or reconfiguring the
    chain yields a new tag.
    """
    components = [
        type(enhancer).__name__
        + str(to_ticks(enhancer.last_configuration_change(item, image_type)))
        for enhancer in enhancers
    ]
    components.append(image_path + str(to_ticks(date_modified)))
    return md5_hex("|".join(components))
