"""Resolve an item's image paths and their modification times."""

from __future__ import annotations

import os
from datetime import datetime, timezone

from imagecache.errors.exceptions import InvalidArgumentError, InvalidStateError
from imagecache.types import ImageType, MediaItem


class ItemImageResolver:
    """Maps (item, image type, index) to a source file path."""

    def get_image_path(self, item: MediaItem, image_type: ImageType, image_index: int = 0) -> str:
        if item is None:
            raise InvalidArgumentError(argument="item")

        if image_type == ImageType.BACKDROP:
            return _indexed(item, item.backdrop_image_paths, image_index, "Backdrops", image_type)

        if image_type == ImageType.SCREENSHOT:
            return _indexed(
                item, item.screenshot_image_paths, image_index, "Screenshots", image_type
            )

        if image_type == ImageType.CHAPTER:
            chapters = item.chapters
            if not chapters:
                raise InvalidStateError(
                    f"Item {item.name} does not have any Chapters.",
                    item_name=item.name,
                    image_type=image_type,
                )
            path = _indexed(
                item, [c.image_path or "" for c in chapters], image_index, "Chapters", image_type
            )
            if not path:
                raise InvalidStateError(
                    f"Chapter {image_index} of item {item.name} has no image.",
                    item_name=item.name,
                    image_type=image_type,
                )
            return path

        path = item.get_image(image_type)
        if not path:
            raise InvalidStateError(
                f"Item {item.name} does not have a {image_type} image.",
                item_name=item.name,
                image_type=image_type,
            )
        return path

    def get_image_date_modified(self, item: MediaItem, image_path: str) -> datetime:
        """Last-write time of an item's image, preferring the catalog's known value."""
        if item is None:
            raise InvalidArgumentError(argument="item")
        if not image_path:
            raise InvalidArgumentError(argument="image_path")

        known = item.image_dates.get(image_path)
        if known is not None:
            return known
        return file_modified_time(image_path)

    def get_image_date_modified_for(
        self,
        item: MediaItem,
        image_type: ImageType,
        image_index: int = 0,
    ) -> datetime:
        image_path = self.get_image_path(item, image_type, image_index)
        return self.get_image_date_modified(item, image_path)


def file_modified_time(path: str | os.PathLike[str]) -> datetime:
    """File last-write time as an aware UTC datetime."""
    return datetime.fromtimestamp(os.stat(path).st_mtime, tz=timezone.utc)


def _indexed(
    item: MediaItem,
    paths: list[str] | None,
    index: int,
    label: str,
    image_type: ImageType,
) -> str:
    if not paths:
        raise InvalidStateError(
            f"Item {item.name} does not have any {label}.",
            item_name=item.name,
            image_type=image_type,
        )
    if not 0 <= index < len(paths):
        raise InvalidStateError(
            f"Item {item.name} has no {label[:-1].lower()} at index {index}.",
            item_name=item.name,
            image_type=image_type,
        )
    return paths[index]
