"""Custom exception hierarchy for imagecache."""

from __future__ import annotations

from typing import Any


class ImageCacheError(Exception):
    """Base exception for all imagecache errors."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message


class InvalidArgumentError(ImageCacheError, ValueError):
    """A required input was missing or empty.

    Raised before any I/O takes place.
    """

    def __init__(self, message: str = "", argument: str | None = None) -> None:
        super().__init__(message or f"Missing required argument: {argument}")
        self.argument = argument


class InvalidStateError(ImageCacheError):
    """The item does not carry the requested image.

    Examples: no backdrops, backdrop index out of range, no chapters.
    """

    def __init__(
        self,
        message: str = "",
        item_name: str | None = None,
        image_type: str | None = None,
    ) -> None:
        super().__init__(message)
        self.item_name = item_name
        self.image_type = image_type


class CacheNotFoundError(ImageCacheError, FileNotFoundError):
    """A cache or source file was read directly but does not exist."""

    def __init__(self, message: str = "", path: str | None = None) -> None:
        super().__init__(message or f"File not found: {path}")
        self.path = path


class TransformError(ImageCacheError):
    """Codec or enhancer failure while producing transformed bytes."""

    def __init__(
        self,
        message: str = "",
        stage: str = "resize",
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.stage = stage
        self.original = original
