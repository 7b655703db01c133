"""Enhancer interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from PIL import Image

from imagecache.types import ImageType, MediaItem


class ImageEnhancer(ABC):
    """A post-processing step that may alter pixels based on item metadata.

    The enhancer's class name and ``last_configuration_change`` are part of
    the enhanced-image cache tag, so changing either invalidates previously
    cached output.
    """

    # Higher runs later; only the registry looks at this
    priority: int = 0

    @abstractmethod
    def supports(self, item: MediaItem, image_type: ImageType) -> bool:
        """Whether this enhancer applies to the given item's image type."""

    @abstractmethod
    def last_configuration_change(self, item: MediaItem, image_type: ImageType) -> datetime:
        """Timestamp of the most recent configuration change affecting output."""

    @abstractmethod
    async def enhance_image(
        self,
        item: MediaItem,
        image: Image.Image,
        image_type: ImageType,
        image_index: int,
    ) -> Image.Image:
        """Return the enhanced image. May return ``image`` itself."""

    @property
    def name(self) -> str:
        return type(self).__name__
