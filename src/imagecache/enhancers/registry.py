"""Enhancer registry: keeps registered enhancers in priority order."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import NamedTuple

from imagecache.enhancers.base import ImageEnhancer
from imagecache.types import ImageType, MediaItem

logger = logging.getLogger(__name__)


class EnhancerInfo(NamedTuple):
    name: str
    priority: int


class EnhancerRegistry:
    """Ordered collection of enhancers.

    Enhancers are sorted by ``priority`` on registration; ties keep
    registration order. Consumers receive the list as-is and must not
    re-sort it.
    """

    def __init__(self, enhancers: list[ImageEnhancer] | None = None) -> None:
        self._enhancers: list[ImageEnhancer] = []
        for enhancer in enhancers or []:
            self.register(enhancer)

    def register(self, enhancer: ImageEnhancer) -> None:
        self._enhancers.append(enhancer)
        self._enhancers.sort(key=lambda e: e.priority)
        logger.debug("Registered enhancer %s (priority %d)", enhancer.name, enhancer.priority)

    def all(self) -> list[ImageEnhancer]:
        return list(self._enhancers)

    def supported(self, item: MediaItem, image_type: ImageType) -> list[ImageEnhancer]:
        return [e for e in self._enhancers if e.supports(item, image_type)]

    def list_enhancers(self) -> list[EnhancerInfo]:
        return [EnhancerInfo(name=e.name, priority=e.priority) for e in self._enhancers]

    def __len__(self) -> int:
        return len(self._enhancers)

    def __iter__(self) -> Iterator[ImageEnhancer]:
        return iter(list(self._enhancers))
