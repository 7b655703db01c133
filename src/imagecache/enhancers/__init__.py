"""Pluggable image enhancers."""

from imagecache.enhancers.base import ImageEnhancer
from imagecache.enhancers.registry import EnhancerInfo, EnhancerRegistry

__all__ = ["EnhancerInfo", "EnhancerRegistry", "ImageEnhancer"]
