"""Concurrency: per-key locks and the background write pool."""

from imagecache.concurrency.locks import KeyedLockRegistry
from imagecache.concurrency.pool import BackgroundTaskPool

__all__ = ["BackgroundTaskPool", "KeyedLockRegistry"]
