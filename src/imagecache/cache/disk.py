"""Directory-backed content-addressable store."""

from __future__ import annotations

import logging
import os
import shutil
import uuid
from pathlib import Path
from typing import BinaryIO

from imagecache.cache.keys import md5_hex
from imagecache.errors.exceptions import CacheNotFoundError

logger = logging.getLogger(__name__)


class DiskStore:
    """Maps cache keys to files under a root directory.

    A key is hashed to a file name and placed in a one-character prefix
    subdirectory. The store does no locking; callers serialize writers.
    """

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def get_resource_path(self, key: str, extension: str | None = None) -> Path:
        """Resolve the file path for a key.

        With an extension the key is hashed first; without one the key is
        taken as an already-unique file name (e.g. ``"<md5>.png"``).
        """
        if not key:
            raise ValueError("Cache key must not be empty")
        if extension is None:
            filename = key
        else:
            if extension and not extension.startswith("."):
                extension = "." + extension
            filename = md5_hex(key) + extension.lower()
        return self._root / filename[0] / filename

    def contains(self, path: Path | str) -> bool:
        return Path(path).is_file()

    def read(self, path: Path | str) -> bytes:
        path = Path(path)
        try:
            return path.read_bytes()
        except FileNotFoundError as exc:
            raise CacheNotFoundError(path=str(path)) from exc

    def open(self, path: Path | str) -> BinaryIO:
        """Open a cached file for reading. The caller closes it."""
        try:
            return open(path, "rb")
        except FileNotFoundError as exc:
            raise CacheNotFoundError(path=str(path)) from exc

    def copy_to(self, path: Path | str, sink: BinaryIO) -> int:
        """Stream a cached file into a writable sink. Returns bytes copied."""
        path = Path(path)
        try:
            with open(path, "rb") as f:
                shutil.copyfileobj(f, sink)
        except FileNotFoundError as exc:
            raise CacheNotFoundError(path=str(path)) from exc
        return path.stat().st_size

    def write(self, path: Path | str, data: bytes) -> None:
        """Write bytes under the final name via a temp file and ``os.replace``."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(f".{path.name}.tmp.{uuid.uuid4().hex}")
        try:
            tmp_path.write_bytes(data)
            os.replace(tmp_path, path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise
        logger.debug("Wrote cache file %s (%d bytes)", path, len(data))

    def clear(self) -> int:
        """Delete every cached file. Returns count deleted."""
        count = 0
        for entry in self._root.rglob("*"):
            if entry.is_file():
                entry.unlink()
                count += 1
        return count

    @property
    def entry_count(self) -> int:
        return sum(1 for p in self._root.rglob("*") if p.is_file() and not p.name.startswith("."))

    @property
    def size_mb(self) -> float:
        total = sum(p.stat().st_size for p in self._root.rglob("*") if p.is_file())
        return total / (1024 * 1024)
