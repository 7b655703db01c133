"""Package-level default configuration values."""

from __future__ import annotations

from pathlib import Path
from typing import Any

# Default cache settings
DEFAULT_CACHE_PATH = str(Path.home() / ".imagecache" / "cache")

# Default encode settings
DEFAULT_QUALITY = 90

# Default concurrency settings
DEFAULT_MAX_BACKGROUND_WRITES = 4

# Log level
DEFAULT_LOG_LEVEL = "WARNING"


def get_defaults() -> dict[str, Any]:
    """Return all defaults as a flat dictionary for merging."""
    return {
        "cache_path": DEFAULT_CACHE_PATH,
        "default_quality": DEFAULT_QUALITY,
        "max_background_writes": DEFAULT_MAX_BACKGROUND_WRITES,
        "log_level": DEFAULT_LOG_LEVEL,
    }
