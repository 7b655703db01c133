"""Pydantic model for the resolved configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from imagecache.config.defaults import (
    DEFAULT_CACHE_PATH,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_BACKGROUND_WRITES,
    DEFAULT_QUALITY,
)

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ImageCacheSettings(BaseModel):
    model_config = {"extra": "ignore"}

    cache_path: Path = Path(DEFAULT_CACHE_PATH)
    default_quality: int = Field(default=DEFAULT_QUALITY, ge=0, le=100)
    max_background_writes: int = Field(default=DEFAULT_MAX_BACKGROUND_WRITES, ge=1)
    log_level: str = DEFAULT_LOG_LEVEL

    @field_validator("cache_path", mode="before")
    @classmethod
    def _expand_user(cls, value: Any) -> Any:
        if isinstance(value, str):
            return Path(value).expanduser()
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return level
