"""Shared Pydantic models for imagecache."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

# ── Enums ──


class ImageType(StrEnum):
    PRIMARY = "primary"
    ART = "art"
    BACKDROP = "backdrop"
    BANNER = "banner"
    LOGO = "logo"
    THUMB = "thumb"
    DISC = "disc"
    BOX = "box"
    SCREENSHOT = "screenshot"
    MENU = "menu"
    CHAPTER = "chapter"


# ── Item models ──


class ChapterInfo(BaseModel):
    name: str = ""
    start_position_ticks: int = 0
    image_path: str | None = None


class MediaItem(BaseModel):
    """An entity of the media catalog, reduced to what image processing reads.

    Backdrops, screenshots and chapter images are indexed; every other image
    type has at most one path in ``images``.
    """

    id: str
    name: str = ""
    path: str | None = None
    images: dict[ImageType, str] = Field(default_factory=dict)
    backdrop_image_paths: list[str] | None = None
    screenshot_image_paths: list[str] | None = None
    chapters: list[ChapterInfo] | None = None
    # Last-write times already known to the catalog, keyed by image path
    image_dates: dict[str, datetime] = Field(default_factory=dict)

    def get_image(self, image_type: ImageType) -> str | None:
        return self.images.get(image_type)

    @property
    def display_name(self) -> str:
        return self.path or self.name or "--Unknown--"


# ── Runtime models ──


class ImageSize(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: float
    height: float


class TransformRequest(BaseModel):
    """Caller-supplied parameters for one image transformation."""

    item: MediaItem
    image_type: ImageType = ImageType.PRIMARY
    image_index: int = 0
    crop_whitespace: bool = False
    date_modified: datetime
    width: int | None = None
    height: int | None = None
    max_width: int | None = None
    max_height: int | None = None
    quality: int | None = Field(default=None, ge=0, le=100)
