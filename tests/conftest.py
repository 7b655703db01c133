from datetime import datetime, timezone

import pytest
from PIL import Image, ImageOps

from imagecache.enhancers.base import ImageEnhancer
from imagecache.types import ImageType, MediaItem

DATE = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def date_modified():
    return DATE


@pytest.fixture
def make_image(tmp_path):
    """Write a test image and return its path as a string.

    With ``border`` > 0 the image is framed by ``border_color`` so it has
    whitespace to crop.
    """

    def _make(
        name: str = "source.png",
        size: tuple[int, int] = (200, 100),
        color: tuple = (40, 80, 160),
        border: int = 0,
        border_color: tuple = (255, 255, 255),
        fmt: str | None = None,
    ) -> str:
        img = Image.new("RGB", size, border_color if border else color)
        if border:
            inner = Image.new("RGB", (size[0] - 2 * border, size[1] - 2 * border), color)
            img.paste(inner, (border, border))
        path = tmp_path / "media" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        img.save(path, format=fmt)
        return str(path)

    return _make


@pytest.fixture
def make_item():
    def _make(path: str, **kwargs) -> MediaItem:
        return MediaItem(
            id="item-1",
            name="Test Movie",
            images={ImageType.PRIMARY: path},
            **kwargs,
        )

    return _make


class InvertEnhancer(ImageEnhancer):
    """Inverts RGB pixels. Counts calls and records the images it received."""

    def __init__(self, changed: datetime = DATE, supported: bool = True, priority: int = 0):
        self.changed = changed
        self.supported = supported
        self.priority = priority
        self.calls = 0
        self.received: list[Image.Image] = []

    def supports(self, item, image_type):
        return self.supported

    def last_configuration_change(self, item, image_type):
        return self.changed

    async def enhance_image(self, item, image, image_type, image_index):
        self.calls += 1
        self.received.append(image.copy())
        return ImageOps.invert(image.convert("RGB"))


class OverlayEnhancer(InvertEnhancer):
    """Adds an alpha channel and a red square in the corner."""

    async def enhance_image(self, item, image, image_type, image_index):
        self.calls += 1
        self.received.append(image.copy())
        result = image.convert("RGBA")
        result.paste((255, 0, 0, 255), (0, 0, 10, 10))
        return result


class FailingEnhancer(InvertEnhancer):
    async def enhance_image(self, item, image, image_type, image_index):
        self.calls += 1
        raise RuntimeError("enhancer exploded")


@pytest.fixture
def invert_enhancer():
    """Factory for enhancers that invert RGB pixels."""
    return InvertEnhancer


@pytest.fixture
def overlay_enhancer():
    """Factory for enhancers that add an alpha channel and a red corner."""
    return OverlayEnhancer


@pytest.fixture
def failing_enhancer():
    """Factory for enhancers that always raise."""
    return FailingEnhancer
