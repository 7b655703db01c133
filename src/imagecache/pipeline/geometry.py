"""Target-size computation for resize requests."""

from __future__ import annotations

from imagecache.types import ImageSize


def resize_dimensions(
    size: ImageSize,
    width: float | None = None,
    height: float | None = None,
    max_width: float | None = None,
    max_height: float | None = None,
) -> ImageSize:
    """Compute the output size for a resize request.

    Explicit width and height are used as given. A single explicit dimension
    scales the other one to keep the aspect ratio. Max constraints are then
    applied, height first, and only ever shrink the result. With no sizing
    parameters the source size is returned.
    """
    new_width = size.width
    new_height = size.height

    if width is not None and height is not None:
        new_width = float(width)
        new_height = float(height)
    elif height is not None:
        new_width = _scaled_width(new_height, new_width, float(height))
        new_height = float(height)
    elif width is not None:
        new_height = _scaled_height(new_height, new_width, float(width))
        new_width = float(width)

    if max_height is not None and max_height < new_height:
        new_width = _scaled_width(new_height, new_width, float(max_height))
        new_height = float(max_height)

    if max_width is not None and max_width < new_width:
        new_height = _scaled_height(new_height, new_width, float(max_width))
        new_width = float(max_width)

    return ImageSize(width=new_width, height=new_height)


def pixel_dimensions(size: ImageSize) -> tuple[int, int]:
    """Round a computed size to whole pixels, never below 1x1."""
    return max(1, round(size.width)), max(1, round(size.height))


def _scaled_width(current_height: float, current_width: float, new_height: float) -> float:
    if current_height == 0:
        return current_width
    return new_height / current_height * current_width


def _scaled_height(current_height: float, current_width: float, new_width: float) -> float:
    if current_width == 0:
        return current_height
    return new_width / current_width * current_height
