"""Codec helpers: thin wrappers over Pillow used by the pipeline stages."""

from __future__ import annotations

import io
from pathlib import Path

import numpy as np
from PIL import Image

# Formats that take a 0-100 quality argument when saving
_QUALITY_FORMATS = {"JPEG", "WEBP"}
# Modes Pillow cannot resample with bicubic filtering
_CONVERT_BEFORE_RESAMPLE = {"P", "PA", "1"}
# Formats without an alpha channel
_NO_ALPHA_FORMATS = {"JPEG", "BMP"}


def format_for_path(path: str | Path) -> str:
    """Return the Pillow format name for a file extension (e.g. '.jpg' -> 'JPEG')."""
    ext = Path(path).suffix.lower()
    fmt = Image.registered_extensions().get(ext)
    if fmt is None:
        raise ValueError(f"Unsupported image extension: {ext or '(none)'}")
    return fmt


def load_image(path: str | Path) -> Image.Image:
    """Fully decode an image file. The returned image keeps its source ``format``."""
    with Image.open(path) as img:
        img.load()
        return img


def read_dimensions(path: str | Path) -> tuple[int, int]:
    """Read width and height from the image header without decoding pixels."""
    with Image.open(path) as img:
        return img.size


def encode_image(image: Image.Image, fmt: str, quality: int = 90) -> bytes:
    """Encode an image in the given container format."""
    fmt = fmt.upper()
    if fmt in _NO_ALPHA_FORMATS and image.mode not in ("RGB", "L", "CMYK"):
        image = image.convert("RGB")
    params: dict[str, object] = {}
    if fmt in _QUALITY_FORMATS:
        params["quality"] = quality
    dpi = image.info.get("dpi")
    if dpi:
        params["dpi"] = dpi
    buf = io.BytesIO()
    image.save(buf, format=fmt, **params)
    return buf.getvalue()


def resample(image: Image.Image, width: int, height: int) -> Image.Image:
    """High-quality bicubic resize to exact dimensions.

    Palette and bilevel images are converted first so they can be filtered;
    other modes are resized as they are.
    """
    source = image
    if source.mode in _CONVERT_BEFORE_RESAMPLE:
        has_alpha = source.mode == "PA" or "transparency" in source.info
        source = source.convert("RGBA" if has_alpha else ("L" if source.mode == "1" else "RGB"))
    resized = source.resize(
        (max(1, width), max(1, height)),
        Image.Resampling.BICUBIC,
    )
    if "dpi" in image.info:
        resized.info["dpi"] = image.info["dpi"]
    return resized


def crop_whitespace(image: Image.Image, tolerance: int = 0) -> Image.Image:
    """Crop away the uniform border around an image.

    The top-left pixel is taken as the border colour; the result is the
    smallest box holding every pixel that differs from it by more than
    ``tolerance`` on any channel. An image with no such pixel is returned
    uncropped.
    """
    arr = np.asarray(image).astype(np.int16)
    border = arr[0, 0]
    diff = np.abs(arr - border) > tolerance
    mask = diff if diff.ndim == 2 else np.any(diff, axis=2)
    if not mask.any():
        return image.copy()

    rows = np.any(mask, axis=1)
    cols = np.any(mask, axis=0)
    rmin, rmax = np.where(rows)[0][[0, -1]]
    cmin, cmax = np.where(cols)[0][[0, -1]]
    cropped = image.crop((int(cmin), int(rmin), int(cmax) + 1, int(rmax) + 1))
    return cropped
