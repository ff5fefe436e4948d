from __future__ import annotations

import io
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from badgemaker.constants import HEIF_EXTENSIONS, IMAGE_EXTENSIONS

_HEIF_REGISTERED = False


def _register_heif_opener() -> bool:
    global _HEIF_REGISTERED
    if _HEIF_REGISTERED:
        return True
    try:
        from pillow_heif import register_heif_opener
    except ImportError:
        return False
    register_heif_opener()
    _HEIF_REGISTERED = True
    return True


def _normalize(image: Image.Image) -> Image.Image:
    image.load()
    return ImageOps.exif_transpose(image).convert("RGBA")


def decode_image(path: Path) -> Image.Image:
    """Decode ``path`` into an RGBA bitmap with EXIF orientation applied."""
    ext = path.suffix.lower()
    if ext in HEIF_EXTENSIONS:
        if not _register_heif_opener():
            raise RuntimeError("pillow-heif is required to decode HEIF/HEIC/HIF")
    elif ext and ext not in IMAGE_EXTENSIONS:
        raise RuntimeError(f"unsupported image format: {path.suffix}")
    try:
        with Image.open(path) as image:
            return _normalize(image)
    except UnidentifiedImageError as exc:
        raise RuntimeError(f"cannot decode image: {path.name}") from exc
    except Image.DecompressionBombError as exc:
        raise RuntimeError(f"image too large: {path.name}") from exc


def decode_image_bytes(data: bytes) -> Image.Image:
    """Decode an uploaded buffer; the format is sniffed from its content."""
    if not data:
        raise RuntimeError("empty image data")
    _register_heif_opener()
    try:
        with Image.open(io.BytesIO(data)) as image:
            return _normalize(image)
    except UnidentifiedImageError as exc:
        raise RuntimeError("cannot decode image data") from exc
    except Image.DecompressionBombError as exc:
        raise RuntimeError("image data too large") from exc
