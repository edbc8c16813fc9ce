"""
Neon Stylizer - Export
======================
Compositing rules applied before a stylized bitmap is encoded.
"""

import logging
import os

import numpy as np

from neon_stylizer.errors import InvalidImageData
from neon_stylizer.models import Bitmap

logger = logging.getLogger(__name__)

# Formats that keep an alpha channel
ALPHA_FORMATS = {'png', 'webp', 'tiff', 'tif'}


def is_blank(bitmap: Bitmap) -> bool:
    """True when every pixel is fully transparent."""
    return not bitmap.to_array()[..., 3].any()


def backdrop_for(invert: bool):
    """Backdrop used when alpha has to be flattened: black, or white when inverted."""
    return (255, 255, 255) if invert else (0, 0, 0)


def flatten(bitmap: Bitmap, invert: bool = False) -> Bitmap:
    """
    Composite ``bitmap`` over a solid backdrop.

    Returns:
        Opaque Bitmap of the same size
    """
    arr = bitmap.to_array().astype(np.float64)
    alpha = arr[..., 3:4] / 255.0
    backdrop = np.asarray(backdrop_for(invert), dtype=np.float64)
    rgb = arr[..., :3] * alpha + backdrop * (1.0 - alpha)

    out = np.empty(arr.shape, dtype=np.uint8)
    out[..., :3] = np.clip(np.floor(rgb + 0.5), 0, 255).astype(np.uint8)
    out[..., 3] = 255
    return Bitmap.from_array(out)


def save_bitmap(bitmap: Bitmap, path: str, invert: bool = False) -> str:
    """
    Write ``bitmap`` to ``path``; the format comes from the extension.

    PNG (and other alpha formats) keep transparency; anything else is
    flattened onto the backdrop first.

    Raises:
        InvalidImageData: if the bitmap is fully transparent
    """
    if is_blank(bitmap):
        raise InvalidImageData("Refusing to export a fully transparent image")

    ext = os.path.splitext(path)[1].lower().lstrip('.')
    if ext in ALPHA_FORMATS:
        image = bitmap.to_image()
    else:
        image = flatten(bitmap, invert).to_image().convert('RGB')

    image.save(path)
    logger.info("Exported %dx%d image to %s", bitmap.width, bitmap.height, path)
    return path
