"""
Neon Stylizer - ASCII Renderer
==============================
Maps a preprocessed image to a grid of characters, one per square cell.
"""

import logging
from typing import Tuple

import numpy as np

from neon_stylizer.color_math import (
    apply_invert_shape,
    resolve_ink_rgb,
    rgb_luminance,
    round_half_up,
    to_bytes,
)
from neon_stylizer.constants import ASCII_MAX_CELL, ASCII_MIN_CELL, CharacterSet
from neon_stylizer.errors import InvalidImageData, InvalidSettings
from neon_stylizer.models import AsciiCell, AsciiGrid, Bitmap, StyleSettings
from neon_stylizer.spatial import SpatialOps

logger = logging.getLogger(__name__)


class AsciiRenderer:
    """Density-based ASCII art with a single foreground colour."""

    def __init__(self, charset: str = CharacterSet.SAFE):
        if not charset:
            raise InvalidSettings("ASCII charset must not be empty")
        self.charset = charset

    # -------------------------------------------------------------------------
    # Grid geometry
    # -------------------------------------------------------------------------

    @staticmethod
    def cell_size(scale: float) -> int:
        """Pixels per character edge: 20 at scale 1, growing as scale drops."""
        size = round_half_up(ASCII_MIN_CELL + (1.0 - scale) * (ASCII_MAX_CELL - ASCII_MIN_CELL))
        return max(1, int(size))

    @classmethod
    def grid_shape(cls, width: int, height: int, scale: float) -> Tuple[int, int]:
        """(columns, rows) for an image; at least one cell each way."""
        size = cls.cell_size(scale)
        return max(1, width // size), max(1, height // size)

    # -------------------------------------------------------------------------
    # Preprocessing
    # -------------------------------------------------------------------------

    @staticmethod
    def preprocess(rgba: np.ndarray, settings: StyleSettings) -> np.ndarray:
        """
        Prepare the RGB image for character mapping.

        Invert shape, box blur, posterization, highlight brightening of
        light areas and a threshold-centred brighten/darken, each stored
        back to bytes.

        Returns:
            ``(H, W, 3)`` uint8 array
        """
        rgb = apply_invert_shape(rgba[..., :3], settings.invert_shape)
        if settings.blur > 0:
            rgb = SpatialOps.box_blur(rgb, settings.blur)

        if settings.smoothness > 0:
            gray = SpatialOps.posterize(rgb_luminance(rgb), settings.smoothness)
            rgb = np.repeat(to_bytes(gray)[..., None], 3, axis=2)

        if settings.highlights != 0:
            factor = 1.0 + settings.highlights / 100.0
            light = rgb_luminance(rgb) > 128
            channels = rgb.astype(np.float64)
            channels[light] = np.minimum(255.0, channels[light] * factor)
            rgb = to_bytes(channels)

        if settings.luminance_threshold > 0:
            threshold = settings.luminance_threshold / 100.0
            level = rgb_luminance(rgb) / 255.0
            factor = np.where(level > threshold,
                              1.0 + (level - threshold) * 2.0,
                              level / threshold)
            rgb = to_bytes(np.minimum(255.0, rgb.astype(np.float64) * factor[..., None]))

        return rgb

    @staticmethod
    def remap(level: np.ndarray, contrast: float, midtones: float) -> np.ndarray:
        """Contrast (``1 + contrast/100``) and brightness (``midtones/50 - 1``) on 0-1 levels."""
        contrast_factor = 1.0 + contrast / 100.0
        brightness_offset = midtones / 50.0 - 1.0
        return np.clip((level - 0.5) * contrast_factor + 0.5 + brightness_offset, 0.0, 1.0)

    @staticmethod
    def cell_levels(rgb: np.ndarray, columns: int, rows: int, size: int) -> np.ndarray:
        """Mean level (0-1) of every cell, shape ``(rows, columns)``."""
        height, width = rgb.shape[:2]
        cell_w = min(size, width)
        cell_h = min(size, height)
        region = rgb[:rows * cell_h, :columns * cell_w]
        level = rgb_luminance(region) / 255.0
        return level.reshape(rows, cell_h, columns, cell_w).mean(axis=(1, 3))

    def char_for(self, level: float) -> str:
        """Character for a 0-1 level; the ramp runs dark to light."""
        last = len(self.charset) - 1
        idx = int(level * last)
        return self.charset[max(0, min(last, idx))]

    @staticmethod
    def colors(settings: StyleSettings):
        """Uniform character colour and the grid background, both RGBA."""
        ink = resolve_ink_rgb(settings.active_neon_color, settings.invert)
        background = (255, 255, 255, 255) if settings.invert else (0, 0, 0, 255)
        return (*ink, settings.ink_alpha), background

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def render(self, bitmap: Bitmap, settings: StyleSettings) -> AsciiGrid:
        """
        Convert a bitmap to an AsciiGrid.

        Raises:
            InvalidImageData: if the bitmap is missing or malformed
        """
        if bitmap is None:
            raise InvalidImageData("No image data for ASCII rendering")
        bitmap.validate()

        size = self.cell_size(settings.scale)
        columns, rows = self.grid_shape(bitmap.width, bitmap.height, settings.scale)
        logger.debug("ASCII grid %dx%d, cell %dpx", columns, rows, size)

        rgb = self.preprocess(bitmap.to_array(), settings)
        levels = self.cell_levels(rgb, columns, rows, size)
        levels = self.remap(levels, settings.contrast, settings.midtones)

        ink, background = self.colors(settings)
        grid_rows = [
            [AsciiCell(self.char_for(level), ink) for level in row]
            for row in levels.tolist()
        ]
        return AsciiGrid(rows=grid_rows, background=background, cell_size=size)
