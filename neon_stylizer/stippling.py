"""
Neon Stylizer - Stippling
=========================
Halftone-like texture: vertical guide lines plus dots sized by darkness.
"""

import logging
import math
from typing import Dict, Tuple

import numpy as np

from neon_stylizer.color_math import (
    apply_contrast,
    apply_invert_shape,
    apply_tone_adjustments,
    resolve_ink_rgb,
    rgb_luminance,
    round_half_up,
)
from neon_stylizer.constants import (
    STIPPLE_MAX_LINES,
    STIPPLE_MAX_RADIUS,
    STIPPLE_MIN_LINES,
    STIPPLE_MIN_RADIUS,
    STIPPLE_MIN_SCALE,
)
from neon_stylizer.models import Bitmap, StyleSettings
from neon_stylizer.spatial import SpatialOps

logger = logging.getLogger(__name__)


class StipplingRenderer:
    """
    Draw a stipple pattern over a solid or transparent background.

    Each instance keeps a small cache of rasterised disc offsets, so one
    renderer can be reused across calls without sharing state between
    independent renderers.
    """

    CACHE_LIMIT = 256

    def __init__(self):
        self._disc_cache: Dict[float, Tuple[np.ndarray, np.ndarray]] = {}

    # -------------------------------------------------------------------------
    # Parameters
    # -------------------------------------------------------------------------

    @staticmethod
    def effective_scale(scale: float) -> float:
        """Scale floored at 0.1 so dot sizes stay bounded."""
        return max(scale, STIPPLE_MIN_SCALE)

    @classmethod
    def grid_density(cls, scale: float) -> Tuple[int, int]:
        """Number of (lines, dots per line); 21 at scale 0.1 or below, 120 at scale 1."""
        scale = cls.effective_scale(scale)
        span = STIPPLE_MAX_LINES - STIPPLE_MIN_LINES
        count = int(round_half_up(STIPPLE_MIN_LINES + span * scale))
        return count, count

    @classmethod
    def radius_bounds(cls, scale: float) -> Tuple[float, float]:
        """Smallest and largest dot radius; both grow as scale shrinks to 0.1."""
        factor = 1.0 / cls.effective_scale(scale)
        return STIPPLE_MIN_RADIUS * factor, STIPPLE_MAX_RADIUS * factor

    @staticmethod
    def prepare_field(rgba: np.ndarray, settings: StyleSettings) -> np.ndarray:
        """Blur, invert shape, luminance, contrast, tone curve, posterize."""
        rgb = rgba[..., :3]
        if settings.blur > 0:
            rgb = SpatialOps.box_blur(rgb, settings.blur)
        rgb = apply_invert_shape(rgb, settings.invert_shape)

        gray = rgb_luminance(rgb)
        gray = apply_contrast(gray, settings.contrast)
        gray = apply_tone_adjustments(gray, settings.midtones, settings.highlights)
        gray = SpatialOps.posterize(gray, settings.smoothness)
        return gray.astype(np.float32)

    @staticmethod
    def colors(settings: StyleSettings) -> Tuple[Tuple[int, int, int], Tuple[int, int, int, int]]:
        """Ink RGB and background RGBA for the current invert/export mode."""
        ink = resolve_ink_rgb(settings.active_neon_color, settings.invert)
        background_alpha = 0 if settings.is_exporting else 255
        if settings.invert:
            return ink, (255, 255, 255, background_alpha)
        return ink, (0, 0, 0, background_alpha)

    def _disc(self, radius: float) -> Tuple[np.ndarray, np.ndarray]:
        """Offsets ``(dy, dx)`` with ``dx*dx + dy*dy <= radius*radius``."""
        offsets = self._disc_cache.get(radius)
        if offsets is not None:
            return offsets

        reach = int(math.ceil(radius))
        dy, dx = np.mgrid[-reach:reach + 1, -reach:reach + 1]
        inside = dx * dx + dy * dy <= radius * radius
        offsets = (dy[inside], dx[inside])

        if len(self._disc_cache) >= self.CACHE_LIMIT:
            self._disc_cache.clear()
        self._disc_cache[radius] = offsets
        return offsets

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def render(self, bitmap: Bitmap, settings: StyleSettings) -> Bitmap:
        """
        Render the stipple pattern at the bitmap's own resolution.

        Args:
            bitmap: Source image
            settings: Style settings; ``scale`` sets density and dot size,
                ``is_exporting`` makes the background transparent

        Returns:
            Bitmap of the same size
        """
        width, height = bitmap.width, bitmap.height
        field = self.prepare_field(bitmap.to_array(), settings)

        lines, dots = self.grid_density(settings.scale)
        min_radius, max_radius = self.radius_bounds(settings.scale)
        ink, background = self.colors(settings)
        ink_rgba = (*ink, settings.ink_alpha)
        threshold = settings.luminance_threshold / 100.0 * 255.0
        logger.debug("Stippling %dx%d: %d lines x %d dots, radius %.2f-%.2f",
                     width, height, lines, dots, min_radius, max_radius)

        out = np.empty((height, width, 4), dtype=np.uint8)
        out[:, :] = background

        columns = ((np.arange(lines) + 0.5) * width / lines).astype(np.int64)
        rows = ((np.arange(dots) + 0.5) * height / dots).astype(np.int64)

        out[:, columns] = ink_rgba

        for x in columns:
            for y in rows:
                gray = float(field[y, x])
                if gray <= threshold:
                    continue
                darkness = 1.0 - gray / 255.0
                radius = min_radius + (max_radius - min_radius) * darkness
                dys, dxs = self._disc(radius)
                ys = y + dys
                xs = x + dxs
                keep = (ys >= 0) & (ys < height) & (xs >= 0) & (xs < width)
                out[ys[keep], xs[keep]] = ink_rgba

        return Bitmap.from_array(out)
