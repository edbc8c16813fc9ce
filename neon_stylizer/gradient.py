"""
Neon Stylizer - Gradient Bands
==============================
Horizontal bands where luminance crosses the threshold, each filled with a
linear colour ramp between white and the ink colour.
"""

import logging
from typing import List, Optional, Tuple

import numpy as np

from neon_stylizer.color_math import (
    apply_contrast,
    apply_invert_shape,
    apply_tone_adjustments,
    hsv_to_rgb,
    rgb_luminance,
    round_half_up,
)
from neon_stylizer.constants import (
    GRADIENT_CURVATURE_LIMIT,
    GRADIENT_MAX_ZOOM,
    GRADIENT_MIN_QUALITY,
    GRADIENT_MIN_ZOOM,
    GRADIENT_QUALITY_EXPONENT,
)
from neon_stylizer.models import Bitmap, StyleSettings
from neon_stylizer.spatial import SpatialOps

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]


def _scale_position(scale: float) -> float:
    """Map scale 0.1-1 onto 0-1."""
    return float(np.clip((scale - 0.1) / 0.9, 0.0, 1.0))


class GradientBandRenderer:
    """Banding, masking and run-wise colour interpolation."""

    # -------------------------------------------------------------------------
    # Parameters
    # -------------------------------------------------------------------------

    @staticmethod
    def zoom_for(scale: float) -> float:
        """8x zoom at scale 0.1 down to 1x at scale 1."""
        return GRADIENT_MIN_ZOOM + (GRADIENT_MAX_ZOOM - GRADIENT_MIN_ZOOM) * _scale_position(scale)

    @staticmethod
    def quality_for(scale: float, height: int) -> int:
        """Rows kept by the quality reduction pass; the full height near scale 1."""
        if scale >= 0.999:
            return height
        t = _scale_position(scale) ** GRADIENT_QUALITY_EXPONENT
        quality = int(round_half_up(GRADIENT_MIN_QUALITY + (height - GRADIENT_MIN_QUALITY) * t))
        return min(height, max(1, quality))

    @staticmethod
    def endpoints(settings: StyleSettings) -> Tuple[RGB, RGB]:
        """Ramp colours: white and black (or the custom colour), both inverted under invert."""
        start = (255, 255, 255)
        neon = settings.active_neon_color
        end = hsv_to_rgb(neon.h, neon.s, neon.v) if neon is not None else (0, 0, 0)
        if settings.invert:
            start = tuple(255 - c for c in start)
            end = tuple(255 - c for c in end)
        return start, end

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    @classmethod
    def prepare_field(cls, rgba: np.ndarray, settings: StyleSettings) -> np.ndarray:
        """
        Zoom, reduce quality, invert shape, then luminance, contrast, tone
        curve and posterization.

        Returns:
            ``(H, W)`` float32 field
        """
        height = rgba.shape[0]
        zoomed = SpatialOps.zoom_crop(rgba, cls.zoom_for(settings.scale))
        degraded = SpatialOps.reduce_rows(zoomed, cls.quality_for(settings.scale, height))
        rgb = apply_invert_shape(degraded[..., :3], settings.invert_shape)

        gray = rgb_luminance(rgb)
        gray = apply_contrast(gray, settings.contrast)
        gray = apply_tone_adjustments(gray, settings.midtones, settings.highlights)
        gray = SpatialOps.posterize(gray, settings.smoothness)
        return gray.astype(np.float32)

    @staticmethod
    def band_mask(processed: np.ndarray, threshold: float) -> Tuple[np.ndarray, Optional[int]]:
        """
        Binary mask of pixels darker than ``threshold``.

        Returns:
            (mask, forced_row). When the mask would be uniformly 0 or 1 the
            centre row is forced to 1 and its index returned; otherwise None.
        """
        mask = processed.astype(np.float64) < threshold
        if mask.all() or not mask.any():
            forced_row = processed.shape[0] // 2
            mask[forced_row, :] = True
            return mask, forced_row
        return mask, None

    @staticmethod
    def row_has_detail(row: np.ndarray) -> bool:
        """True when some three-pixel second difference exceeds the curvature limit."""
        if row.size < 3:
            return False
        values = row.astype(np.float64)
        curvature = np.abs(values[2:] - 2.0 * values[1:-1] + values[:-2])
        return bool((curvature > GRADIENT_CURVATURE_LIMIT).any())

    @staticmethod
    def count_transitions(mask_row: np.ndarray) -> int:
        return int(np.count_nonzero(mask_row[1:] != mask_row[:-1]))

    @staticmethod
    def runs(mask_row: np.ndarray) -> List[Tuple[int, int, bool]]:
        """Split a row into ``(start, end, inside)`` runs, end exclusive."""
        breaks = np.flatnonzero(mask_row[1:] != mask_row[:-1]) + 1
        starts = np.concatenate(([0], breaks))
        ends = np.concatenate((breaks, [mask_row.size]))
        return [(int(s), int(e), bool(mask_row[s])) for s, e in zip(starts, ends)]

    @staticmethod
    def ramp(start: RGB, end: RGB, length: int) -> np.ndarray:
        """``length`` colours interpolated linearly from ``start`` to ``end``."""
        if length > 1:
            t = np.arange(length, dtype=np.float64) / (length - 1)
        else:
            t = np.zeros(length, dtype=np.float64)
        a = np.asarray(start, dtype=np.float64)
        b = np.asarray(end, dtype=np.float64)
        colors = a[None, :] * (1.0 - t[:, None]) + b[None, :] * t[:, None]
        return np.clip(round_half_up(colors), 0, 255).astype(np.uint8)

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    @classmethod
    def render(cls, bitmap: Bitmap, settings: StyleSettings) -> Bitmap:
        """
        Render gradient bands.

        Rows without horizontal detail (no curvature above the limit, or at
        most one threshold crossing) stay transparent. The forced centre band
        of a uniform image is always drawn.
        """
        width, height = bitmap.width, bitmap.height
        processed = cls.prepare_field(bitmap.to_array(), settings)
        threshold = settings.luminance_threshold / 100.0 * 255.0
        mask, forced_row = cls.band_mask(processed, threshold)

        color_a, color_b = cls.endpoints(settings)
        alpha = settings.ink_alpha
        out = np.zeros((height, width, 4), dtype=np.uint8)

        drawn = 0
        for y in range(height):
            if y != forced_row:
                if not cls.row_has_detail(processed[y]) or cls.count_transitions(mask[y]) <= 1:
                    continue
            for start, end, inside in cls.runs(mask[y]):
                if inside:
                    colors = cls.ramp(color_a, color_b, end - start)
                else:
                    colors = cls.ramp(color_b, color_a, end - start)
                out[y, start:end, :3] = colors
                out[y, start:end, 3] = alpha
            drawn += 1

        logger.debug("Gradient %dx%d: %d banded rows (forced row %s)",
                     width, height, drawn, forced_row)
        return Bitmap.from_array(out)
