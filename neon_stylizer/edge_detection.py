#!/usr/bin/env python3
"""
Neon Stylizer - Edge Line Art
=============================
The "Smooth Diffuse" style: only luminance discontinuities are drawn.
"""

import logging

import numpy as np

from neon_stylizer.color_math import resolve_ink_rgb
from neon_stylizer.error_diffusion import (
    downscale_source,
    luminance_field,
    restore_size,
)
from neon_stylizer.models import Bitmap, StyleSettings
from neon_stylizer.spatial import SpatialOps

logger = logging.getLogger(__name__)


class EdgeLineRenderer:
    """Render edge pixels in the ink colour on a transparent field."""

    @staticmethod
    def edge_threshold(smoothness: float) -> float:
        """Gradient magnitude an edge must exceed; 20 at smoothness 0, 100 at 10."""
        return 20.0 + smoothness * 8.0

    @classmethod
    def detect(cls, field: np.ndarray, smoothness: float) -> np.ndarray:
        """
        Find edge pixels in a luminance field.

        Args:
            field: ``(H, W)`` luminance values
            smoothness: Edge sensitivity, 0-10

        Returns:
            ``(H, W)`` bool mask; the outermost rows and columns are always False
        """
        magnitude = SpatialOps.edge_gradient(field)
        return magnitude > cls.edge_threshold(smoothness)

    @staticmethod
    def background_rgb(settings: StyleSettings):
        if settings.invert and not settings.use_custom_colors:
            return (255, 255, 255)
        return (0, 0, 0)

    @classmethod
    def render(cls, bitmap: Bitmap, settings: StyleSettings) -> Bitmap:
        """
        Draw the edges of ``bitmap``.

        Args:
            bitmap: Source image
            settings: Style settings (smoothness sets edge sensitivity)

        Returns:
            Bitmap of the original size; non-edge pixels are always transparent
        """
        source = bitmap.to_array()
        working = downscale_source(source, settings.scale)
        height, width = working.shape[:2]

        field = luminance_field(working, settings)
        edges = cls.detect(field, settings.smoothness)
        logger.debug("Edge pass at %dx%d: %d edge pixels (threshold %.1f)",
                     width, height, int(edges.sum()), cls.edge_threshold(settings.smoothness))

        ink = resolve_ink_rgb(settings.active_neon_color, settings.invert)
        alpha = settings.ink_alpha

        out = np.zeros((height, width, 4), dtype=np.uint8)
        out[~edges] = (*cls.background_rgb(settings), 0)
        out[edges] = (*ink, alpha)

        return Bitmap.from_array(restore_size(out, bitmap.width, bitmap.height))
