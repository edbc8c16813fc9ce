"""
Neon Stylizer - Error Diffusion
===============================
Floyd-Steinberg and Atkinson dithering as one kernel-parameterised engine.
"""

import logging
import math
from typing import Tuple

import numpy as np

from neon_stylizer.color_math import (
    apply_contrast,
    apply_invert_shape,
    apply_tone_adjustments,
    resolve_ink_rgb,
    rgb_luminance,
)
from neon_stylizer.constants import KERNEL_WEIGHTS, NEAR_WHITE_CUTOFF, DiffusionKernel
from neon_stylizer.models import Bitmap, StyleSettings
from neon_stylizer.spatial import SpatialOps

logger = logging.getLogger(__name__)


def working_size(width: int, height: int, scale: float) -> Tuple[int, int]:
    """Processing resolution for ``scale``, never below 1x1."""
    return (max(1, int(math.floor(width * scale))),
            max(1, int(math.floor(height * scale))))


def downscale_source(rgba: np.ndarray, scale: float) -> np.ndarray:
    """Resample the source to the working resolution (smooth filter)."""
    height, width = rgba.shape[:2]
    if scale == 1:
        return rgba
    w, h = working_size(width, height, scale)
    if (w, h) == (width, height):
        return rgba
    return SpatialOps.resize_smooth(rgba, w, h)


def restore_size(rgba: np.ndarray, width: int, height: int) -> np.ndarray:
    """Stretch a working-resolution result back with crisp pixels."""
    if rgba.shape[:2] == (height, width):
        return rgba
    return SpatialOps.resize_nearest(rgba, width, height)


def luminance_field(rgba: np.ndarray, settings: StyleSettings) -> np.ndarray:
    """
    Build the processed luminance field used by the dithering and edge styles.

    Order: blur, invert shape (on RGB), luminance, contrast, tone curve
    (skipped when the luminance threshold is 0), invert.

    Returns:
        ``(H, W)`` float32 array, nominally in [0, 255]
    """
    rgb = rgba[..., :3]
    if settings.blur > 0:
        rgb = SpatialOps.box_blur(rgb, settings.blur)
    rgb = apply_invert_shape(rgb, settings.invert_shape)

    gray = rgb_luminance(rgb)
    gray = apply_contrast(gray, settings.contrast)
    if settings.luminance_threshold != 0:
        gray = apply_tone_adjustments(gray, settings.midtones, settings.highlights)
    if settings.invert:
        gray = 255.0 - gray
    return gray.astype(np.float32)


class ErrorDiffusionEngine:
    """Binarize a luminance field while pushing quantization error forward."""

    def __init__(self, kernel: DiffusionKernel = DiffusionKernel.FLOYD_STEINBERG):
        self.kernel = kernel

    @staticmethod
    def threshold_for(luminance_threshold: float) -> float:
        """Binarization level for a 0-100 slider value (0 uses the near-white cutoff)."""
        if luminance_threshold == 0:
            return NEAR_WHITE_CUTOFF
        return 255.0 - (luminance_threshold / 100.0) * 255.0

    def diffuse(self, field: np.ndarray, luminance_threshold: float,
                smoothness: float) -> np.ndarray:
        """
        Dither a luminance field.

        Pixels are visited in row-major order; each is classed as foreground
        (quantized to 0) or background (255) and its error, scaled by
        ``1 - smoothness/10``, is spread over unvisited neighbours.

        Args:
            field: ``(H, W)`` luminance values; not modified
            luminance_threshold: Slider value 0-100
            smoothness: 0 (full diffusion) to 10 (hard threshold)

        Returns:
            ``(H, W)`` bool array, True where the pixel is foreground
        """
        height, width = field.shape
        values = field.astype(np.float32).ravel().tolist()
        foreground = np.zeros(width * height, dtype=bool)

        error_factor = 1.0 - smoothness / 10.0
        near_white = luminance_threshold == 0
        threshold = self.threshold_for(luminance_threshold)
        taps = KERNEL_WEIGHTS[self.kernel]

        for y in range(height):
            row = y * width
            for x in range(width):
                idx = row + x
                old = values[idx]
                if near_white:
                    ink = not (old > threshold)
                else:
                    ink = old < threshold
                new = 0.0 if ink else 255.0
                if ink:
                    foreground[idx] = True

                error = (old - new) * error_factor
                if error == 0:
                    continue
                for dx, dy, weight in taps:
                    nx = x + dx
                    ny = y + dy
                    if 0 <= nx < width and ny < height:
                        values[ny * width + nx] += error * weight

        return foreground.reshape(height, width)

    def render(self, bitmap: Bitmap, settings: StyleSettings) -> Bitmap:
        """
        Dither ``bitmap`` and colour the result.

        Foreground pixels take the resolved ink colour and alpha; background
        pixels are transparent, or solid black when both invert and custom
        colours are on.
        """
        source = bitmap.to_array()
        working = downscale_source(source, settings.scale)
        height, width = working.shape[:2]
        logger.debug("%s dithering at %dx%d (scale %.2f)",
                     self.kernel.name, width, height, settings.scale)

        field = luminance_field(working, settings)
        foreground = self.diffuse(field, settings.luminance_threshold, settings.smoothness)

        ink = resolve_ink_rgb(settings.active_neon_color, settings.invert, nudge_white=True)
        alpha = settings.ink_alpha

        out = np.zeros((height, width, 4), dtype=np.uint8)
        out[foreground] = (*ink, alpha)
        if settings.invert and settings.use_custom_colors:
            out[~foreground] = (0, 0, 0, alpha)

        return Bitmap.from_array(restore_size(out, bitmap.width, bitmap.height))
