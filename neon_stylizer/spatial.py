"""
Neon Stylizer - Spatial Operations
==================================
Neighbourhood filters and resampling on ``(height, width, channels)`` arrays.
"""

import math
from typing import Tuple

import numpy as np
from PIL import Image
from scipy import ndimage

from neon_stylizer.color_math import round_half_up, to_bytes


class SpatialOps:
    """Blur, gradient, posterization and resize helpers."""

    # -------------------------------------------------------------------------
    # Filters
    # -------------------------------------------------------------------------

    @staticmethod
    def _box_sum(values: np.ndarray, radius: int, axis: int) -> Tuple[np.ndarray, np.ndarray]:
        """Window sums along ``axis`` and the number of in-bounds samples."""
        weights = np.ones(2 * radius + 1, dtype=np.float64)
        sums = ndimage.correlate1d(values, weights, axis=axis, mode='constant', cval=0.0)

        n = values.shape[axis]
        idx = np.arange(n)
        counts = np.minimum(idx + radius, n - 1) - np.maximum(idx - radius, 0) + 1
        shape = [1] * values.ndim
        shape[axis] = n
        return sums, counts.reshape(shape).astype(np.float64)

    @classmethod
    def box_blur(cls, image: np.ndarray, radius: float) -> np.ndarray:
        """
        Separable box blur of the RGB channels.

        Args:
            image: ``(H, W, 3)`` or ``(H, W, 4)`` uint8 array
            radius: Blur radius; rounded up to a whole pixel count

        Returns:
            New uint8 array; alpha, if present, is copied unchanged. Samples
            outside the image are ignored, so borders average fewer pixels.
        """
        radius = int(math.ceil(radius))
        result = image.copy()
        if radius <= 0:
            return result

        rgb = image[..., :3].astype(np.float64)
        sums, counts = cls._box_sum(rgb, radius, axis=1)
        horizontal = to_bytes(sums / counts).astype(np.float64)
        sums, counts = cls._box_sum(horizontal, radius, axis=0)
        result[..., :3] = to_bytes(sums / counts)
        return result

    @staticmethod
    def edge_gradient(field: np.ndarray) -> np.ndarray:
        """
        Forward-difference gradient magnitude.

        ``gx = v(x, y) - v(x+1, y)`` and ``gy = v(x, y) - v(x, y+1)``. Border
        pixels get a magnitude of 0.
        """
        values = field.astype(np.float64)
        height, width = values.shape
        magnitude = np.zeros((height, width), dtype=np.float64)
        if width < 3 or height < 3:
            return magnitude

        centre = values[1:-1, 1:-1]
        gx = centre - values[1:-1, 2:]
        gy = centre - values[2:, 1:-1]
        magnitude[1:-1, 1:-1] = np.sqrt(gx * gx + gy * gy)
        return magnitude

    @staticmethod
    def posterize_levels(smoothness: float) -> int:
        return max(2, int(round_half_up(20 - (smoothness / 10) * 18)))

    @classmethod
    def posterize(cls, values: np.ndarray, smoothness: float) -> np.ndarray:
        """Quantize luminance to evenly spaced levels; no-op when smoothness is 0."""
        if smoothness <= 0:
            return values
        steps = cls.posterize_levels(smoothness) - 1
        return round_half_up(values / 255.0 * steps) / steps * 255.0

    # -------------------------------------------------------------------------
    # Resampling
    # -------------------------------------------------------------------------

    @staticmethod
    def resize_smooth(image: np.ndarray, width: int, height: int) -> np.ndarray:
        """Bilinear resize of an RGBA array (alpha-weighted, as Pillow does)."""
        src = Image.fromarray(np.ascontiguousarray(image))
        return np.array(src.resize((width, height), Image.Resampling.BILINEAR), dtype=np.uint8)

    @staticmethod
    def resize_nearest(image: np.ndarray, width: int, height: int) -> np.ndarray:
        """Nearest-neighbour resize sampling source pixel centres."""
        src_h, src_w = image.shape[:2]
        ys = np.minimum(((np.arange(height) + 0.5) * src_h / height).astype(np.int64), src_h - 1)
        xs = np.minimum(((np.arange(width) + 0.5) * src_w / width).astype(np.int64), src_w - 1)
        return image[ys[:, None], xs[None, :]].copy()

    @staticmethod
    def zoom_crop(image: np.ndarray, zoom: float) -> np.ndarray:
        """
        Crop the centred ``1/zoom`` region and stretch it back to full size.
        """
        height, width = image.shape[:2]
        crop_w = min(width, max(1, int(round_half_up(width / zoom))))
        crop_h = min(height, max(1, int(round_half_up(height / zoom))))
        crop_x = (width - crop_w) // 2
        crop_y = (height - crop_h) // 2

        xs = crop_x + (np.arange(width) * crop_w) // width
        ys = crop_y + (np.arange(height) * crop_h) // height
        return image[ys[:, None], xs[None, :]].copy()

    @staticmethod
    def reduce_rows(image: np.ndarray, rows: int) -> np.ndarray:
        """
        Average the image down to ``rows`` rows, then stretch back up.

        Produces vertically blocky data; alpha is set opaque. A no-op copy
        when ``rows`` equals the image height.
        """
        height = image.shape[0]
        if rows >= height:
            return image.copy()

        rgb = image[..., :3].astype(np.float64)
        reduced = np.empty((rows,) + rgb.shape[1:], dtype=np.float64)
        for row in range(rows):
            start = (row * height) // rows
            end = max(((row + 1) * height) // rows, start + 1)
            reduced[row] = rgb[start:end].mean(axis=0)
        reduced = np.clip(round_half_up(reduced), 0, 255).astype(np.uint8)

        src_rows = (np.arange(height) * rows) // height
        result = np.empty_like(image)
        result[..., :3] = reduced[src_rows]
        if image.shape[-1] == 4:
            result[..., 3] = 255
        return result
