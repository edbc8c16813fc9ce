"""
Neon Stylizer - Colour Math
===========================
Pure colour and tone functions shared by every renderer.

Scalar inputs return Python numbers; numpy arrays are processed elementwise.
"""

import math
from typing import Optional, Tuple, Union

import numpy as np

from neon_stylizer.models import Bitmap, NeonColor


Number = Union[float, np.ndarray]

# ITU-R BT.601 luma weights
BT601_LUMINANCE_WEIGHTS = (0.299, 0.587, 0.114)

WHITE = (255, 255, 255)
BLACK = (0, 0, 0)


def _unwrap(result: np.ndarray, like) -> Number:
    return float(result) if np.ndim(like) == 0 else result


def round_half_up(value: Number) -> Number:
    """Round .5 towards positive infinity."""
    result = np.floor(np.asarray(value, dtype=np.float64) + 0.5)
    return _unwrap(result, value)


def to_bytes(values: np.ndarray) -> np.ndarray:
    """Store floats into a byte buffer: round half to even, then clamp."""
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


# =============================================================================
# COLOUR SPACE CONVERSION
# =============================================================================

def hsv_to_rgb(h: float, s: float, v: float) -> Tuple[int, int, int]:
    """
    Convert HSV to RGB.

    Args:
        h: Hue in degrees [0, 360)
        s: Saturation [0, 100]
        v: Value [0, 100]

    Returns:
        (r, g, b) rounded to integers in [0, 255]
    """
    s /= 100.0
    v /= 100.0
    i = math.floor(h / 60.0)
    f = h / 60.0 - i
    p = v * (1 - s)
    q = v * (1 - f * s)
    t = v * (1 - (1 - f) * s)

    sector = i % 6
    if sector == 0:
        r, g, b = v, t, p
    elif sector == 1:
        r, g, b = q, v, p
    elif sector == 2:
        r, g, b = p, v, t
    elif sector == 3:
        r, g, b = p, q, v
    elif sector == 4:
        r, g, b = t, p, v
    else:
        r, g, b = v, p, q

    return tuple(int(math.floor(c * 255 + 0.5)) for c in (r, g, b))


def rgb_to_hsv(r: float, g: float, b: float) -> Tuple[float, float, float]:
    """Convert RGB [0, 255] to HSV with h in [0, 360), s and v in [0, 100]."""
    r /= 255.0
    g /= 255.0
    b /= 255.0

    max_c = max(r, g, b)
    min_c = min(r, g, b)
    diff = max_c - min_c
    s = 0.0 if max_c == 0 else diff / max_c

    if diff == 0:
        h = 0.0  # achromatic
    elif max_c == r:
        h = (g - b) / diff + (6 if g < b else 0)
    elif max_c == g:
        h = (b - r) / diff + 2
    else:
        h = (r - g) / diff + 4

    return (h / 6 * 360, s * 100, max_c * 100)


def luminance(r: Number, g: Number, b: Number) -> Number:
    """Perceptual luminance with BT.601 weights."""
    wr, wg, wb = BT601_LUMINANCE_WEIGHTS
    return wr * r + wg * g + wb * b


def rgb_luminance(rgb: np.ndarray) -> np.ndarray:
    """Luminance of an ``(..., 3+)`` array, as float64."""
    rgb = np.asarray(rgb, dtype=np.float64)
    return luminance(rgb[..., 0], rgb[..., 1], rgb[..., 2])


# =============================================================================
# TONE CURVES
# =============================================================================

def apply_contrast(value: Number, contrast: float) -> Number:
    """
    Stretch luminance around mid-grey.

    ``contrast`` is in [-100, 100]; the factor stays finite over that range.
    """
    factor = (259.0 * (contrast + 255.0)) / (255.0 * (259.0 - contrast))
    result = np.clip(factor * (np.asarray(value, dtype=np.float64) - 128.0) + 128.0, 0.0, 255.0)
    return _unwrap(result, value)


def apply_tone_adjustments(value: Number, midtones: float, highlights: float) -> Number:
    """
    Apply the midtone power curve and highlight scaling.

    The curve is symmetric around 0.5 with exponent ``2 - midtones/50``;
    highlights blend the result towards white.
    """
    normalized = np.clip(np.asarray(value, dtype=np.float64) / 255.0, 0.0, 1.0)
    exponent = 2.0 - midtones / 50.0

    low = np.power(normalized * 2.0, exponent) / 2.0
    high = 1.0 - np.power((1.0 - normalized) * 2.0, exponent) / 2.0
    adjusted = np.where(normalized < 0.5, low, high)

    highlights_factor = highlights / 100.0
    adjusted = adjusted * highlights_factor + (1.0 - highlights_factor)

    result = np.clip(adjusted * 255.0, 0.0, 255.0)
    return _unwrap(result, value)


def apply_invert_shape(rgb: np.ndarray, invert_shape: float) -> np.ndarray:
    """
    Blend each RGB channel towards its negative.

    ``invert_shape`` 0 leaves the image untouched, 100 is a full negative.
    Returns a new uint8 array.
    """
    if invert_shape <= 0:
        return rgb.copy()
    amount = invert_shape / 100.0
    channels = rgb.astype(np.float64)
    return to_bytes(channels + (255.0 - 2.0 * channels) * amount)


# =============================================================================
# ALPHA AND INK COLOUR
# =============================================================================

def apply_opacity(bitmap: Bitmap, alpha: Optional[float]) -> Bitmap:
    """
    Scale the alpha channel of every pixel by ``alpha``.

    Returns ``bitmap`` itself when ``alpha`` is None or at least 1; RGB is
    never touched.
    """
    if alpha is None or alpha >= 1:
        return bitmap
    arr = bitmap.to_array().copy()
    scaled = np.floor(arr[..., 3].astype(np.float64) * alpha + 0.5)
    arr[..., 3] = np.clip(scaled, 0, 255).astype(np.uint8)
    return Bitmap.from_array(arr)


def resolve_ink_rgb(neon: Optional[NeonColor], invert: bool,
                    nudge_white: bool = False) -> Tuple[int, int, int]:
    """
    Resolve the colour drawn for foreground pixels.

    Args:
        neon: Custom colour, or None for plain white ink
        invert: Swap to the negative colour
        nudge_white: Store pure white custom ink as (255, 255, 254)

    Returns:
        (r, g, b). Under ``invert`` white ink (nudged or not) becomes pure
        black; any other colour is channel-inverted.
    """
    rgb = hsv_to_rgb(neon.h, neon.s, neon.v) if neon is not None else WHITE
    is_white = rgb == WHITE
    if nudge_white and neon is not None and is_white:
        rgb = (255, 255, 254)
    if invert:
        if is_white:
            return BLACK
        return tuple(255 - c for c in rgb)
    return rgb
