"""
Neon Stylizer - Data Model
==========================
Bitmaps, style settings and the ASCII grid exchanged with the host application.
"""

import dataclasses
import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

import numpy as np
from PIL import Image

from neon_stylizer.constants import (
    ASCII_LINE_HEIGHT,
    DEFAULT_NEON_HSV,
    STYLE_DEFAULTS,
    Style,
)
from neon_stylizer.errors import InvalidImageData, InvalidSettings


RGBA = Tuple[int, int, int, int]


# =============================================================================
# BITMAP
# =============================================================================

class Bitmap:
    """
    An RGBA image: ``width * height * 4`` bytes, row-major, channels interleaved.

    Renderers treat a Bitmap as read-only and always return a new one.
    """

    __slots__ = ('width', 'height', 'pixels')

    def __init__(self, width: int, height: int,
                 pixels: Union[np.ndarray, bytes, bytearray, memoryview, None]):
        self.width = width
        self.height = height
        self.pixels = self._coerce(pixels)

    @staticmethod
    def _coerce(pixels) -> Optional[np.ndarray]:
        if pixels is None:
            return None
        if isinstance(pixels, (bytes, bytearray, memoryview)):
            return np.frombuffer(bytes(pixels), dtype=np.uint8).copy()
        try:
            return np.asarray(pixels, dtype=np.uint8).reshape(-1)
        except (TypeError, ValueError) as exc:
            raise InvalidImageData(f"Pixel buffer is not byte data: {exc}") from exc

    def validate(self) -> None:
        """Raise InvalidImageData unless the buffer matches the dimensions."""
        if not isinstance(self.width, (int, np.integer)) or not isinstance(self.height, (int, np.integer)):
            raise InvalidImageData("Bitmap width and height must be integers")
        if self.width <= 0 or self.height <= 0:
            raise InvalidImageData(f"Bitmap dimensions must be positive, got {self.width}x{self.height}")
        if self.pixels is None:
            raise InvalidImageData("Bitmap has no pixel buffer")
        expected = int(self.width) * int(self.height) * 4
        if self.pixels.size != expected:
            raise InvalidImageData(
                f"Pixel buffer holds {self.pixels.size} bytes, expected {expected} "
                f"for {self.width}x{self.height} RGBA"
            )

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def to_array(self) -> np.ndarray:
        """Return a ``(height, width, 4)`` uint8 view of the buffer."""
        return self.pixels.reshape(self.height, self.width, 4)

    def to_image(self) -> Image.Image:
        """Convert to a PIL RGBA image."""
        return Image.fromarray(np.ascontiguousarray(self.to_array()))

    def copy(self) -> 'Bitmap':
        return Bitmap(self.width, self.height, self.pixels.copy())

    @classmethod
    def from_array(cls, arr: np.ndarray) -> 'Bitmap':
        """Build a Bitmap from a ``(height, width, 4)`` array."""
        arr = np.asarray(arr)
        if arr.ndim != 3 or arr.shape[2] != 4:
            raise InvalidImageData(f"Expected an (H, W, 4) array, got shape {arr.shape}")
        arr = np.clip(arr, 0, 255).astype(np.uint8)
        return cls(arr.shape[1], arr.shape[0], arr.reshape(-1).copy())

    @classmethod
    def from_image(cls, image: Image.Image) -> 'Bitmap':
        """Decode a PIL image (any mode) into an RGBA Bitmap."""
        rgba = image.convert('RGBA')
        return cls.from_array(np.array(rgba, dtype=np.uint8))

    @classmethod
    def filled(cls, width: int, height: int, color: RGBA) -> 'Bitmap':
        """A bitmap where every pixel has the same colour."""
        arr = np.empty((height, width, 4), dtype=np.uint8)
        arr[:, :] = color
        return cls.from_array(arr)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Bitmap):
            return NotImplemented
        return (self.width == other.width and self.height == other.height
                and np.array_equal(self.pixels, other.pixels))

    def __repr__(self) -> str:
        return f"Bitmap({self.width}x{self.height})"


# =============================================================================
# SETTINGS
# =============================================================================

@dataclass
class NeonColor:
    """Custom foreground colour: HSV plus an independent alpha."""
    h: float = DEFAULT_NEON_HSV[0]       # degrees, 0-360
    s: float = DEFAULT_NEON_HSV[1]       # 0-100
    v: float = DEFAULT_NEON_HSV[2]       # 0-100
    a: float = 1.0                       # 0-1

    @property
    def alpha_byte(self) -> int:
        return int(math.floor(self.a * 255 + 0.5))


def _check_range(name: str, value: float, low: float, high: float) -> None:
    if not isinstance(value, (int, float, np.integer, np.floating)) or isinstance(value, bool):
        raise InvalidSettings(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value) or value < low or value > high:
        raise InvalidSettings(f"{name} must be within [{low}, {high}], got {value}")


@dataclass
class StyleSettings:
    """Parameters driving a single transformation pass."""

    style: Style = Style.FLOYD_STEINBERG

    # Resolution / density
    scale: float = 1.0                   # 0.1-1.0, lower = coarser

    # Tone
    smoothness: float = 5.0              # 0-10
    contrast: float = 0.0                # -100-100
    midtones: float = 65.0               # 0-100
    highlights: float = 100.0            # 0-100
    luminance_threshold: float = 50.0    # 0-100, 0 = near-white cutoff
    blur: float = 0.0                    # 0-10, box blur radius

    # Inversion
    invert: bool = False
    invert_shape: float = 0.0            # 0-100, partial negative of the source

    # Colour
    use_custom_colors: bool = False
    neon_color: Optional[NeonColor] = field(default_factory=NeonColor)

    # Stippling background mode
    is_exporting: bool = False

    def __post_init__(self):
        if not isinstance(self.style, Style):
            self.style = Style.from_name(self.style)
        if isinstance(self.neon_color, dict):
            self.neon_color = NeonColor(**self.neon_color)

    def validate(self) -> None:
        """Raise InvalidSettings for out-of-range or contradictory values."""
        if not isinstance(self.style, Style):
            raise InvalidSettings(f"Unknown style: {self.style!r}")
        if not isinstance(self.scale, (int, float, np.integer, np.floating)) \
                or not math.isfinite(self.scale) or self.scale <= 0:
            raise InvalidSettings(f"scale must be a positive number, got {self.scale!r}")
        _check_range('smoothness', self.smoothness, 0, 10)
        _check_range('contrast', self.contrast, -100, 100)
        _check_range('midtones', self.midtones, 0, 100)
        _check_range('highlights', self.highlights, 0, 100)
        _check_range('luminance_threshold', self.luminance_threshold, 0, 100)
        _check_range('blur', self.blur, 0, 10)
        _check_range('invert_shape', self.invert_shape, 0, 100)
        if self.neon_color is not None:
            _check_range('neon_color.h', self.neon_color.h, 0, 360)
            _check_range('neon_color.s', self.neon_color.s, 0, 100)
            _check_range('neon_color.v', self.neon_color.v, 0, 100)
            _check_range('neon_color.a', self.neon_color.a, 0, 1)

    def replace(self, **changes) -> 'StyleSettings':
        """Return a copy with some fields changed."""
        return dataclasses.replace(self, **changes)

    def switch_style(self, style: Union[Style, str]) -> 'StyleSettings':
        """
        Return settings for another style.

        Numeric fields are reset to that style's defaults; invert, colour and
        export flags are kept.
        """
        style = Style.from_name(style)
        return dataclasses.replace(self, style=style, **STYLE_DEFAULTS[style])

    @property
    def active_neon_color(self) -> Optional[NeonColor]:
        """The custom colour in effect, or None when custom colours are off."""
        if not self.use_custom_colors:
            return None
        return self.neon_color if self.neon_color is not None else NeonColor()

    @property
    def ink_alpha(self) -> int:
        """Alpha byte of drawn pixels."""
        if self.use_custom_colors and self.neon_color is not None:
            return self.neon_color.alpha_byte
        return 255


# =============================================================================
# ASCII GRID
# =============================================================================

@dataclass(frozen=True)
class AsciiCell:
    """One character of an ASCII rendering and its RGBA colour."""
    char: str
    color: RGBA


@dataclass
class AsciiGrid:
    """Rectangular grid of character cells produced by the ASCII renderer."""
    rows: List[List[AsciiCell]]
    background: RGBA = (0, 0, 0, 255)
    cell_size: int = 20                  # source pixels per cell edge

    def __post_init__(self):
        widths = {len(row) for row in self.rows}
        if len(widths) > 1:
            raise ValueError(f"AsciiGrid rows must have equal length, got {sorted(widths)}")

    @property
    def columns(self) -> int:
        return len(self.rows[0]) if self.rows else 0

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def lines(self) -> List[str]:
        return [''.join(cell.char for cell in row) for row in self.rows]

    def to_text(self) -> str:
        return '\n'.join(self.lines)


@dataclass
class FontMetrics:
    """Monospace font metrics used to draw an AsciiGrid."""
    cell_width: int = 10
    cell_height: int = 10
    line_height: float = ASCII_LINE_HEIGHT

    @classmethod
    def for_cell_size(cls, size: int) -> 'FontMetrics':
        return cls(cell_width=size, cell_height=size)
