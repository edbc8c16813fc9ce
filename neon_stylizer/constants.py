"""
Neon Stylizer - Constants
=========================
Enums, character sets, diffusion kernels and the per-style default table.
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Dict, Tuple


# =============================================================================
# ENUMS
# =============================================================================

class Style(Enum):
    """Stylization algorithm applied by the pipeline."""
    FLOYD_STEINBERG = auto()
    ATKINSON = auto()
    SMOOTH_DIFFUSE = auto()    # Edge line art
    STIPPLING = auto()
    GRADIENT = auto()
    ASCII = auto()

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @classmethod
    def from_name(cls, name: str) -> "Style":
        """
        Resolve a style from a display name ("Floyd-Steinberg") or an
        identifier ("floyd_steinberg", "smooth-diffuse").
        """
        from neon_stylizer.errors import InvalidSettings

        if isinstance(name, cls):
            return name
        if not isinstance(name, str):
            raise InvalidSettings(f"Unknown style: {name!r}")
        key = name.strip().lower().replace('-', '_').replace(' ', '_')
        try:
            return _STYLE_ALIASES[key]
        except KeyError:
            raise InvalidSettings(f"Unknown style: {name!r}") from None


_DISPLAY_NAMES = {
    Style.FLOYD_STEINBERG: 'Floyd-Steinberg',
    Style.ATKINSON: 'Atkinson',
    Style.SMOOTH_DIFFUSE: 'Smooth Diffuse',
    Style.STIPPLING: 'Stippling',
    Style.GRADIENT: 'Gradient',
    Style.ASCII: 'ASCII',
}

_STYLE_ALIASES = {
    'floyd_steinberg': Style.FLOYD_STEINBERG,
    'floydsteinberg': Style.FLOYD_STEINBERG,
    'atkinson': Style.ATKINSON,
    'smooth_diffuse': Style.SMOOTH_DIFFUSE,
    'smoothdiffuse': Style.SMOOTH_DIFFUSE,
    'stippling': Style.STIPPLING,
    'gradient': Style.GRADIENT,
    'ascii': Style.ASCII,
}


class DiffusionKernel(Enum):
    """Error diffusion kernel."""
    FLOYD_STEINBERG = auto()
    ATKINSON = auto()


# (dx, dy, weight) triples. Atkinson sums to 6/8.
KERNEL_WEIGHTS: Dict[DiffusionKernel, Tuple[Tuple[int, int, float], ...]] = {
    DiffusionKernel.FLOYD_STEINBERG: (
        (1, 0, 7 / 16),
        (-1, 1, 3 / 16),
        (0, 1, 5 / 16),
        (1, 1, 1 / 16),
    ),
    DiffusionKernel.ATKINSON: (
        (1, 0, 1 / 8),
        (2, 0, 1 / 8),
        (-1, 1, 1 / 8),
        (0, 1, 1 / 8),
        (1, 1, 1 / 8),
        (0, 2, 1 / 8),
    ),
}


# =============================================================================
# CHARACTER SETS
# =============================================================================

@dataclass
class CharacterSet:
    """Character ramps for the ASCII renderer (dark to light)."""

    SAFE: str = "@%#*+=-:. "
    DETAILED: str = "$@B%8&WM#*oahkbdpqwmZO0QLCJUYXzcvunxrjft/|()1{}[]?-_+~<>i!lI;:,\"^`'. "
    BLOCKS: str = "█▓▒░ "
    SIMPLE: str = "@Oo. "

    @classmethod
    def get_preset(cls, name: str) -> str:
        """Get character set by name, falling back to the safe ramp."""
        presets = {
            'safe': cls.SAFE,
            'detailed': cls.DETAILED,
            'blocks': cls.BLOCKS,
            'simple': cls.SIMPLE,
        }
        return presets.get(name.lower(), cls.SAFE)


# =============================================================================
# THRESHOLDS AND LIMITS
# =============================================================================

# Cutoff used when the luminance threshold slider sits at 0
NEAR_WHITE_CUTOFF = 240.0

# Neon magenta, used when custom colours are on but no colour was given
DEFAULT_NEON_HSV = (300.0, 100.0, 100.0)

# Largest image (in pixels) accepted by transform()
MAX_PIXELS = 40_000_000

# ASCII cell size bounds (pixels per character)
ASCII_MIN_CELL = 20
ASCII_MAX_CELL = 200

# Monospace line height factor used when drawing ASCII grids
ASCII_LINE_HEIGHT = 0.6

# Stippling density and dot radius bounds
STIPPLE_MIN_LINES = 10
STIPPLE_MAX_LINES = 120
STIPPLE_MIN_RADIUS = 0.1
STIPPLE_MAX_RADIUS = 4.0
STIPPLE_MIN_SCALE = 0.1

# Gradient zoom and quality reduction
GRADIENT_MIN_ZOOM = 8.0
GRADIENT_MAX_ZOOM = 1.0
GRADIENT_MIN_QUALITY = 20
GRADIENT_QUALITY_EXPONENT = 2.5
GRADIENT_CURVATURE_LIMIT = 12.0


# =============================================================================
# PER-STYLE DEFAULTS
# =============================================================================

# Numeric fields reset whenever the active style changes.
STYLE_DEFAULTS: Dict[Style, Dict[str, float]] = {
    Style.FLOYD_STEINBERG: dict(
        scale=1.0, smoothness=5.0, contrast=0.0, midtones=65.0,
        highlights=100.0, luminance_threshold=50.0, blur=0.0, invert_shape=0.0,
    ),
    Style.ATKINSON: dict(
        scale=1.0, smoothness=5.0, contrast=0.0, midtones=65.0,
        highlights=100.0, luminance_threshold=50.0, blur=0.0, invert_shape=0.0,
    ),
    Style.SMOOTH_DIFFUSE: dict(
        scale=1.0, smoothness=3.0, contrast=0.0, midtones=50.0,
        highlights=100.0, luminance_threshold=50.0, blur=1.0, invert_shape=0.0,
    ),
    Style.STIPPLING: dict(
        scale=0.5, smoothness=0.0, contrast=0.0, midtones=50.0,
        highlights=100.0, luminance_threshold=30.0, blur=0.0, invert_shape=0.0,
    ),
    Style.GRADIENT: dict(
        scale=1.0, smoothness=4.0, contrast=0.0, midtones=50.0,
        highlights=100.0, luminance_threshold=50.0, blur=0.0, invert_shape=0.0,
    ),
    Style.ASCII: dict(
        scale=0.9, smoothness=0.0, contrast=0.0, midtones=50.0,
        highlights=0.0, luminance_threshold=0.0, blur=0.0, invert_shape=0.0,
    ),
}
