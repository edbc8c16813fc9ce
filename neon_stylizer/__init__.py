"""
Neon Stylizer
=============
Monochrome and neon stylization of RGBA bitmaps: error-diffusion dithering,
edge line art, stippling, gradient bands and ASCII art.
"""

from neon_stylizer.ascii_art import AsciiRenderer
from neon_stylizer.color_math import (
    apply_contrast,
    apply_opacity,
    apply_tone_adjustments,
    hsv_to_rgb,
    luminance,
    rgb_to_hsv,
)
from neon_stylizer.constants import CharacterSet, DiffusionKernel, Style
from neon_stylizer.edge_detection import EdgeLineRenderer
from neon_stylizer.error_diffusion import ErrorDiffusionEngine
from neon_stylizer.errors import (
    InvalidImageData,
    InvalidSettings,
    ResourceExhaustion,
    StylizerError,
)
from neon_stylizer.export import flatten, save_bitmap
from neon_stylizer.formatters import AnsiColorFormatter, AsciiRasterizer, HtmlFormatter
from neon_stylizer.gradient import GradientBandRenderer
from neon_stylizer.models import (
    AsciiCell,
    AsciiGrid,
    Bitmap,
    FontMetrics,
    NeonColor,
    StyleSettings,
)
from neon_stylizer.pipeline import PipelineDispatcher, defaults_for, transform
from neon_stylizer.spatial import SpatialOps
from neon_stylizer.stippling import StipplingRenderer

__version__ = "1.0.0"

__all__ = [
    # Entry points
    'transform',
    'defaults_for',
    'PipelineDispatcher',

    # Data model
    'Bitmap',
    'StyleSettings',
    'NeonColor',
    'AsciiGrid',
    'AsciiCell',
    'FontMetrics',

    # Enums and character sets
    'Style',
    'DiffusionKernel',
    'CharacterSet',

    # Renderers
    'ErrorDiffusionEngine',
    'EdgeLineRenderer',
    'StipplingRenderer',
    'GradientBandRenderer',
    'AsciiRenderer',
    'SpatialOps',

    # Colour math
    'hsv_to_rgb',
    'rgb_to_hsv',
    'luminance',
    'apply_contrast',
    'apply_tone_adjustments',
    'apply_opacity',

    # Output
    'AnsiColorFormatter',
    'HtmlFormatter',
    'AsciiRasterizer',
    'flatten',
    'save_bitmap',

    # Errors
    'StylizerError',
    'InvalidImageData',
    'InvalidSettings',
    'ResourceExhaustion',
]
