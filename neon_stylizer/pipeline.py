"""
Neon Stylizer - Pipeline
========================
Style defaults and the single ``transform`` entry point.
"""

import logging
from typing import Callable, Dict, Optional, Union

from neon_stylizer.ascii_art import AsciiRenderer
from neon_stylizer.color_math import apply_opacity
from neon_stylizer.constants import (
    MAX_PIXELS,
    STYLE_DEFAULTS,
    CharacterSet,
    DiffusionKernel,
    Style,
)
from neon_stylizer.edge_detection import EdgeLineRenderer
from neon_stylizer.error_diffusion import ErrorDiffusionEngine
from neon_stylizer.errors import InvalidImageData, InvalidSettings, ResourceExhaustion
from neon_stylizer.gradient import GradientBandRenderer
from neon_stylizer.models import AsciiGrid, Bitmap, StyleSettings
from neon_stylizer.stippling import StipplingRenderer

logger = logging.getLogger(__name__)

Result = Union[Bitmap, AsciiGrid]

# Styles whose source alpha is pre-multiplied by the custom colour alpha.
# Stippling, Gradient and ASCII composite alpha themselves.
OPACITY_PRESTEP_STYLES = frozenset({
    Style.FLOYD_STEINBERG,
    Style.ATKINSON,
    Style.SMOOTH_DIFFUSE,
})


def defaults_for(style: Union[Style, str]) -> StyleSettings:
    """
    Settings holding the documented defaults of ``style``.

    Raises:
        InvalidSettings: for an unknown style
    """
    style = Style.from_name(style)
    return StyleSettings(style=style, **STYLE_DEFAULTS[style])


class PipelineDispatcher:
    """Validate input, apply the shared pre-steps and run one renderer."""

    def __init__(self, max_pixels: int = MAX_PIXELS, charset: str = CharacterSet.SAFE):
        self.max_pixels = max_pixels
        self.stippler = StipplingRenderer()
        self.ascii = AsciiRenderer(charset)
        self.renderers: Dict[Style, Callable[[Bitmap, StyleSettings], Result]] = {
            Style.FLOYD_STEINBERG: ErrorDiffusionEngine(DiffusionKernel.FLOYD_STEINBERG).render,
            Style.ATKINSON: ErrorDiffusionEngine(DiffusionKernel.ATKINSON).render,
            Style.SMOOTH_DIFFUSE: EdgeLineRenderer.render,
            Style.STIPPLING: self.stippler.render,
            Style.GRADIENT: GradientBandRenderer.render,
            Style.ASCII: self.ascii.render,
        }

    def _check_bitmap(self, bitmap: Optional[Bitmap]) -> None:
        if bitmap is None:
            raise InvalidImageData("No bitmap given")
        if not isinstance(bitmap, Bitmap):
            raise InvalidImageData(f"Expected a Bitmap, got {type(bitmap).__name__}")
        bitmap.validate()
        if bitmap.width * bitmap.height > self.max_pixels:
            raise ResourceExhaustion(
                f"Image of {bitmap.width}x{bitmap.height} exceeds the limit of "
                f"{self.max_pixels} pixels"
            )

    @staticmethod
    def _check_settings(settings: Optional[StyleSettings]) -> StyleSettings:
        if not isinstance(settings, StyleSettings):
            raise InvalidSettings(f"Expected StyleSettings, got {type(settings).__name__}")
        if not isinstance(settings.style, Style):
            settings = settings.replace(style=Style.from_name(settings.style))
        settings.validate()
        return settings

    def transform(self, bitmap: Bitmap, settings: StyleSettings) -> Result:
        """
        Stylize ``bitmap``.

        Args:
            bitmap: Source RGBA image; never modified
            settings: Style and parameters

        Returns:
            A new Bitmap of the same size, or an AsciiGrid for the ASCII style

        Raises:
            InvalidImageData: missing bitmap or wrong buffer length
            InvalidSettings: unknown style or out-of-range parameter
            ResourceExhaustion: image larger than ``max_pixels``
        """
        self._check_bitmap(bitmap)
        settings = self._check_settings(settings)
        logger.info("Applying %s to %dx%d image",
                    settings.style.display_name, bitmap.width, bitmap.height)

        if settings.use_custom_colors and settings.neon_color is None:
            logger.warning("Custom colours enabled without a colour; using neon magenta")

        source = bitmap
        neon = settings.active_neon_color
        if settings.style in OPACITY_PRESTEP_STYLES and neon is not None and neon.a < 1:
            source = apply_opacity(bitmap, neon.a)

        return self.renderers[settings.style](source, settings)


def transform(bitmap: Bitmap, settings: StyleSettings,
              max_pixels: int = MAX_PIXELS) -> Result:
    """Stylize ``bitmap`` with a fresh dispatcher; see PipelineDispatcher.transform."""
    return PipelineDispatcher(max_pixels=max_pixels).transform(bitmap, settings)
