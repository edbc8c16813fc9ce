"""Tests for bitmaps and settings."""

import numpy as np
import pytest
from PIL import Image

from neon_stylizer.constants import STYLE_DEFAULTS, Style
from neon_stylizer.errors import InvalidImageData, InvalidSettings
from neon_stylizer.models import AsciiCell, AsciiGrid, Bitmap, NeonColor, StyleSettings


class TestBitmap:
    def test_validate_accepts_matching_buffer(self):
        Bitmap(2, 3, bytes(24)).validate()

    @pytest.mark.parametrize("width, height, size", [(2, 3, 23), (0, 3, 0), (-1, 2, 8)])
    def test_validate_rejects(self, width, height, size):
        with pytest.raises(InvalidImageData):
            Bitmap(width, height, bytes(max(size, 0))).validate()

    def test_missing_pixels(self):
        with pytest.raises(InvalidImageData):
            Bitmap(1, 1, None).validate()

    def test_from_array_shape_check(self):
        with pytest.raises(InvalidImageData):
            Bitmap.from_array(np.zeros((4, 4, 3), dtype=np.uint8))

    def test_array_view(self):
        bitmap = Bitmap(2, 1, bytes([1, 2, 3, 4, 5, 6, 7, 8]))
        assert bitmap.to_array().shape == (1, 2, 4)
        assert bitmap.to_array()[0, 1].tolist() == [5, 6, 7, 8]

    def test_pillow_round_trip(self):
        image = Image.new('RGB', (3, 2), color=(10, 20, 30))
        bitmap = Bitmap.from_image(image)
        assert bitmap.size == (3, 2)
        assert bitmap.to_array()[1, 2].tolist() == [10, 20, 30, 255]
        assert bitmap.to_image().mode == 'RGBA'

    def test_copy_is_independent(self, solid):
        bitmap = solid(2, 2)
        clone = bitmap.copy()
        clone.pixels[0] = 0
        assert bitmap != clone


class TestNeonColor:
    def test_defaults_are_magenta(self):
        color = NeonColor()
        assert (color.h, color.s, color.v, color.a) == (300, 100, 100, 1.0)

    def test_alpha_byte_rounds_half_up(self):
        assert NeonColor(a=0.5).alpha_byte == 128
        assert NeonColor(a=0.0).alpha_byte == 0


class TestStyleSettings:
    def test_style_from_string(self):
        assert StyleSettings(style='Smooth Diffuse').style is Style.SMOOTH_DIFFUSE
        assert StyleSettings(style='floyd-steinberg').style is Style.FLOYD_STEINBERG

    def test_unknown_style(self):
        with pytest.raises(InvalidSettings):
            StyleSettings(style='mosaic')

    def test_neon_colour_from_dict(self):
        settings = StyleSettings(neon_color={'h': 10, 's': 20, 'v': 30, 'a': 0.4})
        assert settings.neon_color == NeonColor(10, 20, 30, 0.4)

    @pytest.mark.parametrize("changes", [
        {'scale': 0},
        {'scale': float('nan')},
        {'smoothness': 11},
        {'contrast': -101},
        {'midtones': 'high'},
        {'luminance_threshold': 101},
        {'blur': -1},
        {'neon_color': NeonColor(a=1.5)},
        {'neon_color': NeonColor(h=400)},
    ])
    def test_validate_rejects(self, changes):
        with pytest.raises(InvalidSettings):
            StyleSettings().replace(**changes).validate()

    def test_validate_accepts_defaults(self):
        for style in Style:
            StyleSettings(style=style, **STYLE_DEFAULTS[style]).validate()

    def test_switch_style_resets_numbers_and_keeps_flags(self):
        settings = StyleSettings(smoothness=9, invert=True, use_custom_colors=True,
                                 neon_color=NeonColor(h=20))
        switched = settings.switch_style('stippling')
        assert switched.style is Style.STIPPLING
        assert switched.smoothness == 0
        assert switched.scale == 0.5
        assert switched.invert is True
        assert switched.neon_color.h == 20
        assert settings.smoothness == 9

    def test_active_neon_colour(self):
        assert StyleSettings().active_neon_color is None
        fallback = StyleSettings(use_custom_colors=True, neon_color=None).active_neon_color
        assert fallback == NeonColor()

    def test_ink_alpha(self):
        assert StyleSettings(neon_color=NeonColor(a=0.2)).ink_alpha == 255
        assert StyleSettings(use_custom_colors=True, neon_color=NeonColor(a=0.2)).ink_alpha == 51


class TestAsciiGrid:
    def test_text(self):
        white = (255, 255, 255, 255)
        grid = AsciiGrid([[AsciiCell('a', white), AsciiCell('b', white)],
                          [AsciiCell('c', white), AsciiCell('d', white)]])
        assert grid.to_text() == "ab\ncd"
        assert (grid.columns, grid.row_count) == (2, 2)

    def test_ragged_rows_rejected(self):
        cell = AsciiCell('x', (0, 0, 0, 255))
        with pytest.raises(ValueError):
            AsciiGrid([[cell, cell], [cell]])
