"""Tests for the edge line renderer."""

import numpy as np
import pytest

from neon_stylizer.constants import Style
from neon_stylizer.edge_detection import EdgeLineRenderer
from neon_stylizer.models import Bitmap, NeonColor
from neon_stylizer.pipeline import defaults_for


def sharp_settings(**changes):
    return defaults_for(Style.SMOOTH_DIFFUSE).replace(blur=0, smoothness=0, **changes)


class TestEdgeThreshold:
    def test_range(self):
        assert EdgeLineRenderer.edge_threshold(0) == pytest.approx(20.0)
        assert EdgeLineRenderer.edge_threshold(10) == pytest.approx(100.0)

    def test_higher_smoothness_finds_fewer_edges(self):
        field = np.tile(np.arange(12, dtype=np.float32) * 25, (6, 1))
        assert EdgeLineRenderer.detect(field, 0).sum() == 40
        assert EdgeLineRenderer.detect(field, 10).sum() == 0


class TestRender:
    def test_step_edge(self, vertical_step):
        result = EdgeLineRenderer.render(vertical_step(6, 6, split=3), sharp_settings())
        alpha = result.to_array()[..., 3]
        expected = np.zeros((6, 6), dtype=bool)
        expected[1:5, 2] = True
        assert np.array_equal(alpha > 0, expected)
        assert result.to_array()[2, 2].tolist() == [255, 255, 255, 255]
        assert result.to_array()[2, 4].tolist() == [0, 0, 0, 0]

    def test_border_never_an_edge(self):
        rng = np.random.default_rng(7)
        arr = rng.integers(0, 256, (9, 11, 4), dtype=np.uint8)
        arr[..., 3] = 255
        alpha = EdgeLineRenderer.render(Bitmap.from_array(arr), sharp_settings()).to_array()[..., 3]
        assert not alpha[0].any() and not alpha[-1].any()
        assert not alpha[:, 0].any() and not alpha[:, -1].any()

    def test_uniform_image_is_transparent(self, solid):
        result = EdgeLineRenderer.render(solid(5, 5, (90, 30, 200, 255)), sharp_settings())
        assert not result.to_array()[..., 3].any()

    def test_invert_draws_black_on_clear_white(self, vertical_step):
        result = EdgeLineRenderer.render(vertical_step(6, 6, split=3), sharp_settings(invert=True))
        arr = result.to_array()
        assert arr[2, 2].tolist() == [0, 0, 0, 255]
        assert arr[2, 4].tolist() == [255, 255, 255, 0]

    def test_invert_with_custom_colours_keeps_background_transparent(self, vertical_step):
        settings = sharp_settings(invert=True, use_custom_colors=True,
                                  neon_color=NeonColor(h=0, s=100, v=100, a=1.0))
        arr = EdgeLineRenderer.render(vertical_step(6, 6, split=3), settings).to_array()
        assert arr[2, 2].tolist() == [0, 255, 255, 255]
        assert arr[2, 4].tolist() == [0, 0, 0, 0]
        edge = arr[..., 3] > 0
        assert np.all(arr[edge][:, :3] == (0, 255, 255))

    def test_scale_keeps_dimensions(self, vertical_step):
        result = EdgeLineRenderer.render(vertical_step(13, 9), sharp_settings(scale=0.5))
        assert (result.width, result.height) == (13, 9)
