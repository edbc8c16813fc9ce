"""Tests for the gradient band renderer."""

import numpy as np
import pytest

from neon_stylizer.constants import Style
from neon_stylizer.gradient import GradientBandRenderer
from neon_stylizer.models import Bitmap, NeonColor
from neon_stylizer.pipeline import defaults_for


def gradient_settings(**changes):
    return defaults_for(Style.GRADIENT).replace(**changes)


def stripes(width=8, height=4):
    arr = np.zeros((height, width, 4), dtype=np.uint8)
    arr[..., 3] = 255
    pattern = (np.arange(width) // 2) % 2 == 1
    arr[:, pattern, :3] = 255
    return Bitmap.from_array(arr)


class TestParameters:
    def test_zoom(self):
        assert GradientBandRenderer.zoom_for(0.1) == pytest.approx(8.0)
        assert GradientBandRenderer.zoom_for(1.0) == pytest.approx(1.0)
        assert GradientBandRenderer.zoom_for(0.55) == pytest.approx(4.5)

    def test_quality(self):
        assert GradientBandRenderer.quality_for(1.0, 100) == 100
        assert GradientBandRenderer.quality_for(0.1, 100) == 20
        assert GradientBandRenderer.quality_for(0.1, 10) == 10
        assert GradientBandRenderer.quality_for(0.5, 100) < 100

    def test_endpoints(self):
        assert GradientBandRenderer.endpoints(gradient_settings()) == ((255, 255, 255), (0, 0, 0))
        assert GradientBandRenderer.endpoints(gradient_settings(invert=True)) == ((0, 0, 0), (255, 255, 255))
        custom = gradient_settings(use_custom_colors=True, neon_color=NeonColor(h=0, s=100, v=100))
        assert GradientBandRenderer.endpoints(custom) == ((255, 255, 255), (255, 0, 0))


class TestStages:
    def test_ramp(self):
        ramp = GradientBandRenderer.ramp((0, 0, 0), (255, 255, 255), 3)
        assert ramp[:, 0].tolist() == [0, 128, 255]

    def test_ramp_single_pixel_is_start(self):
        assert GradientBandRenderer.ramp((9, 8, 7), (1, 2, 3), 1).tolist() == [[9, 8, 7]]

    def test_runs(self):
        runs = GradientBandRenderer.runs(np.array([True, True, False, True]))
        assert runs == [(0, 2, True), (2, 3, False), (3, 4, True)]

    def test_count_transitions(self):
        assert GradientBandRenderer.count_transitions(np.array([True, False, False, True])) == 2
        assert GradientBandRenderer.count_transitions(np.array([False, False])) == 0

    def test_row_has_detail(self):
        assert GradientBandRenderer.row_has_detail(np.array([0.0, 0.0, 100.0]))
        assert not GradientBandRenderer.row_has_detail(np.array([10.0, 11.0, 12.0]))
        assert not GradientBandRenderer.row_has_detail(np.array([0.0, 255.0]))

    def test_band_mask_forces_centre_row(self):
        mask, forced = GradientBandRenderer.band_mask(np.full((5, 3), 200.0), 127.5)
        assert forced == 2
        assert mask[2].all()
        assert not mask[[0, 1, 3, 4]].any()

    def test_band_mask_regular(self):
        field = np.array([[0.0, 255.0], [255.0, 255.0]])
        mask, forced = GradientBandRenderer.band_mask(field, 127.5)
        assert forced is None
        assert mask.tolist() == [[True, False], [False, False]]


class TestRender:
    def test_uniform_image_draws_centre_band(self, solid):
        result = GradientBandRenderer.render(solid(10, 9, (128, 128, 128, 255)), gradient_settings())
        arr = result.to_array()
        assert arr[4, 0].tolist() == [255, 255, 255, 255]
        assert arr[4, 9].tolist() == [0, 0, 0, 255]
        assert not np.delete(arr[..., 3], 4, axis=0).any()

    def test_striped_rows_mirror_ramps(self):
        arr = GradientBandRenderer.render(stripes(), gradient_settings()).to_array()
        assert np.all(arr[..., 3] == 255)
        assert arr[0, :, 0].tolist() == [255, 0, 0, 255, 255, 0, 0, 255]

    def test_ink_alpha(self):
        settings = gradient_settings(use_custom_colors=True, neon_color=NeonColor(h=0, s=100, v=100, a=0.5))
        arr = GradientBandRenderer.render(stripes(), settings).to_array()
        assert np.all(arr[..., 3] == 128)

    @pytest.mark.parametrize("scale", [0.1, 0.4, 1.0])
    def test_keeps_dimensions(self, scale, vertical_step):
        result = GradientBandRenderer.render(vertical_step(17, 11), gradient_settings(scale=scale))
        assert (result.width, result.height) == (17, 11)
