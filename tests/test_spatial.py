"""Tests for blur, gradient, posterization and resampling."""

import numpy as np
import pytest

from neon_stylizer.spatial import SpatialOps


class TestBoxBlur:
    def test_zero_radius_is_copy(self):
        image = np.random.randint(0, 256, (4, 5, 3), dtype=np.uint8)
        result = SpatialOps.box_blur(image, 0)
        assert np.array_equal(result, image)
        assert result is not image

    def test_uniform_image_unchanged(self):
        image = np.full((5, 5, 3), 77, dtype=np.uint8)
        assert np.array_equal(SpatialOps.box_blur(image, 2), image)

    def test_single_point_spreads_with_edge_counts(self):
        image = np.zeros((3, 3, 3), dtype=np.uint8)
        image[1, 1] = 90
        result = SpatialOps.box_blur(image, 1)
        # 22.5 rounds half to even
        assert result[..., 0].tolist() == [[22, 15, 22], [15, 10, 15], [22, 15, 22]]

    def test_fractional_radius_rounds_up(self):
        image = np.zeros((3, 3, 3), dtype=np.uint8)
        image[1, 1] = 90
        assert np.array_equal(SpatialOps.box_blur(image, 0.3), SpatialOps.box_blur(image, 1))

    def test_alpha_untouched(self):
        image = np.zeros((4, 4, 4), dtype=np.uint8)
        image[..., 3] = np.arange(16, dtype=np.uint8).reshape(4, 4)
        image[0, 0, :3] = 255
        result = SpatialOps.box_blur(image, 1)
        assert np.array_equal(result[..., 3], image[..., 3])

    def test_input_not_modified(self):
        image = np.zeros((3, 3, 3), dtype=np.uint8)
        image[1, 1] = 90
        before = image.copy()
        SpatialOps.box_blur(image, 1)
        assert np.array_equal(image, before)


class TestEdgeGradient:
    def test_step_edge(self):
        field = np.zeros((4, 4), dtype=np.float32)
        field[:, 2:] = 100
        magnitude = SpatialOps.edge_gradient(field)
        assert magnitude[1, 1] == pytest.approx(100.0)
        assert magnitude[2, 1] == pytest.approx(100.0)
        assert magnitude[1, 2] == pytest.approx(0.0)

    def test_border_is_zero(self):
        field = np.random.rand(6, 7).astype(np.float32) * 255
        magnitude = SpatialOps.edge_gradient(field)
        assert not magnitude[0].any()
        assert not magnitude[-1].any()
        assert not magnitude[:, 0].any()
        assert not magnitude[:, -1].any()

    def test_tiny_field(self):
        field = np.array([[0, 255], [255, 0]], dtype=np.float32)
        assert not SpatialOps.edge_gradient(field).any()


class TestPosterize:
    def test_levels(self):
        assert SpatialOps.posterize_levels(0) == 20
        assert SpatialOps.posterize_levels(5) == 11
        assert SpatialOps.posterize_levels(10) == 2

    def test_zero_smoothness_is_noop(self):
        values = np.array([12.3, 200.0])
        assert SpatialOps.posterize(values, 0) is values

    def test_two_levels(self):
        result = SpatialOps.posterize(np.array([0.0, 100.0, 200.0, 255.0]), 10)
        assert result.tolist() == [0.0, 0.0, 255.0, 255.0]

    def test_output_on_level_grid(self):
        values = np.linspace(0, 255, 50)
        steps = SpatialOps.posterize_levels(4) - 1
        result = SpatialOps.posterize(values, 4)
        positions = result / 255.0 * steps
        assert np.allclose(positions, np.round(positions))


class TestResampling:
    def test_nearest_upscale_makes_blocks(self):
        image = np.arange(4, dtype=np.uint8).reshape(2, 2, 1)
        result = SpatialOps.resize_nearest(image, 4, 4)
        assert result[..., 0].tolist() == [
            [0, 0, 1, 1],
            [0, 0, 1, 1],
            [2, 2, 3, 3],
            [2, 2, 3, 3],
        ]

    def test_smooth_resize_shape(self):
        image = np.random.randint(0, 256, (10, 12, 4), dtype=np.uint8)
        result = SpatialOps.resize_smooth(image, 6, 5)
        assert result.shape == (5, 6, 4)
        assert result.dtype == np.uint8

    def test_zoom_one_is_identity(self):
        image = np.random.randint(0, 256, (6, 8, 4), dtype=np.uint8)
        assert np.array_equal(SpatialOps.zoom_crop(image, 1.0), image)

    def test_zoom_two_takes_centre(self):
        image = np.arange(16, dtype=np.uint8).reshape(4, 4, 1)
        result = SpatialOps.zoom_crop(image, 2.0)
        assert result[..., 0].tolist() == [
            [5, 5, 6, 6],
            [5, 5, 6, 6],
            [9, 9, 10, 10],
            [9, 9, 10, 10],
        ]

    def test_reduce_rows_averages_blocks(self):
        image = np.zeros((4, 2, 4), dtype=np.uint8)
        image[..., :3] = np.array([0, 10, 20, 30], dtype=np.uint8)[:, None, None]
        result = SpatialOps.reduce_rows(image, 2)
        assert result[:, 0, 0].tolist() == [5, 5, 25, 25]
        assert np.all(result[..., 3] == 255)

    def test_reduce_rows_full_height_is_copy(self):
        image = np.random.randint(0, 256, (4, 3, 4), dtype=np.uint8)
        assert np.array_equal(SpatialOps.reduce_rows(image, 4), image)
