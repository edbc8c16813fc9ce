"""Shared fixtures."""

import numpy as np
import pytest

from neon_stylizer import Bitmap


@pytest.fixture
def solid():
    """Factory for single-colour bitmaps."""
    def make(width, height, color=(255, 255, 255, 255)):
        return Bitmap.filled(width, height, color)
    return make


@pytest.fixture
def vertical_step():
    """Factory for a black-left / white-right bitmap."""
    def make(width, height, split=None):
        split = width // 2 if split is None else split
        arr = np.zeros((height, width, 4), dtype=np.uint8)
        arr[..., 3] = 255
        arr[:, split:, :3] = 255
        return Bitmap.from_array(arr)
    return make
