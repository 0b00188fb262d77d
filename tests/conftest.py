"""Shared fixtures for synthetic stereo and flow images."""

import numpy as np
import pytest


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded random generator so textures are reproducible."""
    return np.random.default_rng(1234)


@pytest.fixture
def textured_image(rng: np.random.Generator) -> np.ndarray:
    """64x64 RGB image of random texture (uint8)."""
    return rng.integers(0, 256, size=(64, 64, 3), dtype=np.uint8)


@pytest.fixture
def shifted_pair(textured_image: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Stereo pair where a textured patch of the right image is shifted left by 5 px.

    Right columns 20..39 of rows 20..39 hold the left columns 25..44, so left
    pixels in columns 25..39 of those rows match 5 px to their left.
    """
    left = textured_image
    right = left.copy()
    right[20:40, 20:40] = left[20:40, 25:45]
    return left, right
