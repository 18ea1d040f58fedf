"""Shared fixtures for the Tincture test suite."""

import numpy as np
import pytest

from tincture_colors import Color, Rgb


@pytest.fixture
def gray() -> Color:
    """RGB(0.5, 0.5, 0.5)."""
    return Color(Rgb(0.5, 0.5, 0.5))


@pytest.fixture
def teal() -> Color:
    """RGB(35, 144, 180) on the 0-255 scale."""
    return Color(Rgb.from_scaled(35, 144, 180))


@pytest.fixture
def rgb_batch() -> np.ndarray:
    """Deterministic in-gamut RGB samples, shape (32, 3)."""
    rng = np.random.default_rng(1234)
    return rng.uniform(0.05, 0.95, size=(32, 3))
