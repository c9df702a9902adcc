"""Shared pytest fixtures and configuration."""

from collections.abc import Iterator

import numpy as np
import numpy.typing as npt
import pytest
from PIL import Image

from thumbcrop.config import Settings
from thumbcrop.utils.logging import clear_correlation_context, configure_logging

# Skin tones: hue ~22 and ~18 degrees, saturation ~0.38 and ~0.53
SKIN_LIGHT = (224, 172, 140)
SKIN_DARK = (190, 120, 90)
BACKGROUND_GRAY = (128, 128, 128)


def _solid(
    height: int, width: int, color: tuple[int, int, int]
) -> npt.NDArray[np.uint8]:
    pixels = np.empty((height, width, 3), dtype=np.uint8)
    pixels[:] = color
    return pixels


def _gray_noise(height: int, width: int, seed: int) -> npt.NDArray[np.uint8]:
    rng = np.random.default_rng(seed)
    levels = rng.integers(0, 256, size=(height, width), dtype=np.uint8)
    return np.repeat(levels[:, :, None], 3, axis=2)


def _color_noise(height: int, width: int, seed: int) -> npt.NDArray[np.uint8]:
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8)


def _skin_mix(height: int, width: int, seed: int) -> npt.NDArray[np.uint8]:
    rng = np.random.default_rng(seed)
    light = rng.random((height, width)) < 0.5
    return np.where(light[:, :, None], SKIN_LIGHT, SKIN_DARK).astype(np.uint8)


@pytest.fixture(autouse=True)
def reset_logging_context() -> Iterator[None]:
    """Reset correlation context between tests."""
    clear_correlation_context()
    yield
    clear_correlation_context()


@pytest.fixture
def test_settings() -> Settings:
    """Create a Settings instance with test-safe defaults."""
    return Settings(
        LOG_LEVEL="DEBUG",
        LOG_FORMAT="console",
        _env_file=None,  # type: ignore[call-arg]
    )


@pytest.fixture
def configure_test_logging() -> Iterator[None]:
    """Configure logging for tests with console output."""
    configure_logging(level="DEBUG", log_format="console")
    yield


@pytest.fixture
def uniform_pixels() -> npt.NDArray[np.uint8]:
    """100x100 flat mid-gray image."""
    return _solid(100, 100, BACKGROUND_GRAY)


@pytest.fixture
def gray_noise_pixels() -> npt.NDArray[np.uint8]:
    """100x100 neutral gray image with random luminance."""
    return _gray_noise(100, 100, seed=0)


@pytest.fixture
def skin_pixels() -> npt.NDArray[np.uint8]:
    """100x100 image mixing two skin tones at random, about half each."""
    return _skin_mix(100, 100, seed=0)


@pytest.fixture
def color_noise_pixels() -> npt.NDArray[np.uint8]:
    """80x120 (HxW) uniformly random RGB image."""
    return _color_noise(80, 120, seed=0)


@pytest.fixture
def wide_noise_right() -> npt.NDArray[np.uint8]:
    """1000x500 image: flat gray except a noisy band at columns 600-900."""
    pixels = _solid(500, 1000, BACKGROUND_GRAY)
    pixels[:, 600:900] = _color_noise(500, 300, seed=1)
    return pixels


@pytest.fixture
def noise_left_skin_right() -> npt.NDArray[np.uint8]:
    """1000x500 image: gray noise at columns 100-200, skin tones at 600-900.

    The noise band has the most tonal variety; the skin band has only two
    tones but is saturated and in the skin hue range.
    """
    pixels = _solid(500, 1000, BACKGROUND_GRAY)
    pixels[:, 100:200] = _gray_noise(500, 100, seed=2)
    pixels[:, 600:900] = _skin_mix(500, 300, seed=3)
    return pixels


@pytest.fixture
def sample_image(color_noise_pixels: npt.NDArray[np.uint8]) -> Image.Image:
    """120x80 RGB Pillow image of random colors."""
    return Image.fromarray(color_noise_pixels)
