"""Read-only windowed access to a decoded raster image.

The sampler never copies or mutates the caller's pixels: windows are numpy
views with the writeable flag cleared. Subsampling takes every Nth pixel on
both axes starting at the window origin, so the same region and stride always
select the same pixels.
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from thumbcrop.exceptions import InvalidImageError, InvalidRectangleError
from thumbcrop.geometry import GeometryValidator, Region, Size
from thumbcrop.vision.constants import SUPPORTED_CHANNELS

if TYPE_CHECKING:
    from PIL import Image

_PIXEL_NDIM = 3


def sampling_stride(region: Region, max_samples: int) -> int:
    """Return the subsampling stride that keeps a window within max_samples.

    The stride is ``ceil(sqrt(area / max_samples))``, at least 1. Applied on
    both axes it bounds the sampled pixel count to roughly max_samples.

    Args:
        region: The window to be sampled.
        max_samples: Pixel budget for the window.

    Returns:
        Stride >= 1.

    Raises:
        ValueError: If max_samples is not positive.
    """
    if max_samples <= 0:
        raise ValueError(f"max_samples must be > 0, got {max_samples}")
    if region.area <= max_samples:
        return 1
    return max(1, math.ceil(math.sqrt(region.area / max_samples)))


class PixelSampler:
    """Windowed, read-only access to an 8-bit RGB or RGBA raster.

    Attributes:
        size: Image dimensions.
        channels: 3 (RGB) or 4 (RGBA).
    """

    __slots__ = ("_pixels", "_size", "_validator")

    def __init__(self, pixels: npt.NDArray[np.uint8]) -> None:
        """Wrap a (height, width, channels) uint8 array.

        Args:
            pixels: Pixel array, contiguous or strided. Borrowed, not copied.

        Raises:
            InvalidImageError: If the array is not uint8 (H, W, 3|4) with
                non-zero dimensions.
        """
        arr = np.asarray(pixels)
        if arr.dtype != np.uint8:
            raise InvalidImageError(f"Pixel buffer must be uint8, got {arr.dtype}")
        if arr.ndim != _PIXEL_NDIM or arr.shape[2] not in SUPPORTED_CHANNELS:
            raise InvalidImageError(
                f"Pixel buffer must have shape (H, W, 3|4), got {arr.shape}"
            )
        height, width = arr.shape[:2]
        if height < 1 or width < 1:
            raise InvalidImageError(f"Image must be at least 1x1, got {width}x{height}")

        view = arr.view()
        view.flags.writeable = False
        self._pixels = view
        self._size = Size(width=width, height=height)
        self._validator = GeometryValidator()

    @classmethod
    def from_buffer(
        cls,
        buffer: bytes | bytearray | memoryview,
        width: int,
        height: int,
        channels: int = 3,
        row_stride: int | None = None,
    ) -> PixelSampler:
        """Wrap a raw interleaved pixel buffer without copying it.

        Args:
            buffer: Raw 8-bit samples, row-major, channels interleaved.
            width: Image width in pixels.
            height: Image height in pixels.
            channels: 3 or 4.
            row_stride: Bytes between the starts of consecutive rows.
                Defaults to ``width * channels`` (tightly packed).

        Returns:
            A sampler over the buffer.

        Raises:
            InvalidImageError: If the geometry is invalid or the buffer is
                too short for it.
        """
        if width < 1 or height < 1:
            raise InvalidImageError(f"Image must be at least 1x1, got {width}x{height}")
        if channels not in SUPPORTED_CHANNELS:
            raise InvalidImageError(f"channels must be 3 or 4, got {channels}")

        packed_row = width * channels
        stride = packed_row if row_stride is None else row_stride
        if stride < packed_row:
            raise InvalidImageError(
                f"row_stride {stride} is smaller than a packed row ({packed_row} bytes)"
            )

        flat = np.frombuffer(buffer, dtype=np.uint8)
        needed = stride * (height - 1) + packed_row
        if flat.size < needed:
            raise InvalidImageError(
                f"Buffer holds {flat.size} bytes, {width}x{height}x{channels} "
                f"with row_stride {stride} needs {needed}"
            )

        pixels = np.lib.stride_tricks.as_strided(
            flat,
            shape=(height, width, channels),
            strides=(stride, channels, 1),
            writeable=False,
        )
        return cls(pixels)

    @classmethod
    def from_image(cls, image: Image.Image) -> PixelSampler:
        """Create a sampler from a Pillow image.

        Images with transparency become RGBA, everything else RGB.
        """
        if image.mode not in ("RGB", "RGBA"):
            has_alpha = "A" in image.getbands() or "transparency" in image.info
            image = image.convert("RGBA" if has_alpha else "RGB")
        return cls(np.asarray(image))

    @property
    def size(self) -> Size:
        """Return image dimensions."""
        return self._size

    @property
    def width(self) -> int:
        """Return image width in pixels."""
        return self._size.width

    @property
    def height(self) -> int:
        """Return image height in pixels."""
        return self._size.height

    @property
    def channels(self) -> int:
        """Return the channel count (3 or 4)."""
        return int(self._pixels.shape[2])

    def window(self, region: Region, stride: int = 1) -> npt.NDArray[np.uint8]:
        """Return a read-only view of the pixels inside region.

        Args:
            region: Window in source coordinates.
            stride: Take every ``stride``-th pixel on both axes, starting at
                the window's top-left pixel.

        Returns:
            Array of shape (ceil(h / stride), ceil(w / stride), channels).

        Raises:
            OutOfBoundsError: If region exceeds the image.
            InvalidRectangleError: If stride is not positive.
        """
        if stride < 1:
            raise InvalidRectangleError(f"Sampling stride must be >= 1, got {stride}")
        self._validator.validate(region, self._size)
        return self._pixels[
            region.y : region.bottom : stride,
            region.x : region.right : stride,
        ]

    def sample(self, region: Region, stride: int = 1) -> Iterator[tuple[int, ...]]:
        """Yield (R, G, B[, A]) tuples for the pixels in region, row-major.

        Bounds are checked before the first pixel is produced.
        """
        pixels = self.window(region, stride)
        return (tuple(int(c) for c in pixel) for row in pixels for pixel in row)
