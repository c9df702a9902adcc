"""Custom exceptions for thumbcrop.

Every failure of the region-selection engine is local, synchronous and
deterministic: the same inputs always fail the same way. Callers treat
these as rejected requests; nothing here is retryable.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from thumbcrop.geometry.primitives import Region, Size


class ThumbcropError(Exception):
    """Base exception for all thumbcrop errors."""

    def __init__(self, message: str) -> None:
        """Initialize error.

        Args:
            message: Human-readable error description.
        """
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        return self.message


class InvalidRectangleError(ThumbcropError, ValueError):
    """Raised when a rectangle has zero or negative area or a negative origin.

    Also raised for a non-positive sampling stride, since that would
    describe an empty sample set.
    """

    def __init__(
        self,
        message: str,
        *,
        rect: tuple[int, int, int, int] | None = None,
    ) -> None:
        """Initialize with the offending (x, y, width, height), if known."""
        self.rect = rect
        super().__init__(message)

    def _format_message(self) -> str:
        if self.rect is not None:
            return f"{self.message} (rect={self.rect})"
        return self.message


class OutOfBoundsError(InvalidRectangleError):
    """Raised when a region reaches outside the source image.

    Attributes:
        region: The region that was validated.
        bounds: The image size it was validated against.
    """

    def __init__(self, message: str, *, region: Region, bounds: Size) -> None:
        self.region = region
        self.bounds = bounds
        super().__init__(message, rect=region.to_tuple())

    def _format_message(self) -> str:
        return (
            f"{self.message} (region={self.region.to_tuple()}, "
            f"bounds={self.bounds.to_tuple()})"
        )


class InvalidAspectError(ThumbcropError, ValueError):
    """Raised when a target aspect ratio is not a positive finite number."""

    def __init__(self, aspect: float) -> None:
        self.aspect = aspect
        super().__init__(
            f"Target aspect ratio must be positive and finite, got {aspect}"
        )


class SourceTooSmallError(ThumbcropError):
    """Raised when the crop would have to be enlarged and upscaling is disallowed.

    Attributes:
        crop_size: (width, height) of the crop window at source resolution.
        target_size: (width, height) requested for the output.
    """

    def __init__(
        self,
        *,
        crop_size: tuple[int, int],
        target_size: tuple[int, int],
    ) -> None:
        self.crop_size = crop_size
        self.target_size = target_size
        super().__init__(
            f"Target {target_size[0]}x{target_size[1]} is larger than the "
            f"available crop {crop_size[0]}x{crop_size[1]} and upscaling "
            "is disabled"
        )


class InvalidImageError(ThumbcropError, ValueError):
    """Raised when a pixel buffer cannot be interpreted as an 8-bit RGB(A) image."""


class ImageDecodeError(ThumbcropError):
    """Raised when an input file or byte buffer cannot be decoded."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        self.path = Path(path) if path else None
        super().__init__(message)

    def _format_message(self) -> str:
        if self.path:
            return f"{self.message} (path: {self.path})"
        return self.message
