"""Geometry primitives for thumbcrop.

This module provides immutable Pydantic models for sizes and regions in
source-image pixel coordinates. All coordinates follow the convention where
(0, 0) is the top-left corner.
"""

from __future__ import annotations

from typing import Self

from pydantic import BaseModel, Field


class Size(BaseModel, frozen=True):
    """A 2D size representing width and height.

    Both dimensions must be strictly positive (> 0).

    Attributes:
        width: Horizontal extent in pixels.
        height: Vertical extent in pixels.
    """

    width: int = Field(..., gt=0, description="Width in pixels")
    height: int = Field(..., gt=0, description="Height in pixels")

    @property
    def area(self) -> int:
        """Calculate the area in square pixels."""
        return self.width * self.height

    @property
    def aspect_ratio(self) -> float:
        """Return width/height aspect ratio."""
        return self.width / self.height

    def to_tuple(self) -> tuple[int, int]:
        """Convert to (width, height) tuple."""
        return (self.width, self.height)

    @classmethod
    def from_tuple(cls, size: tuple[int, int]) -> Self:
        """Create Size from (width, height) tuple."""
        return cls(width=size[0], height=size[1])


class Region(BaseModel, frozen=True):
    """A rectangular region in source pixel coordinates.

    Represents a crop window defined by top-left corner (x, y) and
    dimensions (width, height):

    - Top-left: (x, y)
    - Bottom-right: (x + width, y + height) [exclusive]

    Whether the region fits inside a particular image is checked separately
    by GeometryValidator, since a Region does not know its source.

    Attributes:
        x: Left edge X coordinate (>= 0).
        y: Top edge Y coordinate (>= 0).
        width: Horizontal extent in pixels (> 0).
        height: Vertical extent in pixels (> 0).
    """

    x: int = Field(..., ge=0, description="Left edge X coordinate")
    y: int = Field(..., ge=0, description="Top edge Y coordinate")
    width: int = Field(..., gt=0, description="Width in pixels")
    height: int = Field(..., gt=0, description="Height in pixels")

    @property
    def area(self) -> int:
        """Calculate the area in square pixels."""
        return self.width * self.height

    @property
    def right(self) -> int:
        """Return the X coordinate of the right edge (exclusive)."""
        return self.x + self.width

    @property
    def bottom(self) -> int:
        """Return the Y coordinate of the bottom edge (exclusive)."""
        return self.y + self.height

    @property
    def size(self) -> Size:
        """Return the dimensions as a Size."""
        return Size(width=self.width, height=self.height)

    @property
    def center(self) -> tuple[float, float]:
        """Return the exact center point as (x, y) tuple."""
        return (self.x + self.width / 2, self.y + self.height / 2)

    def to_tuple(self) -> tuple[int, int, int, int]:
        """Convert to (x, y, width, height) tuple."""
        return (self.x, self.y, self.width, self.height)

    @classmethod
    def from_tuple(cls, bbox: tuple[int, int, int, int]) -> Self:
        """Create Region from (x, y, width, height) tuple."""
        return cls(x=bbox[0], y=bbox[1], width=bbox[2], height=bbox[3])

    @classmethod
    def full(cls, size: Size) -> Self:
        """Create the Region covering an entire image of the given size."""
        return cls(x=0, y=0, width=size.width, height=size.height)

    def to_box(self) -> tuple[int, int, int, int]:
        """Convert to a Pillow crop box (left, upper, right, lower)."""
        return (self.x, self.y, self.right, self.bottom)
