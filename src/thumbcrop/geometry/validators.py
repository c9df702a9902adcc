"""Geometry validation utilities for thumbcrop.

This module provides bounds checking for crop windows against source image
dimensions, and checked construction of regions from raw integers.
"""

from __future__ import annotations

from thumbcrop.exceptions import InvalidRectangleError, OutOfBoundsError
from thumbcrop.geometry.primitives import Region, Size


def require_region(x: int, y: int, width: int, height: int) -> Region:
    """Build a Region, rejecting empty or negative rectangles.

    Unlike constructing ``Region`` directly (which raises pydantic's
    ValidationError), this raises the domain error callers are expected to
    handle.

    Args:
        x: Left edge.
        y: Top edge.
        width: Horizontal extent, must be > 0.
        height: Vertical extent, must be > 0.

    Returns:
        The validated Region.

    Raises:
        InvalidRectangleError: If width or height is not positive, or the
            origin is negative.
    """
    rect = (x, y, width, height)
    if width <= 0 or height <= 0:
        raise InvalidRectangleError("Rectangle must have positive area", rect=rect)
    if x < 0 or y < 0:
        raise InvalidRectangleError("Rectangle origin must be non-negative", rect=rect)
    return Region(x=x, y=y, width=width, height=height)


class GeometryValidator:
    """Validator for crop windows against source image bounds.

    The validator is stateless and operates purely on the inputs provided
    to each method.
    """

    def validate(
        self,
        region: Region,
        bounds: Size,
        *,
        strict: bool = True,
    ) -> bool:
        """Validate that a region is within bounds.

        Checks that:
        1. region.right <= bounds.width
        2. region.bottom <= bounds.height

        Note: Region x, y are already constrained to >= 0 by Pydantic.

        Args:
            region: The region to validate.
            bounds: The source image size.
            strict: If True, raise OutOfBoundsError on failure.
                If False, return False instead.

        Returns:
            True if the region is valid within bounds.

        Raises:
            OutOfBoundsError: If strict=True and region exceeds bounds.
        """
        is_valid = region.right <= bounds.width and region.bottom <= bounds.height

        if not is_valid and strict:
            violations: list[str] = []
            if region.right > bounds.width:
                violations.append(
                    f"right edge ({region.right}) exceeds width ({bounds.width})"
                )
            if region.bottom > bounds.height:
                violations.append(
                    f"bottom edge ({region.bottom}) exceeds height ({bounds.height})"
                )
            raise OutOfBoundsError(
                f"Region out of bounds: {'; '.join(violations)}",
                region=region,
                bounds=bounds,
            )

        return is_valid

    def is_within_bounds(self, region: Region, bounds: Size) -> bool:
        """Check if region is within bounds without raising."""
        return self.validate(region, bounds, strict=False)
