"""Geometry module for thumbcrop.

This package provides the coordinate primitives and bounds validation used
by the sampler, the crop search and the fit resolver.

Key Components:
    - Primitives: Size, Region models in source pixel coordinates
    - Validators: Bounds checking and checked region construction

Example:
    from thumbcrop.geometry import GeometryValidator, Region, Size

    region = Region(x=100, y=0, width=500, height=500)
    bounds = Size(width=1000, height=500)
    GeometryValidator().validate(region, bounds)  # Raises if invalid
"""

from thumbcrop.geometry.primitives import Region, Size
from thumbcrop.geometry.validators import GeometryValidator, require_region

__all__ = [
    "GeometryValidator",
    "Region",
    "Size",
    "require_region",
]
