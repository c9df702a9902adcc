"""thumbcrop: content-aware thumbnail cropping.

Chooses the crop window of a cover-fit thumbnail by scoring candidate
windows with Shannon entropy or a saliency-weighted "attention" entropy.

Example:
    from thumbcrop import FitResolver, FitSpec, PixelSampler, Strategy

    sampler = PixelSampler.from_image(image)
    spec = FitSpec(target_width=256, target_height=256, strategy=Strategy.ATTENTION)
    resolved = FitResolver().resolve(sampler, spec)
    print(resolved.crop, resolved.scale_factor)
"""

from thumbcrop.core.crop_search import CropSearch, SearchResult
from thumbcrop.core.fit_resolver import FitResolver, FitSpec, ResolvedFit
from thumbcrop.exceptions import (
    ImageDecodeError,
    InvalidAspectError,
    InvalidImageError,
    InvalidRectangleError,
    OutOfBoundsError,
    SourceTooSmallError,
    ThumbcropError,
)
from thumbcrop.geometry import Region, Size
from thumbcrop.vision import PixelSampler, Strategy, score_window

__version__ = "0.3.0"

__all__ = [
    "CropSearch",
    "FitResolver",
    "FitSpec",
    "ImageDecodeError",
    "InvalidAspectError",
    "InvalidImageError",
    "InvalidRectangleError",
    "OutOfBoundsError",
    "PixelSampler",
    "Region",
    "ResolvedFit",
    "SearchResult",
    "Size",
    "SourceTooSmallError",
    "Strategy",
    "ThumbcropError",
    "__version__",
    "score_window",
]
