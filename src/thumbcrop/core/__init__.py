"""Core algorithms for thumbcrop.

This package contains the crop search, the cover-fit resolver and the
thumbnail pipeline built on them.

Public API:
    - CropSearch: Finds the most interesting fixed-aspect crop window.
    - SearchParams: Stride and sampling tunables for the search.
    - SearchResult: Chosen region with score and candidate count.
    - FitResolver: Turns a FitSpec into crop rectangle + scale factor.
    - FitSpec / ResolvedFit: Request and result of fit resolution.
    - ThumbnailEngine: Decodes, crops, resamples and encodes thumbnails.
    - Thumbnail: Result container with image and geometry.
"""

from thumbcrop.core.crop_search import (
    CropSearch,
    SearchParams,
    SearchResult,
    candidate_offsets,
    fit_window,
)
from thumbcrop.core.fit_resolver import (
    FitResolver,
    FitResolverProtocol,
    FitSpec,
    ResolvedFit,
)
from thumbcrop.core.thumbnailer import (
    Thumbnail,
    ThumbnailEngine,
    load_image,
    normalize_mode,
)

__all__ = [
    "CropSearch",
    "FitResolver",
    "FitResolverProtocol",
    "FitSpec",
    "ResolvedFit",
    "SearchParams",
    "SearchResult",
    "Thumbnail",
    "ThumbnailEngine",
    "candidate_offsets",
    "fit_window",
    "load_image",
    "normalize_mode",
]
