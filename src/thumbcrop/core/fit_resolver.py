"""Cover-fit geometry resolution.

Turns (source size, target size, strategy) into the crop rectangle at source
resolution plus the uniform scale factor that maps it onto the target box.
Actual pixel resampling is left to the caller (see ThumbnailEngine).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol

from pydantic import BaseModel, Field

from thumbcrop.core.crop_search import CropSearch, SearchParams, fit_window
from thumbcrop.exceptions import SourceTooSmallError
from thumbcrop.geometry import Region, Size
from thumbcrop.vision.sampler import PixelSampler
from thumbcrop.vision.scoring import Strategy


class FitSpec(BaseModel, frozen=True):
    """Immutable description of one crop/resize request.

    Attributes:
        target_width: Output width in pixels.
        target_height: Output height in pixels.
        fit: Resize policy. Only "cover" is supported.
        strategy: How the crop window is positioned.
        allow_upscale: If False, a crop smaller than the target is rejected
            with SourceTooSmallError instead of being enlarged.
    """

    target_width: int = Field(..., gt=0)
    target_height: int = Field(..., gt=0)
    fit: Literal["cover"] = "cover"
    strategy: Strategy = Strategy.ENTROPY
    allow_upscale: bool = True

    @property
    def target_size(self) -> Size:
        """Return the output size."""
        return Size(width=self.target_width, height=self.target_height)

    @property
    def target_aspect(self) -> float:
        """Return target width / height."""
        return self.target_width / self.target_height


@dataclass(frozen=True)
class ResolvedFit:
    """Final crop-then-scale geometry.

    Attributes:
        crop: Crop rectangle in source coordinates.
        scale_factor: Uniform factor mapping the crop onto the target box.
            > 1 means the crop is enlarged.
        output_size: Target dimensions.
        strategy: Strategy that placed the crop.
        score: Score of the winning window, None if nothing was scored.
    """

    crop: Region
    scale_factor: float
    output_size: Size
    strategy: Strategy
    score: float | None = None

    @property
    def is_upscale(self) -> bool:
        """Return True if the crop must be enlarged to reach the target."""
        return self.scale_factor > 1.0


class FitResolverProtocol(Protocol):
    """Protocol for fit resolvers, allowing injection of alternatives in tests."""

    def resolve(self, sampler: PixelSampler, spec: FitSpec) -> ResolvedFit:
        """Resolve the crop and scale for an image."""
        ...


class FitResolver:
    """Resolves cover-fit geometry, delegating placement to CropSearch.

    Example:
        >>> resolver = FitResolver()
        >>> spec = FitSpec(target_width=256, target_height=256)
        >>> resolved = resolver.resolve(PixelSampler(pixels), spec)
        >>> resolved.crop, resolved.scale_factor
    """

    __slots__ = ("_params",)

    def __init__(self, params: SearchParams | None = None) -> None:
        """Initialize the resolver.

        Args:
            params: Search tunables passed to every CropSearch.
        """
        self._params = params or SearchParams()

    def resolve(self, sampler: PixelSampler, spec: FitSpec) -> ResolvedFit:
        """Compute the crop rectangle and scale factor for an image.

        Args:
            sampler: Source pixels.
            spec: Target size, strategy and upscale policy.

        Returns:
            ResolvedFit with the crop in source coordinates.

        Raises:
            SourceTooSmallError: If the crop would need enlarging and
                spec.allow_upscale is False.
        """
        result = CropSearch(sampler, self._params).search(
            spec.target_aspect, spec.strategy
        )
        return self._finish(result.region, spec, result.score)

    def resolve_geometry(self, source: Size, spec: FitSpec) -> ResolvedFit:
        """Resolve geometry without pixels, placing the crop at the center.

        Content-aware strategies need pixels; use resolve() for those.

        Raises:
            ValueError: If spec.strategy is content-aware.
            SourceTooSmallError: As for resolve().
        """
        if spec.strategy.is_content_aware:
            raise ValueError(
                f"Strategy {spec.strategy.value!r} needs pixels; use resolve()"
            )
        window = fit_window(source, spec.target_aspect)
        crop = Region(
            x=(source.width - window.width) // 2,
            y=(source.height - window.height) // 2,
            width=window.width,
            height=window.height,
        )
        return self._finish(crop, spec, None)

    def _finish(self, crop: Region, spec: FitSpec, score: float | None) -> ResolvedFit:
        scale_factor = spec.target_width / crop.width
        needs_upscale = (
            spec.target_width > crop.width or spec.target_height > crop.height
        )
        if needs_upscale and not spec.allow_upscale:
            raise SourceTooSmallError(
                crop_size=crop.size.to_tuple(),
                target_size=spec.target_size.to_tuple(),
            )
        return ResolvedFit(
            crop=crop,
            scale_factor=scale_factor,
            output_size=spec.target_size,
            strategy=spec.strategy,
            score=score,
        )
