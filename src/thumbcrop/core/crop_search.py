"""Content-aware crop window search.

Given a source image and a target aspect ratio, the crop window's size is
fixed (the largest rectangle of that aspect inside the source) and only its
position along the axis with slack is free. The search slides the window in
fixed steps, scores every candidate, and keeps the best one.

Algorithm:
    1. window = fit_window(source, target_aspect)
    2. If window == source, return the full image (nothing to choose).
    3. step = max(min_stride, round(slack * stride_fraction)); candidate
       offsets are 0, step, 2*step, ... <= slack.
    4. Score each candidate; highest score wins, ties go to the offset
       nearest the center, then to the smaller offset.

The search is pure: it never logs and never writes to the sampler's pixels.
"""

from __future__ import annotations

import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from thumbcrop.exceptions import InvalidAspectError
from thumbcrop.geometry import Region, Size
from thumbcrop.vision.constants import (
    DEFAULT_MAX_SAMPLES,
    DEFAULT_MIN_STRIDE,
    DEFAULT_STRIDE_FRACTION,
)
from thumbcrop.vision.sampler import sampling_stride
from thumbcrop.vision.scoring import AttentionParams, ScorePlanes, Strategy

if TYPE_CHECKING:
    from thumbcrop.config import Settings
    from thumbcrop.vision.sampler import PixelSampler


class SearchParams(BaseModel, frozen=True):
    """Precision/performance tunables for the candidate search.

    Attributes:
        stride_fraction: Candidate step as a fraction of the slack range.
        min_stride: Smallest candidate step in pixels.
        max_samples: Pixel budget per scored window; larger windows are
            subsampled with a deterministic stride.
        max_workers: Threads used to score candidates (1 = serial).
        attention: Policy constants for the attention strategy.
    """

    stride_fraction: float = Field(DEFAULT_STRIDE_FRACTION, gt=0.0, le=1.0)
    min_stride: int = Field(DEFAULT_MIN_STRIDE, ge=1)
    max_samples: int = Field(DEFAULT_MAX_SAMPLES, ge=1)
    max_workers: int = Field(1, ge=1)
    attention: AttentionParams = Field(default_factory=AttentionParams)

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> SearchParams:
        """Build parameters from application settings."""
        if config is None:
            from thumbcrop.config import settings as config  # noqa: PLC0415

        return cls(
            stride_fraction=config.SEARCH_STRIDE_FRACTION,
            min_stride=config.SEARCH_MIN_STRIDE,
            max_samples=config.SEARCH_MAX_SAMPLES,
            max_workers=max(1, config.SEARCH_MAX_WORKERS),
            attention=AttentionParams.from_settings(config),
        )


@dataclass(frozen=True)
class SearchResult:
    """Outcome of a crop search.

    Attributes:
        region: The chosen crop window in source coordinates.
        score: Winning score, or None when no scoring took place
            (aspect already matched, or a positional strategy).
        candidates: Number of candidate positions considered.
        step: Candidate step in pixels (0 when there was no slack).
    """

    region: Region
    score: float | None
    candidates: int
    step: int


def check_aspect(target_aspect: float) -> None:
    """Raise InvalidAspectError unless target_aspect is positive and finite."""
    if not math.isfinite(target_aspect) or target_aspect <= 0:
        raise InvalidAspectError(target_aspect)


def fit_window(source: Size, target_aspect: float) -> Size:
    """Return the largest size with target_aspect that fits inside source.

    One dimension always equals the source's; the other is rounded to the
    nearest whole pixel and kept within [1, source].

    Raises:
        InvalidAspectError: If target_aspect is not positive and finite.
    """
    check_aspect(target_aspect)
    if source.aspect_ratio > target_aspect:
        width = min(source.width, max(1, round(source.height * target_aspect)))
        return Size(width=width, height=source.height)
    height = min(source.height, max(1, round(source.width / target_aspect)))
    return Size(width=source.width, height=height)


def candidate_offsets(slack: int, params: SearchParams) -> tuple[int, list[int]]:
    """Return (step, offsets) for sliding a window over ``slack`` pixels.

    Offsets are multiples of step in [0, slack]. When step does not divide
    slack, the last ``slack % step`` positions are not visited.
    """
    if slack <= 0:
        return 0, [0]
    step = max(params.min_stride, round(slack * params.stride_fraction))
    return step, list(range(0, slack + 1, step))


class CropSearch:
    """Finds the most interesting fixed-aspect crop window of an image.

    Example:
        >>> sampler = PixelSampler(pixels)
        >>> search = CropSearch(sampler)
        >>> region = search.find_crop(1.0, Strategy.ATTENTION)
    """

    __slots__ = ("_params", "_sampler")

    def __init__(
        self,
        sampler: PixelSampler,
        params: SearchParams | None = None,
    ) -> None:
        """Initialize the search.

        Args:
            sampler: Source pixels (borrowed read-only).
            params: Search tunables; defaults when None.
        """
        self._sampler = sampler
        self._params = params or SearchParams()

    @property
    def params(self) -> SearchParams:
        """Return the search tunables."""
        return self._params

    def find_crop(
        self,
        target_aspect: float,
        strategy: Strategy = Strategy.ENTROPY,
    ) -> Region:
        """Return the crop window for target_aspect under strategy.

        Raises:
            InvalidAspectError: If target_aspect is not positive and finite.
        """
        return self.search(target_aspect, strategy).region

    def search(
        self,
        target_aspect: float,
        strategy: Strategy = Strategy.ENTROPY,
    ) -> SearchResult:
        """Run the search and return the region with diagnostics.

        Raises:
            InvalidAspectError: If target_aspect is not positive and finite.
        """
        source = self._sampler.size
        window = fit_window(source, target_aspect)
        slack_x = source.width - window.width
        slack_y = source.height - window.height

        if slack_x == 0 and slack_y == 0:
            return SearchResult(
                region=Region.full(source), score=None, candidates=1, step=0
            )

        horizontal = slack_x > 0
        slack = slack_x if horizontal else slack_y

        def place(offset: int) -> Region:
            if horizontal:
                return Region(x=offset, y=0, width=window.width, height=window.height)
            return Region(x=0, y=offset, width=window.width, height=window.height)

        if not strategy.is_content_aware:
            return SearchResult(
                region=place(slack // 2), score=None, candidates=1, step=0
            )

        step, offsets = candidate_offsets(slack, self._params)
        regions = [place(offset) for offset in offsets]
        scores = self._score_candidates(regions, window, strategy)

        best = max(
            range(len(offsets)),
            key=lambda i: (scores[i], -abs(2 * offsets[i] - slack), -offsets[i]),
        )
        return SearchResult(
            region=regions[best],
            score=scores[best],
            candidates=len(offsets),
            step=step,
        )

    def _score_candidates(
        self,
        regions: list[Region],
        window: Size,
        strategy: Strategy,
    ) -> list[float]:
        """Score every candidate region, in order.

        An image within the sample budget gets its planes built once and
        every candidate is sliced from them. Larger images build planes per
        candidate from the strided window only, so no temporary ever holds
        more than about ``max_samples`` pixels.
        """
        full = Region.full(self._sampler.size)
        attention = self._params.attention
        stride = sampling_stride(Region.full(window), self._params.max_samples)

        if sampling_stride(full, self._params.max_samples) == 1:
            planes = ScorePlanes.build(self._sampler.window(full), strategy, attention)

            def score(region: Region) -> float:
                return planes.score(region, stride)

        else:

            def score(region: Region) -> float:
                pixels = self._sampler.window(region, stride)
                return ScorePlanes.build(pixels, strategy, attention).score()

        if self._params.max_workers == 1 or len(regions) == 1:
            return [score(region) for region in regions]

        with ThreadPoolExecutor(max_workers=self._params.max_workers) as pool:
            return list(pool.map(score, regions))
