"""Window scoring: Shannon entropy and attention-weighted entropy.

Both content-aware strategies share one entropy core over a 256-bucket
luminance histogram. They differ only in how much each pixel contributes to
its bucket:

- ``entropy``: every pixel counts 1.
- ``attention``: every pixel counts ``1 + saliency``, where saliency rises
  with color saturation and with closeness to the skin-tone hue band. The
  weighted entropy is then scaled by the mean per-pixel mass, so saturated
  and skin-toned windows outscore neutral windows of equal tonal variety.

Luminance uses ITU-R BT.601 weights via OpenCV's RGB -> GRAY conversion.
Alpha is ignored.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import cv2
import numpy as np
import numpy.typing as npt
from pydantic import BaseModel, Field

from thumbcrop.exceptions import InvalidRectangleError
from thumbcrop.geometry import Region
from thumbcrop.vision.constants import (
    DEFAULT_MAX_SAMPLES,
    DEFAULT_MAX_WEIGHT,
    DEFAULT_SATURATION_GATE,
    DEFAULT_SKIN_GAIN,
    DEFAULT_SKIN_HUE_CENTER,
    DEFAULT_SKIN_HUE_HALF_WIDTH,
    LN2,
    LUMA_BUCKETS,
)
from thumbcrop.vision.sampler import sampling_stride

if TYPE_CHECKING:
    from thumbcrop.config import Settings
    from thumbcrop.vision.sampler import PixelSampler


class Strategy(str, Enum):
    """Crop positioning strategy."""

    ENTROPY = "entropy"  # Shannon entropy of luminance
    ATTENTION = "attention"  # Saliency-weighted entropy
    CENTER = "center"  # Fixed center position, no scoring

    @property
    def is_content_aware(self) -> bool:
        """Return True if the strategy scores pixels."""
        return self in _WEIGHT_FUNCTIONS


class AttentionParams(BaseModel, frozen=True):
    """Tunable policy for the attention strategy's per-pixel saliency.

    saliency = clip(S + skin_gain * bell(hue) * gate(S), 0, max_weight)

    where S is HSV saturation in [0, 1], ``bell`` is
    ``exp(-ln2 * (d / skin_hue_half_width)^2)`` for the circular hue distance
    d (degrees) to ``skin_hue_center``, and ``gate`` is
    ``clip(S / saturation_gate, 0, 1)`` so that near-gray pixels get almost
    no skin weight whatever their hue.
    """

    skin_hue_center: float = Field(DEFAULT_SKIN_HUE_CENTER, ge=0.0, lt=360.0)
    skin_hue_half_width: float = Field(DEFAULT_SKIN_HUE_HALF_WIDTH, gt=0.0, le=180.0)
    saturation_gate: float = Field(DEFAULT_SATURATION_GATE, gt=0.0, le=1.0)
    skin_gain: float = Field(DEFAULT_SKIN_GAIN, ge=0.0)
    max_weight: float = Field(DEFAULT_MAX_WEIGHT, gt=0.0)

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> AttentionParams:
        """Build parameters from application settings."""
        if config is None:
            from thumbcrop.config import settings as config  # noqa: PLC0415

        return cls(
            skin_hue_center=config.SKIN_HUE_CENTER,
            skin_hue_half_width=config.SKIN_HUE_HALF_WIDTH,
            saturation_gate=config.SATURATION_GATE,
            skin_gain=config.SKIN_GAIN,
            max_weight=config.MAX_ATTENTION_WEIGHT,
        )


WeightFunction = Callable[
    [npt.NDArray[np.uint8], AttentionParams], npt.NDArray[np.float32]
]


def luminance(rgb: npt.NDArray[np.uint8]) -> npt.NDArray[np.uint8]:
    """Convert an (H, W, 3|4) pixel array to (H, W) BT.601 luma."""
    return np.asarray(
        cv2.cvtColor(np.ascontiguousarray(rgb[..., :3]), cv2.COLOR_RGB2GRAY),
        dtype=np.uint8,
    )


def saliency_weights(
    rgb: npt.NDArray[np.uint8],
    params: AttentionParams,
) -> npt.NDArray[np.float32]:
    """Compute the per-pixel attention saliency in [0, params.max_weight].

    Args:
        rgb: (H, W, 3|4) uint8 pixels.
        params: Attention policy constants.

    Returns:
        (H, W) float32 saliency weights.
    """
    hsv = cv2.cvtColor(np.ascontiguousarray(rgb[..., :3]), cv2.COLOR_RGB2HSV)
    # OpenCV stores 8-bit hue as degrees / 2
    hue = hsv[..., 0].astype(np.float32) * 2.0
    saturation = hsv[..., 1].astype(np.float32) / 255.0

    diff = np.abs(hue - params.skin_hue_center) % 360.0
    distance = np.minimum(diff, 360.0 - diff)
    bell = np.exp(-LN2 * np.square(distance / params.skin_hue_half_width))
    gate = np.clip(saturation / params.saturation_gate, 0.0, 1.0)

    skin = params.skin_gain * bell * gate
    return np.clip(saturation + skin, 0.0, params.max_weight).astype(np.float32)


def _attention_mass(
    rgb: npt.NDArray[np.uint8],
    params: AttentionParams,
) -> npt.NDArray[np.float32]:
    return (1.0 + saliency_weights(rgb, params)).astype(np.float32)


# Strategy -> optional per-pixel mass. None means a flat count of 1.
_WEIGHT_FUNCTIONS: dict[Strategy, WeightFunction | None] = {
    Strategy.ENTROPY: None,
    Strategy.ATTENTION: _attention_mass,
}


def weighted_entropy(
    luma: npt.NDArray[np.uint8],
    weights: npt.NDArray[np.float32] | None = None,
) -> float:
    """Shannon entropy in bits of a (optionally weighted) luminance histogram.

    Args:
        luma: uint8 luminance samples, any shape.
        weights: Per-sample mass of the same shape, or None for a flat 1.

    Returns:
        Entropy in [0, 8]. A single distinct value gives exactly 0.0, as does
        a window whose total mass is zero.

    Raises:
        InvalidRectangleError: If there are no samples.
    """
    values = luma.ravel()
    if values.size == 0:
        raise InvalidRectangleError("Cannot score an empty window")

    flat_weights = None if weights is None else weights.ravel().astype(np.float64)
    hist = np.bincount(values, weights=flat_weights, minlength=LUMA_BUCKETS)
    total = float(hist.sum())
    if total <= 0.0:
        return 0.0

    p = hist[hist > 0] / total
    # + 0.0 normalizes the -0.0 produced by a single bucket
    return float(-np.sum(p * np.log2(p))) + 0.0


@dataclass(frozen=True)
class ScorePlanes:
    """Per-pixel scoring inputs precomputed for an image or window.

    Luma and mass are per-pixel functions, so slicing the planes and
    recomputing them on the sliced pixels give the same values. CropSearch
    builds planes once per image when the image fits the sample budget, and
    once per strided candidate window otherwise.

    Attributes:
        strategy: Content-aware strategy the planes were built for.
        luma: (H, W) uint8 luminance.
        mass: (H, W) float32 per-pixel mass, or None for a flat count.
    """

    strategy: Strategy
    luma: npt.NDArray[np.uint8]
    mass: npt.NDArray[np.float32] | None

    @classmethod
    def build(
        cls,
        rgb: npt.NDArray[np.uint8],
        strategy: Strategy,
        attention: AttentionParams | None = None,
    ) -> ScorePlanes:
        """Compute planes for pixels under a content-aware strategy.

        Raises:
            ValueError: If strategy does not score content (e.g. center).
        """
        if strategy not in _WEIGHT_FUNCTIONS:
            raise ValueError(f"Strategy {strategy.value!r} does not score content")

        weight_fn = _WEIGHT_FUNCTIONS[strategy]
        mass = None
        if weight_fn is not None:
            mass = weight_fn(rgb, attention or AttentionParams())
        return cls(strategy=strategy, luma=luminance(rgb), mass=mass)

    def score(self, region: Region | None = None, stride: int = 1) -> float:
        """Score a window of the planes (the whole planes if region is None).

        Args:
            region: Window relative to the planes' origin.
            stride: Subsampling stride, applied from the window origin.

        Returns:
            Entropy in bits, times mean mass for weighted strategies.
        """
        if region is None:
            rows, cols = slice(None, None, stride), slice(None, None, stride)
        else:
            rows = slice(region.y, region.bottom, stride)
            cols = slice(region.x, region.right, stride)

        luma = self.luma[rows, cols]
        if self.mass is None:
            return weighted_entropy(luma)

        # Contiguous so the mean's summation order does not depend on slicing
        mass = np.ascontiguousarray(self.mass[rows, cols])
        if mass.size == 0:
            raise InvalidRectangleError("Cannot score an empty window")
        return weighted_entropy(luma, mass) * float(mass.mean(dtype=np.float64))


def score_window(
    sampler: PixelSampler,
    region: Region,
    strategy: Strategy,
    *,
    attention: AttentionParams | None = None,
    max_samples: int = DEFAULT_MAX_SAMPLES,
) -> float:
    """Score one window of an image under a content-aware strategy.

    Large windows are subsampled with a deterministic stride so that at most
    about ``max_samples`` pixels are read.

    Args:
        sampler: Source pixels.
        region: Window in source coordinates.
        strategy: ``Strategy.ENTROPY`` or ``Strategy.ATTENTION``.
        attention: Attention policy (defaults when None).
        max_samples: Pixel budget before subsampling.

    Returns:
        The window's score; higher is more interesting.

    Raises:
        OutOfBoundsError: If region exceeds the image.
        ValueError: If strategy does not score content.
    """
    stride = sampling_stride(region, max_samples)
    pixels = sampler.window(region, stride)
    return ScorePlanes.build(pixels, strategy, attention).score()
