"""Vision module: pixel sampling and window scoring.

This module implements read-only pixel access and the two content-aware
scoring strategies (Shannon entropy and attention-weighted entropy) used by
the crop search.
"""

from __future__ import annotations

from thumbcrop.vision.sampler import PixelSampler, sampling_stride
from thumbcrop.vision.scoring import (
    AttentionParams,
    ScorePlanes,
    Strategy,
    luminance,
    saliency_weights,
    score_window,
    weighted_entropy,
)

__all__ = [
    "AttentionParams",
    "PixelSampler",
    "ScorePlanes",
    "Strategy",
    "luminance",
    "saliency_weights",
    "sampling_stride",
    "score_window",
    "weighted_entropy",
]
