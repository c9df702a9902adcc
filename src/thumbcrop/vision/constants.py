"""Constants for the scoring and search modules.

The attention constants are policy, not derived values: they define what
"skin tone" means to the attention strategy. Override them per request via
AttentionParams or globally via the SKIN_* settings.
"""

from __future__ import annotations

import math

# Luminance histogram buckets (8-bit)
LUMA_BUCKETS: int = 256

# Supported channel counts for pixel buffers (RGB, RGBA)
SUPPORTED_CHANNELS: frozenset[int] = frozenset({3, 4})

# Attention: center of the skin-tone hue band, in degrees
DEFAULT_SKIN_HUE_CENTER: float = 30.0

# Attention: hue distance at which the skin bell drops to 0.5, in degrees
DEFAULT_SKIN_HUE_HALF_WIDTH: float = 25.0

# Attention: saturation below which skin weight fades linearly to zero
DEFAULT_SATURATION_GATE: float = 0.15

# Attention: multiplier on the skin bell
DEFAULT_SKIN_GAIN: float = 1.0

# Attention: upper clamp for a pixel's saliency weight
DEFAULT_MAX_WEIGHT: float = 2.0

# exp(-LN2 * (d / half_width)^2) == 0.5 at d == half_width
LN2: float = math.log(2.0)

# Search: candidate step as a fraction of the slack range
DEFAULT_STRIDE_FRACTION: float = 0.02

# Search: smallest candidate step in pixels
DEFAULT_MIN_STRIDE: int = 1

# Search: pixel budget per scored window before deterministic subsampling
DEFAULT_MAX_SAMPLES: int = 65536
