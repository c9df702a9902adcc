"""thumbcrop configuration using pydantic-settings.

All configuration is strongly typed and supports environment variables
and .env files. The region-selection core never reads these values
directly; callers turn them into request-scoped parameter objects via
``SearchParams.from_settings()`` and ``AttentionParams.from_settings()``.
"""

from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigError(Exception):
    """Raised when a configuration value is present but unusable.

    Example:
        >>> Settings(SEARCH_STRIDE_FRACTION=0.0, _env_file=None)  # doctest: +SKIP
        ConfigError: SEARCH_STRIDE_FRACTION must be in (0, 1], got 0.0.
    """

    def __init__(self, key_name: str, detail: str) -> None:
        """Initialize configuration error.

        Args:
            key_name: Name of the offending setting.
            detail: What is wrong with it.
        """
        self.key_name = key_name
        self.detail = detail
        super().__init__(f"{key_name} {detail}.")


class Settings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"  # "console" or "json"

    # Crop search
    SEARCH_STRIDE_FRACTION: float = 0.02  # candidate step as a fraction of slack
    SEARCH_MIN_STRIDE: int = 1  # smallest candidate step in pixels
    SEARCH_MAX_SAMPLES: int = 65536  # per-window pixel budget before subsampling
    SEARCH_MAX_WORKERS: int = 1  # threads scoring candidates of one image

    # Attention weighting policy
    SKIN_HUE_CENTER: float = 30.0  # degrees
    SKIN_HUE_HALF_WIDTH: float = 25.0  # degrees, bell falls to 0.5 here
    SATURATION_GATE: float = 0.15  # below this saturation skin weight fades out
    SKIN_GAIN: float = 1.0
    MAX_ATTENTION_WEIGHT: float = 2.0

    # Output
    DEFAULT_STRATEGY: Literal["entropy", "attention", "center"] = "entropy"
    ALLOW_UPSCALE: bool = True
    JPEG_QUALITY: int = 80
    BATCH_WORKERS: int = 4

    @model_validator(mode="after")
    def _check_ranges(self) -> "Settings":
        if not 0.0 < self.SEARCH_STRIDE_FRACTION <= 1.0:
            raise ConfigError(
                "SEARCH_STRIDE_FRACTION",
                f"must be in (0, 1], got {self.SEARCH_STRIDE_FRACTION}",
            )
        if self.SEARCH_MIN_STRIDE < 1:
            raise ConfigError(
                "SEARCH_MIN_STRIDE", f"must be >= 1, got {self.SEARCH_MIN_STRIDE}"
            )
        if self.SEARCH_MAX_SAMPLES < 1:
            raise ConfigError(
                "SEARCH_MAX_SAMPLES", f"must be >= 1, got {self.SEARCH_MAX_SAMPLES}"
            )
        if self.SKIN_HUE_HALF_WIDTH <= 0:
            raise ConfigError(
                "SKIN_HUE_HALF_WIDTH",
                f"must be positive, got {self.SKIN_HUE_HALF_WIDTH}",
            )
        if self.SATURATION_GATE <= 0:
            raise ConfigError(
                "SATURATION_GATE", f"must be positive, got {self.SATURATION_GATE}"
            )
        return self


# Singleton instance for import convenience
settings = Settings()
