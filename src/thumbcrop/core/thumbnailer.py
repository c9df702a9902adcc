"""Thumbnail pipeline: decode, resolve the crop, resample and encode.

This module is the I/O side of thumbcrop. It decodes input with Pillow,
asks FitResolver where to crop, crops and resizes the pixels to the exact
target size with LANCZOS resampling, and encodes the result as JPEG, PNG or
WebP, either to bytes or to a file.

Metadata:
    Output carries no metadata unless ``keep_metadata=True``, in which case
    the source's EXIF block and ICC profile are copied through verbatim.
    The geometry engine itself never looks at metadata.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path
from typing import Any, Literal

from PIL import Image, ImageOps, UnidentifiedImageError

from thumbcrop.core.fit_resolver import (
    FitResolver,
    FitResolverProtocol,
    FitSpec,
    ResolvedFit,
)
from thumbcrop.exceptions import ImageDecodeError
from thumbcrop.geometry import Size
from thumbcrop.utils.logging import get_logger
from thumbcrop.vision.sampler import PixelSampler

OutputFormat = Literal["jpeg", "png", "webp"]

# Pillow format names per output format
_PIL_FORMATS: dict[str, str] = {"jpeg": "JPEG", "png": "PNG", "webp": "WEBP"}

# File extensions recognized when the format is inferred from a path
EXTENSION_FORMATS: dict[str, OutputFormat] = {
    ".jpg": "jpeg",
    ".jpeg": "jpeg",
    ".png": "png",
    ".webp": "webp",
}

# Extensions accepted as input by the batch runner
SUPPORTED_INPUT_EXTENSIONS: frozenset[str] = frozenset(
    {".jpg", ".jpeg", ".png", ".webp", ".bmp", ".gif", ".tif", ".tiff"}
)

# JPEG/WebP quality bounds (PIL accepts 1-100)
_QUALITY_MIN = 1
_QUALITY_MAX = 100

# Background used when flattening alpha for JPEG output
_JPEG_BACKGROUND = (255, 255, 255)

logger = get_logger(__name__)


@dataclass(frozen=True)
class Thumbnail:
    """Result of generating a thumbnail.

    Attributes:
        image: PIL Image of exactly the target size (RGB or RGBA).
        fit: Crop rectangle, scale factor and strategy that produced it.
        source_size: Dimensions of the decoded source image.
        source_info: The source image's ``info`` mapping (EXIF, ICC, ...),
            used only when metadata copy-through is requested.
    """

    image: Image.Image
    fit: ResolvedFit
    source_size: Size
    source_info: dict[str, Any] = field(default_factory=dict)


def load_image(source: Path | str | bytes) -> Image.Image:
    """Decode an image from a file path or an in-memory buffer.

    EXIF orientation is applied so the crop is computed on the image as it
    is displayed. The result is RGB, or RGBA when the source has alpha.

    Args:
        source: Path to an image file, or the encoded bytes of one.

    Returns:
        Decoded PIL Image, fully loaded.

    Raises:
        ImageDecodeError: If the input does not exist or is not a readable
            image.
    """
    path: Path | None = None
    try:
        if isinstance(source, bytes):
            image = Image.open(BytesIO(source))
        else:
            path = Path(source)
            if not path.exists():
                raise ImageDecodeError("File not found", path=path)
            image = Image.open(path)
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ImageDecodeError(f"Cannot decode image: {e}", path=path) from e

    transposed = ImageOps.exif_transpose(image)
    if transposed is not None:
        image = transposed

    return normalize_mode(image)


def normalize_mode(image: Image.Image) -> Image.Image:
    """Return image as RGB, or RGBA when it carries alpha or transparency."""
    if image.mode in ("RGB", "RGBA"):
        return image
    has_alpha = "A" in image.getbands() or "transparency" in image.info
    return image.convert("RGBA" if has_alpha else "RGB")


def format_for_path(path: Path) -> OutputFormat:
    """Infer the output format from a file extension.

    Raises:
        ValueError: If the extension is not .jpg/.jpeg/.png/.webp.
    """
    suffix = path.suffix.lower()
    if suffix not in EXTENSION_FORMATS:
        raise ValueError(
            f"Cannot infer output format from {path.name!r}; "
            f"use one of {sorted(EXTENSION_FORMATS)}"
        )
    return EXTENSION_FORMATS[suffix]


class ThumbnailEngine:
    """Generates cover-fit thumbnails with content-aware crop placement.

    Algorithm:
        1. Wrap the decoded pixels in a PixelSampler.
        2. Resolve crop + scale with FitResolver (entropy / attention / center).
        3. Crop and resize to exactly (target_width, target_height), LANCZOS.
        4. Encode on demand (JPEG, PNG, WebP).

    Example:
        >>> engine = ThumbnailEngine()
        >>> spec = FitSpec(target_width=256, target_height=256, strategy="attention")
        >>> thumb = engine.generate(load_image("input.png"), spec)
        >>> engine.save(thumb, "out.jpg")
    """

    __slots__ = ("_resolver",)

    def __init__(self, resolver: FitResolverProtocol | None = None) -> None:
        """Initialize the engine.

        Args:
            resolver: Optional fit resolver. Defaults to FitResolver with
                default search parameters.
        """
        self._resolver = resolver or FitResolver()

    def generate(self, image: Image.Image, spec: FitSpec) -> Thumbnail:
        """Crop and resize an image according to spec.

        Images in other modes (palette, grayscale, LA, CMYK) are converted to
        RGB or RGBA first, as load_image does.

        Args:
            image: Decoded source image.
            spec: Target size, strategy and upscale policy.

        Returns:
            Thumbnail of exactly the target size.

        Raises:
            SourceTooSmallError: If upscaling is needed and disallowed.
        """
        source_info = dict(image.info)
        image = normalize_mode(image)
        sampler = PixelSampler.from_image(image)
        resolved = self._resolver.resolve(sampler, spec)

        cropped = image.crop(resolved.crop.to_box())
        target = resolved.output_size.to_tuple()
        if cropped.size != target:
            cropped = cropped.resize(target, resample=Image.Resampling.LANCZOS)
        # Metadata is written only on request, from source_info
        cropped.info = {}

        logger.info(
            "Thumbnail generated",
            source=f"{sampler.width}x{sampler.height}",
            crop=resolved.crop.to_tuple(),
            scale_factor=round(resolved.scale_factor, 6),
            strategy=resolved.strategy.value,
            score=resolved.score,
        )

        return Thumbnail(
            image=cropped,
            fit=resolved,
            source_size=sampler.size,
            source_info=source_info,
        )

    def encode(
        self,
        thumbnail: Thumbnail,
        fmt: OutputFormat = "jpeg",
        *,
        quality: int = 80,
        keep_metadata: bool = False,
    ) -> bytes:
        """Encode a thumbnail.

        Args:
            thumbnail: Result of generate().
            fmt: "jpeg", "png" or "webp".
            quality: JPEG/WebP quality 1-100 (ignored for PNG).
            keep_metadata: Copy the source's EXIF and ICC profile.

        Returns:
            Encoded image bytes.

        Raises:
            ValueError: If fmt is unknown or quality is out of range.
        """
        if fmt not in _PIL_FORMATS:
            raise ValueError(f"Unsupported output format {fmt!r}")
        if not _QUALITY_MIN <= quality <= _QUALITY_MAX:
            raise ValueError(
                f"quality must be {_QUALITY_MIN}-{_QUALITY_MAX}, got {quality}"
            )

        image = thumbnail.image
        if fmt == "jpeg" and image.mode == "RGBA":
            background = Image.new("RGB", image.size, _JPEG_BACKGROUND)
            background.paste(image, mask=image.getchannel("A"))
            image = background

        save_kwargs: dict[str, Any] = {}
        if fmt in ("jpeg", "webp"):
            save_kwargs["quality"] = quality
        if keep_metadata:
            save_kwargs.update(self._metadata_kwargs(thumbnail.source_info))

        buffer = BytesIO()
        image.save(buffer, format=_PIL_FORMATS[fmt], **save_kwargs)
        return buffer.getvalue()

    def save(
        self,
        thumbnail: Thumbnail,
        path: Path | str,
        fmt: OutputFormat | None = None,
        *,
        quality: int = 80,
        keep_metadata: bool = False,
    ) -> Path:
        """Encode a thumbnail and write it to path.

        The format defaults to the one implied by the file extension.

        Returns:
            The written path.
        """
        path = Path(path)
        data = self.encode(
            thumbnail,
            fmt or format_for_path(path),
            quality=quality,
            keep_metadata=keep_metadata,
        )
        path.write_bytes(data)
        logger.debug("Thumbnail written", path=str(path), bytes=len(data))
        return path

    @staticmethod
    def _metadata_kwargs(info: dict[str, Any]) -> dict[str, Any]:
        kwargs: dict[str, Any] = {}
        if info.get("exif"):
            kwargs["exif"] = info["exif"]
        if info.get("icc_profile"):
            kwargs["icc_profile"] = info["icc_profile"]
        return kwargs
