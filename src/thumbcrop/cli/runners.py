"""CLI runners for single-image and batch thumbnail generation.

This module provides the execution logic for the CLI commands,
bridging the CLI interface to the core thumbcrop components.
"""

from __future__ import annotations

import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from thumbcrop.core.fit_resolver import FitResolver, FitSpec
from thumbcrop.core.thumbnailer import (
    EXTENSION_FORMATS,
    SUPPORTED_INPUT_EXTENSIONS,
    ThumbnailEngine,
    load_image,
)
from thumbcrop.utils.logging import (
    clear_correlation_context,
    get_logger,
    set_correlation_context,
)
from thumbcrop.vision.sampler import PixelSampler

if TYPE_CHECKING:
    from thumbcrop.core.crop_search import SearchParams
    from thumbcrop.core.fit_resolver import ResolvedFit
    from thumbcrop.core.thumbnailer import OutputFormat


@dataclass(frozen=True)
class CropResult:
    """Result from generating one thumbnail."""

    input_path: Path
    output_path: Path | None
    fit: ResolvedFit | None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "input": str(self.input_path),
            "output": str(self.output_path) if self.output_path else None,
            "success": self.success,
        }
        if self.fit is not None:
            data.update(fit_to_dict(self.fit))
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class BatchResult:
    """Result from a batch run."""

    batch_id: str
    results: list[CropResult]

    @property
    def n_images(self) -> int:
        return len(self.results)

    @property
    def n_errors(self) -> int:
        return sum(1 for r in self.results if not r.success)


def fit_to_dict(fit: ResolvedFit) -> dict[str, Any]:
    """Serialize resolved geometry for JSON output."""
    return {
        "crop": {
            "x": fit.crop.x,
            "y": fit.crop.y,
            "width": fit.crop.width,
            "height": fit.crop.height,
        },
        "scale_factor": fit.scale_factor,
        "output_size": {
            "width": fit.output_size.width,
            "height": fit.output_size.height,
        },
        "strategy": fit.strategy.value,
        "score": fit.score,
    }


def locate_crop(
    *,
    input_path: Path,
    spec: FitSpec,
    params: SearchParams | None = None,
) -> ResolvedFit:
    """Resolve the crop for an image without writing anything."""
    image = load_image(input_path)
    return FitResolver(params).resolve(PixelSampler.from_image(image), spec)


def crop_single(
    *,
    input_path: Path,
    output_path: Path,
    spec: FitSpec,
    fmt: OutputFormat | None = None,
    quality: int = 80,
    keep_metadata: bool = False,
    params: SearchParams | None = None,
) -> CropResult:
    """Generate and write one thumbnail.

    Raises:
        ThumbcropError: If the input cannot be decoded or resolved.
        ValueError: If the output format or quality is invalid.
    """
    engine = ThumbnailEngine(FitResolver(params))
    thumbnail = engine.generate(load_image(input_path), spec)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    engine.save(
        thumbnail,
        output_path,
        fmt,
        quality=quality,
        keep_metadata=keep_metadata,
    )
    return CropResult(input_path=input_path, output_path=output_path, fit=thumbnail.fit)


def find_images(input_dir: Path) -> list[Path]:
    """List supported image files directly inside input_dir, sorted by name."""
    return sorted(
        p
        for p in input_dir.iterdir()
        if p.is_file() and p.suffix.lower() in SUPPORTED_INPUT_EXTENSIONS
    )


def output_names(images: list[Path], extension: str) -> dict[Path, str]:
    """Map each input to a distinct output file name.

    Inputs normally keep their stem (``beach.png`` -> ``beach.jpg``). Inputs
    whose stems collide, compared case-insensitively, also keep their source
    suffix (``a.png`` -> ``a.png.jpg``, ``a.jpg`` -> ``a.jpg.jpg``).
    """
    stems: dict[str, int] = {}
    for path in images:
        key = path.stem.lower()
        stems[key] = stems.get(key, 0) + 1

    names: dict[Path, str] = {}
    for path in images:
        if stems[path.stem.lower()] > 1:
            names[path] = f"{path.stem}.{path.suffix[1:]}{extension}"
        else:
            names[path] = f"{path.stem}{extension}"
    return names


def run_batch(  # noqa: PLR0913
    *,
    input_dir: Path,
    output_dir: Path,
    spec: FitSpec,
    fmt: OutputFormat = "jpeg",
    quality: int = 80,
    keep_metadata: bool = False,
    workers: int = 4,
    params: SearchParams | None = None,
) -> BatchResult:
    """Generate thumbnails for every image in input_dir, in parallel.

    Each image is an independent computation; a failure is recorded in its
    CropResult and does not affect the others. Results keep input order.
    Output names come from output_names(), so inputs sharing a stem never
    overwrite each other.
    """
    logger = get_logger(__name__)
    batch_id = uuid.uuid4().hex[:12]
    images = find_images(input_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    extension = next(ext for ext, f in EXTENSION_FORMATS.items() if f == fmt)
    names = output_names(images, extension)

    logger.info(
        "Starting batch",
        batch_id=batch_id,
        n_images=len(images),
        workers=workers,
        strategy=spec.strategy.value,
    )

    def process(input_path: Path) -> CropResult:
        set_correlation_context(batch_id=batch_id, image_id=input_path.name)
        output_path = output_dir / names[input_path]
        try:
            return crop_single(
                input_path=input_path,
                output_path=output_path,
                spec=spec,
                fmt=fmt,
                quality=quality,
                keep_metadata=keep_metadata,
                params=params,
            )
        except Exception as e:
            logger.exception("Thumbnail failed", path=str(input_path))
            return CropResult(
                input_path=input_path, output_path=None, fit=None, error=str(e)
            )
        finally:
            clear_correlation_context()

    with ThreadPoolExecutor(max_workers=max(1, workers)) as pool:
        results = list(pool.map(process, images))

    batch = BatchResult(batch_id=batch_id, results=results)
    logger.info(
        "Batch finished",
        batch_id=batch_id,
        n_images=batch.n_images,
        n_errors=batch.n_errors,
    )
    return batch

