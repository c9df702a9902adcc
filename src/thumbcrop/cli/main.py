"""thumbcrop CLI - content-aware cover-fit thumbnails.

Command-line interface for generating thumbnails, inspecting crop
placement, and processing directories of images in parallel.
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer

from thumbcrop import __version__
from thumbcrop.config import settings
from thumbcrop.utils.logging import configure_logging, get_logger
from thumbcrop.vision.scoring import Strategy

app = typer.Typer(
    name="thumbcrop",
    help="thumbcrop: content-aware cover-fit thumbnails",
    add_completion=False,
)


class OutputFormat(str, Enum):
    """Output image format."""

    jpeg = "jpeg"
    png = "png"
    webp = "webp"


# =============================================================================
# Commands
# =============================================================================


@app.command()
def version(
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Show version information."""
    if json_output:
        typer.echo(json.dumps({"version": __version__}))
    else:
        typer.echo(f"thumbcrop {__version__}")


@app.command()
def crop(  # noqa: PLR0913
    input_path: Annotated[
        Path,
        typer.Argument(
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            help="Image to thumbnail (JPEG, PNG, WebP, ...)",
        ),
    ],
    output: Annotated[
        Path, typer.Option("--output", "-o", help="Output file path")
    ],
    width: Annotated[int, typer.Option("--width", "-W", min=1, help="Width")] = 256,
    height: Annotated[
        int, typer.Option("--height", "-H", min=1, help="Height")
    ] = 256,
    strategy: Annotated[
        Strategy | None,
        typer.Option("--strategy", "-s", help="Crop placement strategy"),
    ] = None,
    fmt: Annotated[
        OutputFormat | None,
        typer.Option("--format", "-f", help="Output format (default: from extension)"),
    ] = None,
    quality: Annotated[
        int,
        typer.Option("--quality", "-q", min=1, max=100, help="JPEG/WebP quality"),
    ] = settings.JPEG_QUALITY,
    keep_metadata: Annotated[
        bool,
        typer.Option("--keep-metadata", help="Copy source EXIF and ICC profile"),
    ] = False,
    allow_upscale: Annotated[
        bool,
        typer.Option(
            "--allow-upscale/--no-upscale",
            help="Enlarge crops smaller than the target",
        ),
    ] = settings.ALLOW_UPSCALE,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity (-v, -vv)"
        ),
    ] = 0,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Write one cover-fit thumbnail of INPUT_PATH."""
    from thumbcrop.cli.runners import crop_single  # noqa: PLC0415
    from thumbcrop.core.crop_search import SearchParams  # noqa: PLC0415
    from thumbcrop.core.fit_resolver import FitSpec  # noqa: PLC0415

    _configure_logging(verbose)
    logger = get_logger(__name__)

    try:
        spec = FitSpec(
            target_width=width,
            target_height=height,
            strategy=strategy or Strategy(settings.DEFAULT_STRATEGY),
            allow_upscale=allow_upscale,
        )
        logger.info(
            "Starting crop", input=str(input_path), strategy=spec.strategy.value
        )

        result = crop_single(
            input_path=input_path,
            output_path=output,
            spec=spec,
            fmt=fmt.value if fmt else None,
            quality=quality,
            keep_metadata=keep_metadata,
            params=SearchParams.from_settings(),
        )

        if json_output:
            typer.echo(json.dumps(result.to_dict(), indent=2))
        else:
            typer.echo(f"Wrote {result.output_path}")
            if result.fit is not None:
                typer.echo(f"Crop: {_format_crop(result.fit.crop.to_tuple())}")
                typer.echo(f"Scale: {result.fit.scale_factor:.4f}")
        raise typer.Exit(0)

    except typer.Exit:
        raise
    except Exception as e:
        logger.exception("Crop failed")
        if json_output:
            typer.echo(json.dumps({"error": str(e)}))
        else:
            typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


@app.command()
def locate(
    input_path: Annotated[
        Path,
        typer.Argument(
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            help="Image to analyse",
        ),
    ],
    width: Annotated[int, typer.Option("--width", "-W", min=1, help="Width")] = 256,
    height: Annotated[
        int, typer.Option("--height", "-H", min=1, help="Height")
    ] = 256,
    strategy: Annotated[
        Strategy | None,
        typer.Option("--strategy", "-s", help="Crop placement strategy"),
    ] = None,
    verbose: Annotated[
        int, typer.Option("--verbose", "-v", count=True, help="Increase verbosity")
    ] = 0,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Print the crop rectangle and scale factor without writing an image."""
    from thumbcrop.cli.runners import fit_to_dict, locate_crop  # noqa: PLC0415
    from thumbcrop.core.crop_search import SearchParams  # noqa: PLC0415
    from thumbcrop.core.fit_resolver import FitSpec  # noqa: PLC0415

    _configure_logging(verbose)
    logger = get_logger(__name__)

    try:
        spec = FitSpec(
            target_width=width,
            target_height=height,
            strategy=strategy or Strategy(settings.DEFAULT_STRATEGY),
        )
        fit = locate_crop(
            input_path=input_path,
            spec=spec,
            params=SearchParams.from_settings(),
        )

        if json_output:
            typer.echo(json.dumps(fit_to_dict(fit), indent=2))
        else:
            typer.echo(f"Crop: {_format_crop(fit.crop.to_tuple())}")
            typer.echo(f"Scale: {fit.scale_factor:.4f}")
            typer.echo(f"Strategy: {fit.strategy.value}")
            if fit.score is not None:
                typer.echo(f"Score: {fit.score:.4f}")
        raise typer.Exit(0)

    except typer.Exit:
        raise
    except Exception as e:
        logger.exception("Locate failed")
        if json_output:
            typer.echo(json.dumps({"error": str(e)}))
        else:
            typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


@app.command()
def batch(  # noqa: PLR0913
    input_dir: Annotated[
        Path,
        typer.Argument(
            exists=True,
            file_okay=False,
            dir_okay=True,
            readable=True,
            help="Directory of images",
        ),
    ],
    output_dir: Annotated[Path, typer.Argument(help="Directory for thumbnails")],
    width: Annotated[int, typer.Option("--width", "-W", min=1, help="Width")] = 256,
    height: Annotated[
        int, typer.Option("--height", "-H", min=1, help="Height")
    ] = 256,
    strategy: Annotated[
        Strategy | None,
        typer.Option("--strategy", "-s", help="Crop placement strategy"),
    ] = None,
    fmt: Annotated[
        OutputFormat, typer.Option("--format", "-f", help="Output format")
    ] = OutputFormat.jpeg,
    quality: Annotated[
        int,
        typer.Option("--quality", "-q", min=1, max=100, help="JPEG/WebP quality"),
    ] = settings.JPEG_QUALITY,
    keep_metadata: Annotated[
        bool,
        typer.Option("--keep-metadata", help="Copy source EXIF and ICC profile"),
    ] = False,
    allow_upscale: Annotated[
        bool,
        typer.Option(
            "--allow-upscale/--no-upscale",
            help="Enlarge crops smaller than the target",
        ),
    ] = settings.ALLOW_UPSCALE,
    workers: Annotated[
        int, typer.Option("--workers", "-w", min=1, help="Images processed in parallel")
    ] = settings.BATCH_WORKERS,
    verbose: Annotated[
        int, typer.Option("--verbose", "-v", count=True, help="Increase verbosity")
    ] = 0,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Thumbnail every image in INPUT_DIR into OUTPUT_DIR."""
    from thumbcrop.cli.runners import run_batch  # noqa: PLC0415
    from thumbcrop.core.crop_search import SearchParams  # noqa: PLC0415
    from thumbcrop.core.fit_resolver import FitSpec  # noqa: PLC0415

    _configure_logging(verbose)
    logger = get_logger(__name__)

    try:
        spec = FitSpec(
            target_width=width,
            target_height=height,
            strategy=strategy or Strategy(settings.DEFAULT_STRATEGY),
            allow_upscale=allow_upscale,
        )
        result = run_batch(
            input_dir=input_dir,
            output_dir=output_dir,
            spec=spec,
            fmt=fmt.value,
            quality=quality,
            keep_metadata=keep_metadata,
            workers=workers,
            params=SearchParams.from_settings(),
        )

        if json_output:
            typer.echo(
                json.dumps(
                    {
                        "batch_id": result.batch_id,
                        "n_images": result.n_images,
                        "n_errors": result.n_errors,
                        "results": [r.to_dict() for r in result.results],
                    },
                    indent=2,
                )
            )
        else:
            for r in result.results:
                if r.success:
                    typer.echo(f"{r.input_path.name} -> {r.output_path}")
                else:
                    typer.echo(f"{r.input_path.name}: Error: {r.error}", err=True)
            typer.echo(f"Processed {result.n_images} images, {result.n_errors} failed")

        raise typer.Exit(0 if result.n_errors == 0 else 1)

    except typer.Exit:
        raise
    except Exception as e:
        logger.exception("Batch failed")
        if json_output:
            typer.echo(json.dumps({"error": str(e)}))
        else:
            typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """thumbcrop: content-aware cover-fit thumbnails."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


def _configure_logging(verbose: int) -> None:
    """Configure logging based on verbosity level."""
    if verbose == 0:
        level = "WARNING"
    elif verbose == 1:
        level = "INFO"
    else:  # verbose >= 2
        level = "DEBUG"

    configure_logging(level=level)


def _format_crop(rect: tuple[int, int, int, int]) -> str:
    x, y, w, h = rect
    return f"x={x} y={y} width={w} height={h}"


if __name__ == "__main__":  # pragma: no cover
    app()
