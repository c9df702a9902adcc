"""Tests for CLI runners."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import numpy as np
import pytest
from PIL import Image

from thumbcrop.cli.runners import (
    BatchResult,
    CropResult,
    crop_single,
    find_images,
    fit_to_dict,
    locate_crop,
    output_names,
    run_batch,
)
from thumbcrop.core.crop_search import SearchParams
from thumbcrop.core.fit_resolver import FitSpec, ResolvedFit
from thumbcrop.exceptions import ImageDecodeError
from thumbcrop.geometry import Region, Size
from thumbcrop.utils.logging import _add_correlation_ids
from thumbcrop.vision.scoring import Strategy


def _write_image(path: Path, size: tuple[int, int] = (120, 60)) -> Path:
    rng = np.random.default_rng(len(path.name))
    pixels = rng.integers(0, 256, size=(size[1], size[0], 3), dtype=np.uint8)
    Image.fromarray(pixels).save(path)
    return path


@pytest.fixture
def spec() -> FitSpec:
    return FitSpec(target_width=30, target_height=30)


@pytest.fixture
def resolved() -> ResolvedFit:
    return ResolvedFit(
        crop=Region(x=30, y=0, width=60, height=60),
        scale_factor=0.5,
        output_size=Size(width=30, height=30),
        strategy=Strategy.ENTROPY,
        score=4.25,
    )


class TestCropResult:
    """Tests for CropResult dataclass."""

    def test_success(self, resolved: ResolvedFit) -> None:
        result = CropResult(
            input_path=Path("in.png"), output_path=Path("out.jpg"), fit=resolved
        )
        assert result.success is True
        data = result.to_dict()
        assert data["input"] == "in.png"
        assert data["output"] == "out.jpg"
        assert data["output_size"] == {"width": 30, "height": 30}
        assert data["crop"] == {"x": 30, "y": 0, "width": 60, "height": 60}
        assert "error" not in data

    def test_failure(self) -> None:
        result = CropResult(
            input_path=Path("in.png"), output_path=None, fit=None, error="boom"
        )
        assert result.success is False
        assert result.to_dict() == {
            "input": "in.png",
            "output": None,
            "success": False,
            "error": "boom",
        }


class TestBatchResult:
    def test_counts(self, resolved: ResolvedFit) -> None:
        batch = BatchResult(
            batch_id="abc",
            results=[
                CropResult(Path("a"), Path("a.jpg"), resolved),
                CropResult(Path("b"), None, None, error="bad"),
            ],
        )
        assert batch.n_images == 2
        assert batch.n_errors == 1


class TestFitToDict:
    def test_serializes_geometry(self, resolved: ResolvedFit) -> None:
        assert fit_to_dict(resolved) == {
            "crop": {"x": 30, "y": 0, "width": 60, "height": 60},
            "scale_factor": 0.5,
            "output_size": {"width": 30, "height": 30},
            "strategy": "entropy",
            "score": 4.25,
        }


class TestLocateCrop:
    def test_resolves_without_writing(self, tmp_path: Path, spec: FitSpec) -> None:
        path = _write_image(tmp_path / "in.png")
        fit = locate_crop(input_path=path, spec=spec)
        assert (fit.crop.width, fit.crop.height) == (60, 60)
        assert sorted(tmp_path.iterdir()) == [path]

    def test_uses_params(self, tmp_path: Path, spec: FitSpec) -> None:
        path = _write_image(tmp_path / "in.png")
        fit = locate_crop(
            input_path=path, spec=spec, params=SearchParams(min_stride=60)
        )
        assert fit.crop.x in (0, 60)


class TestCropSingle:
    def test_writes_output(self, tmp_path: Path, spec: FitSpec) -> None:
        path = _write_image(tmp_path / "in.png")
        output = tmp_path / "nested" / "out.png"
        result = crop_single(input_path=path, output_path=output, spec=spec)
        assert result.success
        assert result.output_path == output
        with Image.open(output) as image:
            assert image.size == (30, 30)

    def test_decode_error_propagates(self, tmp_path: Path, spec: FitSpec) -> None:
        bad = tmp_path / "bad.png"
        bad.write_bytes(b"nope")
        with pytest.raises(ImageDecodeError):
            crop_single(input_path=bad, output_path=tmp_path / "o.jpg", spec=spec)


class TestFindImages:
    def test_filters_and_sorts(self, tmp_path: Path) -> None:
        for name in ("b.PNG", "a.jpg", "notes.txt", "c.webp"):
            (tmp_path / name).write_bytes(b"")
        (tmp_path / "sub.png").mkdir()
        assert [p.name for p in find_images(tmp_path)] == ["a.jpg", "b.PNG", "c.webp"]


class TestRunBatch:
    """Tests for run_batch."""

    def test_processes_all_images(self, tmp_path: Path, spec: FitSpec) -> None:
        input_dir = tmp_path / "in"
        input_dir.mkdir()
        for name in ("one.png", "two.png", "three.png"):
            _write_image(input_dir / name)
        output_dir = tmp_path / "out"

        batch = run_batch(
            input_dir=input_dir, output_dir=output_dir, spec=spec, fmt="webp", workers=2
        )

        assert batch.n_images == 3
        assert batch.n_errors == 0
        assert [r.input_path.name for r in batch.results] == [
            "one.png",
            "three.png",
            "two.png",
        ]
        assert sorted(p.name for p in output_dir.iterdir()) == [
            "one.webp",
            "three.webp",
            "two.webp",
        ]

    def test_failure_is_isolated(self, tmp_path: Path, spec: FitSpec) -> None:
        input_dir = tmp_path / "in"
        input_dir.mkdir()
        _write_image(input_dir / "good.png")
        (input_dir / "bad.jpg").write_bytes(b"\xff\xd8 truncated")

        batch = run_batch(input_dir=input_dir, output_dir=tmp_path / "out", spec=spec)

        by_name = {r.input_path.name: r for r in batch.results}
        assert by_name["good.png"].success
        assert not by_name["bad.jpg"].success
        assert by_name["bad.jpg"].error is not None
        assert batch.n_errors == 1

    def test_empty_directory(self, tmp_path: Path, spec: FitSpec) -> None:
        batch = run_batch(input_dir=tmp_path, output_dir=tmp_path / "out", spec=spec)
        assert batch.n_images == 0
        assert batch.batch_id

    def test_matches_single_crop(self, tmp_path: Path, spec: FitSpec) -> None:
        """Batch and single-image paths choose the same crop."""
        input_dir = tmp_path / "in"
        input_dir.mkdir()
        path = _write_image(input_dir / "img.png", (200, 90))
        single = locate_crop(input_path=path, spec=spec)
        batch = run_batch(input_dir=input_dir, output_dir=tmp_path / "out", spec=spec)
        assert batch.results[0].fit == single

    def test_each_image_carries_correlation_ids(
        self, tmp_path: Path, spec: FitSpec, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        input_dir = tmp_path / "in"
        input_dir.mkdir()
        for name in ("a.png", "b.png", "c.png"):
            (input_dir / name).write_bytes(b"")
        seen: dict[str, dict[str, Any]] = {}

        def record_context(*, input_path: Path, **_: Any) -> CropResult:
            event = _add_correlation_ids(logging.getLogger("test"), "info", {})
            seen[input_path.name] = dict(event)
            return CropResult(input_path=input_path, output_path=None, fit=None)

        monkeypatch.setattr("thumbcrop.cli.runners.crop_single", record_context)
        batch = run_batch(
            input_dir=input_dir, output_dir=tmp_path / "out", spec=spec, workers=2
        )

        assert seen == {
            name: {"batch_id": batch.batch_id, "image_id": name}
            for name in ("a.png", "b.png", "c.png")
        }

    def test_colliding_stems_get_distinct_outputs(
        self, tmp_path: Path, spec: FitSpec
    ) -> None:
        input_dir = tmp_path / "in"
        input_dir.mkdir()
        _write_image(input_dir / "a.png")
        _write_image(input_dir / "a.jpg", (90, 120))
        _write_image(input_dir / "b.png")
        output_dir = tmp_path / "out"

        batch = run_batch(
            input_dir=input_dir, output_dir=output_dir, spec=spec, workers=2
        )

        assert batch.n_errors == 0
        outputs = [r.output_path for r in batch.results]
        assert len(set(outputs)) == 3
        assert sorted(p.name for p in output_dir.iterdir()) == [
            "a.jpg.jpg",
            "a.png.jpg",
            "b.jpg",
        ]
        for result in batch.results:
            assert result.output_path is not None
            with Image.open(result.output_path) as image:
                assert image.size == (30, 30)


class TestOutputNames:
    def test_unique_stems_keep_stem(self) -> None:
        names = output_names([Path("x/one.png"), Path("x/two.jpg")], ".webp")
        assert names == {Path("x/one.png"): "one.webp", Path("x/two.jpg"): "two.webp"}

    def test_case_insensitive_collision(self) -> None:
        names = output_names([Path("Beach.PNG"), Path("beach.jpg")], ".png")
        assert names == {
            Path("Beach.PNG"): "Beach.PNG.png",
            Path("beach.jpg"): "beach.jpg.png",
        }
