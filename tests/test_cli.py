from pathlib import Path

import cv2
import numpy as np
import pandas as pd
import pytest

from resampling_eval.cli import config_from_args, main, parse_args
from resampling_eval.config import (
    DEFAULT_METHODS,
    DEFAULT_SCALE_FACTORS,
    InterpolationMethod,
    default_max_concurrency,
)


def _write_input(tmp_path: Path) -> Path:
    path = tmp_path / "sample.png"
    yy, xx = np.indices((24, 32))
    image = np.stack([xx * 8 % 256, yy * 10 % 256, (xx + yy) % 256], axis=-1).astype(np.uint8)
    assert cv2.imwrite(str(path), image)
    return path


def test_parse_args_defaults(tmp_path) -> None:
    args = parse_args([str(tmp_path / "in.png"), "-o", str(tmp_path / "out")])
    cfg = config_from_args(args)
    assert cfg.methods == DEFAULT_METHODS
    assert cfg.scale_factors == DEFAULT_SCALE_FACTORS
    assert cfg.max_concurrency == default_max_concurrency()
    assert 1 <= cfg.max_concurrency <= 8
    assert cfg.resolved_image_id == "in"
    assert not cfg.store_original
    assert cfg.show_scale_factor is None


def test_parse_args_overrides(tmp_path) -> None:
    args = parse_args(
        [
            str(tmp_path / "in.png"),
            "-o",
            str(tmp_path),
            "--workers",
            "3",
            "--methods",
            "nearest",
            "lanczos",
            "--scales",
            "0.5",
            "2",
            "--image-id",
            "run1",
            "--fmt",
            "jpg",
            "--orig-too",
            "--no-progress",
        ]
    )
    cfg = config_from_args(args)
    assert cfg.max_concurrency == 3
    assert cfg.methods == (InterpolationMethod.NEAREST, InterpolationMethod.LANCZOS)
    assert cfg.scale_factors == (0.5, 2.0)
    assert cfg.resolved_image_id == "run1"
    assert cfg.image_format == "jpg"
    assert cfg.store_original
    assert not cfg.show_progress


def test_main_runs_end_to_end(tmp_path, capsys) -> None:
    source = _write_input(tmp_path)
    out_dir = tmp_path / "out"

    main(
        [
            str(source),
            "-o",
            str(out_dir),
            "--workers",
            "2",
            "--methods",
            "nearest",
            "bicubic",
            "--scales",
            "0.5",
            "1.5",
            "--orig-too",
            "--show-scale",
            "1.5",
            "--no-progress",
        ]
    )

    result_dir = out_dir / "sample"
    assert (result_dir / "original_x1.0.png").exists()
    assert (result_dir / "bicubic_x1.5.png").exists()
    metrics = pd.read_csv(result_dir / "metrics.csv")
    assert len(metrics) == 4
    assert set(metrics["method"]) == {"nearest", "bicubic"}
    row = metrics[(metrics["method"] == "nearest") & (metrics["scale_factor"] == 0.5)].iloc[0]
    assert (row["width"], row["height"]) == (16, 12)
    printed = capsys.readouterr().out
    assert "4/4 jobs succeeded" in printed
    assert "psnr" in printed
    assert "best method per scale factor" in printed
    assert "results at x1.5" in printed
    best_section = printed.split("best method per scale factor")[1]
    best_lines = best_section.split("results at x1.5")[0].strip().splitlines()
    scale_lines = [line for line in best_lines if line[:1].isdigit()]
    assert len(scale_lines) == 2
    assert all("nearest" in line or "bicubic" in line for line in scale_lines)


def test_main_rejects_invalid_worker_count(tmp_path) -> None:
    source = _write_input(tmp_path)
    with pytest.raises(SystemExit) as excinfo:
        main([str(source), "-o", str(tmp_path / "out"), "--workers", "0", "--no-progress"])
    assert excinfo.value.code == 2
