import math
from typing import Dict, List

import numpy as np
import pandas as pd
import pytest

from resampling_eval.config import DEFAULT_SCALE_FACTORS, InterpolationMethod
from resampling_eval.reporting import (
    best_methods,
    comparison_table,
    load_results,
    rows_for_scale_factor,
)

COLUMNS = ["method", "scale_factor", "width", "height", "processing_time_ms", "psnr", "ssim", "fsim"]


def _row(method: InterpolationMethod, scale: float, psnr: float, time_ms: float = 1.0) -> Dict[str, object]:
    return {
        "method": method.value,
        "scale_factor": scale,
        "width": 3,
        "height": 2,
        "processing_time_ms": time_ms,
        "psnr": psnr,
        "ssim": 0.5,
        "fsim": 0.7,
    }


def _frame(rows: List[Dict[str, object]]) -> pd.DataFrame:
    return pd.DataFrame(rows, columns=COLUMNS)


@pytest.fixture
def frame() -> pd.DataFrame:
    return _frame(
        [
            _row(InterpolationMethod.LANCZOS, 0.5, 31.0, time_ms=4.0),
            _row(InterpolationMethod.NEAREST, 0.5, 25.0, time_ms=0.5),
            _row(InterpolationMethod.BILINEAR, 2.0, math.inf),
            _row(InterpolationMethod.BICUBIC, 2.0, 40.0),
        ]
    )


def test_comparison_table_covers_all_methods_and_scales(frame) -> None:
    table = comparison_table(frame, "psnr")
    assert list(table.columns) == ["nearest", "bilinear", "bicubic", "lanczos"]
    assert list(table.index) == list(DEFAULT_SCALE_FACTORS)
    assert table.loc[0.5, "lanczos"] == 31.0
    assert table.loc[2.0, "bilinear"] == math.inf
    assert np.isnan(table.loc[0.25, "nearest"])
    assert np.isnan(table.loc[0.5, "bicubic"])


def test_comparison_table_keeps_extra_scale_factors() -> None:
    frame = _frame([_row(InterpolationMethod.NEAREST, 3.0, 20.0)])
    table = comparison_table(frame, "ssim")
    assert 3.0 in table.index
    assert table.loc[3.0, "nearest"] == 0.5


def test_comparison_table_of_no_results() -> None:
    table = comparison_table(_frame([]), "fsim")
    assert table.isna().all().all()
    assert table.shape == (len(DEFAULT_SCALE_FACTORS), 4)


def test_comparison_table_rejects_unknown_metric(frame) -> None:
    with pytest.raises(ValueError):
        comparison_table(frame, "mse")


def test_rows_for_scale_factor_are_in_method_order(frame) -> None:
    rows = rows_for_scale_factor(frame, 0.5)
    assert list(rows["method"]) == ["nearest", "lanczos"]


def test_best_methods(frame) -> None:
    best_psnr = best_methods(frame, "psnr")
    assert best_psnr.to_dict() == {0.5: "lanczos", 2.0: "bilinear"}
    fastest = best_methods(frame, "processing_time_ms")
    assert fastest[0.5] == "nearest"
    # equal times: the earlier method wins
    assert fastest[2.0] == "bilinear"


def test_load_results_round_trip(tmp_path, frame) -> None:
    (tmp_path / "img").mkdir()
    frame.to_csv(tmp_path / "img" / "metrics.csv", index=False)
    loaded = load_results(tmp_path, "img")
    assert comparison_table(loaded, "psnr").loc[2.0, "bilinear"] == math.inf


def test_load_results_missing(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_results(tmp_path, "nothing")
