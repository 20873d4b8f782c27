"""Tabular views over job results."""

from __future__ import annotations

from pathlib import Path
from typing import List

import pandas as pd

from .config import DEFAULT_METHODS, DEFAULT_SCALE_FACTORS
from .sinks import METRICS_FILENAME

METRIC_COLUMNS = ("psnr", "ssim", "fsim", "processing_time_ms")

# Metrics where a smaller value is better.
LOWER_IS_BETTER = frozenset({"processing_time_ms"})


def load_results(out_dir: Path, image_id: str) -> pd.DataFrame:
    """Read back the metrics table written by :class:`DiskResultSink`."""

    path = Path(out_dir) / image_id / METRICS_FILENAME
    if not path.exists():
        raise FileNotFoundError(f"No stored results for {image_id!r} at {path}")
    return pd.read_csv(path)


def _method_order(frame: pd.DataFrame) -> List[str]:
    known = [m.value for m in DEFAULT_METHODS]
    extra = sorted(set(frame["method"]) - set(known))
    return known + extra


def _check_metric(metric: str) -> None:
    if metric not in METRIC_COLUMNS:
        raise ValueError(f"Unknown metric {metric!r}; expected one of {METRIC_COLUMNS}")


def comparison_table(frame: pd.DataFrame, metric: str) -> pd.DataFrame:
    """Pivot ``metric`` into scale factors (rows) by methods (columns).

    Every default method and scale factor is present; missing cells are NaN.
    """

    _check_metric(metric)
    scale_factors = sorted(set(DEFAULT_SCALE_FACTORS) | set(frame["scale_factor"]))
    if frame.empty:
        table = pd.DataFrame(dtype=float)
    else:
        table = frame.pivot_table(
            index="scale_factor", columns="method", values=metric, aggfunc="first"
        )
    table = table.reindex(index=scale_factors, columns=_method_order(frame))
    table.index.name = "scale_factor"
    table.columns.name = "method"
    return table


def rows_for_scale_factor(frame: pd.DataFrame, scale_factor: float) -> pd.DataFrame:
    """Rows of one scale factor, in method order."""

    subset = frame[frame["scale_factor"] == scale_factor].copy()
    order = {name: rank for rank, name in enumerate(_method_order(frame))}
    subset["_rank"] = subset["method"].map(order)
    return subset.sort_values("_rank").drop(columns="_rank").reset_index(drop=True)


def best_methods(frame: pd.DataFrame, metric: str) -> pd.Series:
    """Best method per scale factor; ties go to the earlier method."""

    _check_metric(metric)
    table = comparison_table(frame, metric).dropna(how="all")
    if metric in LOWER_IS_BETTER:
        return table.idxmin(axis=1)
    return table.idxmax(axis=1)
