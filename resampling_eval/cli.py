"""Command line entry point for the resampling evaluator."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import pandas as pd

from .builders import build_disk_sink, build_scheduler, build_sink
from .config import (
    DEFAULT_METHODS,
    DEFAULT_SCALE_FACTORS,
    EvaluationConfig,
    InterpolationMethod,
    default_max_concurrency,
)
from .errors import SchedulerConfigError
from .image_io import load_pixel_buffer
from .reporting import best_methods, comparison_table, load_results, rows_for_scale_factor

logger = logging.getLogger(__name__)

REPORTED_METRICS = ("psnr", "ssim", "fsim", "processing_time_ms")


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Create the CLI parser and return parsed arguments."""

    parser = argparse.ArgumentParser(description="Interpolation quality evaluator")
    parser.add_argument("input", type=Path)
    parser.add_argument("-o", "--out", type=Path, required=True)
    parser.add_argument("--workers", type=int, default=default_max_concurrency())
    parser.add_argument(
        "--methods",
        nargs="+",
        default=[m.value for m in DEFAULT_METHODS],
        choices=[m.value for m in InterpolationMethod],
    )
    parser.add_argument("--scales", nargs="+", type=float, default=list(DEFAULT_SCALE_FACTORS))
    parser.add_argument("--fmt", type=str, default="png", choices=["png", "jpg"])
    parser.add_argument("--jpgq", type=int, default=95)
    parser.add_argument("--image-id", type=str, default=None)
    parser.add_argument("--orig-too", action="store_true")
    parser.add_argument("--no-progress", action="store_true")
    parser.add_argument("--show-scale", type=float, default=None)
    parser.add_argument(
        "--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"]
    )
    return parser.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> EvaluationConfig:
    """Convert CLI arguments into :class:`EvaluationConfig`."""

    return EvaluationConfig(
        input_image=args.input,
        output_dir=args.out,
        image_id=args.image_id,
        max_concurrency=args.workers,
        methods=tuple(InterpolationMethod(m) for m in args.methods),
        scale_factors=tuple(args.scales),
        image_format=args.fmt,
        jpg_quality=args.jpgq,
        store_original=args.orig_too,
        show_progress=not args.no_progress,
        show_scale_factor=args.show_scale,
        log_level=args.log_level,
    )


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point used by ``python -m resampling_eval`` and scripts."""

    args = parse_args(argv)
    cfg = config_from_args(args)
    setup_logging(cfg.log_level)

    original = load_pixel_buffer(cfg.input_image)
    disk_sink = build_disk_sink(cfg)
    sink = build_sink(cfg, disk_sink)
    try:
        scheduler = build_scheduler(cfg, sink)
    except SchedulerConfigError as exc:
        sink.close()
        logger.error("Invalid configuration: %s", exc)
        sys.exit(2)

    if cfg.store_original:
        disk_sink.store_original(original)
    try:
        report = scheduler.run(original)
    finally:
        sink.close()

    print(
        f"Done. {report.succeeded_count}/{report.total_count} jobs succeeded "
        f"in {report.elapsed_s:.2f}s. Results: {disk_sink.directory}"
    )
    for error in report.errors:
        print(f"  FAILED {error.method.value} x{error.scale_factor}: {error.cause}")

    if report.succeeded_count:
        frame = load_results(cfg.output_dir, cfg.resolved_image_id)
        with pd.option_context("display.float_format", "{:.4f}".format):
            for metric in REPORTED_METRICS:
                print(f"\n{metric}")
                print(comparison_table(frame, metric).to_string())
            best = pd.DataFrame({metric: best_methods(frame, metric) for metric in REPORTED_METRICS})
            print("\nbest method per scale factor")
            print(best.to_string())
            if cfg.show_scale_factor is not None:
                rows = rows_for_scale_factor(frame, cfg.show_scale_factor)
                print(f"\nresults at x{cfg.show_scale_factor}")
                if rows.empty:
                    print("  (none)")
                else:
                    print(rows.drop(columns=["image_id"], errors="ignore").to_string(index=False))

    if report.all_failed:
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover
    main()
