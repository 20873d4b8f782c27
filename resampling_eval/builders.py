"""Factory helpers for assembling the evaluator from configuration."""

from __future__ import annotations

from .config import EvaluationConfig
from .interfaces import IResizeClient, IResultSink
from .resizers import OpenCVResizeClient
from .scheduler import JobScheduler
from .sinks import DiskResultSink, ProgressResultSink


def build_resize_client(cfg: EvaluationConfig) -> IResizeClient:
    return OpenCVResizeClient()


def build_disk_sink(cfg: EvaluationConfig) -> DiskResultSink:
    return DiskResultSink(
        cfg.output_dir,
        cfg.resolved_image_id,
        cfg.image_format,
        cfg.jpg_quality,
    )


def build_sink(cfg: EvaluationConfig, disk_sink: DiskResultSink) -> IResultSink:
    """Wrap ``disk_sink`` with progress reporting when enabled."""

    if not cfg.show_progress:
        return disk_sink
    total = len(set(cfg.methods)) * len(set(cfg.scale_factors))
    return ProgressResultSink(disk_sink, total)


def build_scheduler(cfg: EvaluationConfig, sink: IResultSink) -> JobScheduler:
    """Create a :class:`JobScheduler` configured with the job matrix of ``cfg``."""

    scheduler = JobScheduler(build_resize_client(cfg), sink)
    scheduler.configure(cfg.max_concurrency, cfg.methods, cfg.scale_factors)
    return scheduler
