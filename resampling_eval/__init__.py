"""Resampling quality evaluator package."""

from .buffers import PixelBuffer
from .config import (
    DEFAULT_METHODS,
    DEFAULT_SCALE_FACTORS,
    EvaluationConfig,
    InterpolationMethod,
    default_max_concurrency,
)
from .errors import MetricError, ResamplingEvalError, ResizeError, SchedulerConfigError
from .metrics import MetricScores, compute_metrics, fsim, psnr, ssim
from .resizers import OpenCVResizeClient
from .scheduler import CompletionReport, Job, JobError, JobResult, JobScheduler
from .sinks import DiskResultSink, MemoryResultSink
from .cli import main

__all__ = [
    "PixelBuffer",
    "InterpolationMethod",
    "EvaluationConfig",
    "DEFAULT_METHODS",
    "DEFAULT_SCALE_FACTORS",
    "default_max_concurrency",
    "ResamplingEvalError",
    "ResizeError",
    "MetricError",
    "SchedulerConfigError",
    "MetricScores",
    "compute_metrics",
    "psnr",
    "ssim",
    "fsim",
    "OpenCVResizeClient",
    "Job",
    "JobResult",
    "JobError",
    "CompletionReport",
    "JobScheduler",
    "MemoryResultSink",
    "DiskResultSink",
    "main",
]
