"""Exception types raised by the evaluator."""

from __future__ import annotations


class ResamplingEvalError(Exception):
    """Base class for evaluator errors."""


class ResizeError(ResamplingEvalError):
    """The resize backend could not produce the requested buffer."""


class MetricError(ResamplingEvalError):
    """Buffers handed to the metric engine are malformed or mismatched."""


class SchedulerConfigError(ResamplingEvalError, ValueError):
    """The scheduler was configured with an invalid job matrix or concurrency."""
