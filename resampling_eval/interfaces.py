"""Core protocol interfaces for the scheduler's collaborators."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Tuple, Union

from .buffers import PixelBuffer
from .config import InterpolationMethod

if TYPE_CHECKING:
    from .scheduler import JobError, JobResult

    JobOutcome = Union[JobResult, JobError]


class IResizeClient(Protocol):
    """Resamples pixel buffers."""

    def resize(
        self,
        buffer: PixelBuffer,
        width: int,
        height: int,
        method: InterpolationMethod,
    ) -> Tuple[PixelBuffer, float]:
        """Return a new buffer of ``width`` x ``height`` and the elapsed milliseconds.

        Raises :class:`~resampling_eval.errors.ResizeError` for non-positive
        dimensions or when the backend fails.
        """


class IResultSink(Protocol):
    """Persists job outcomes."""

    def accept(self, outcome: "JobOutcome") -> None:
        """Store one :class:`JobResult` or :class:`JobError`."""

    def close(self) -> None:
        """Finalize the sink, flushing any buffered data."""
