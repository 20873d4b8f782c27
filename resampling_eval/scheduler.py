"""Bounded-concurrency job scheduling."""

from __future__ import annotations

import logging
import math
import threading
import time
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from typing import Callable, Deque, Iterable, List, Optional, Tuple, Union

from .buffers import PixelBuffer, scaled_dimension
from .config import InterpolationMethod
from .errors import SchedulerConfigError
from .interfaces import IResizeClient, IResultSink
from .metrics import MetricScores, compute_metrics

logger = logging.getLogger(__name__)

MetricEngine = Callable[[PixelBuffer, PixelBuffer], MetricScores]


@dataclass(frozen=True)
class Job:
    """One (interpolation method, scale factor) unit of work."""

    method: InterpolationMethod
    scale_factor: float

    @property
    def key(self) -> Tuple[InterpolationMethod, float]:
        return self.method, self.scale_factor


@dataclass(frozen=True, eq=False)
class JobResult:
    """Scores of a finished job and the forward-scaled image.

    The metrics describe the round trip (scaled, then resized back to the
    original size); ``resized_buffer`` holds the forward-scaled image.
    """

    method: InterpolationMethod
    scale_factor: float
    processing_time_ms: float
    psnr: float
    ssim: float
    fsim: float
    resized_buffer: PixelBuffer

    @property
    def key(self) -> Tuple[InterpolationMethod, float]:
        return self.method, self.scale_factor


@dataclass(frozen=True, eq=False)
class JobError:
    """A job that terminated with an exception."""

    method: InterpolationMethod
    scale_factor: float
    cause: BaseException

    @property
    def key(self) -> Tuple[InterpolationMethod, float]:
        return self.method, self.scale_factor


JobOutcome = Union[JobResult, JobError]


@dataclass
class SchedulerState:
    """Mutable bookkeeping of one run, guarded by the scheduler lock."""

    queue: Deque[Job]
    total_count: int
    active_count: int = 0
    completed_count: int = 0
    errors: List[JobError] = field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.completed_count == self.total_count


@dataclass(frozen=True)
class CompletionReport:
    """Terminal signal of :meth:`JobScheduler.run`."""

    completed_count: int
    total_count: int
    errors: Tuple[JobError, ...]
    elapsed_s: float

    @property
    def succeeded_count(self) -> int:
        return self.completed_count - len(self.errors)

    @property
    def all_failed(self) -> bool:
        return self.total_count > 0 and self.succeeded_count == 0


def build_job_matrix(
    methods: Iterable[InterpolationMethod],
    scale_factors: Iterable[float],
) -> Tuple[Job, ...]:
    """Cross product of scale factors and methods, scale-factor major.

    Duplicates are dropped while keeping first-seen order.
    """

    unique_methods: List[InterpolationMethod] = []
    for method in methods:
        try:
            method = InterpolationMethod(method)
        except ValueError as exc:
            raise SchedulerConfigError(f"Unknown interpolation method: {method!r}") from exc
        if method not in unique_methods:
            unique_methods.append(method)

    unique_factors: List[float] = []
    for factor in scale_factors:
        try:
            factor = float(factor)
        except (TypeError, ValueError) as exc:
            raise SchedulerConfigError(f"Invalid scale factor: {factor!r}") from exc
        if not math.isfinite(factor) or factor <= 0:
            raise SchedulerConfigError(f"Scale factor must be positive, got {factor}")
        if factor not in unique_factors:
            unique_factors.append(factor)

    if not unique_methods:
        raise SchedulerConfigError("At least one interpolation method is required")
    if not unique_factors:
        raise SchedulerConfigError("At least one scale factor is required")
    return tuple(Job(method, factor) for factor in unique_factors for method in unique_methods)


class JobScheduler:
    """Run every configured job with at most ``max_concurrency`` in flight.

    Jobs are popped FIFO. Each completion frees a slot and triggers the next
    dispatch; there is no polling. Job failures are reported to the sink and in
    the :class:`CompletionReport`, never raised.
    """

    def __init__(
        self,
        resize_client: IResizeClient,
        sink: IResultSink,
        metric_engine: MetricEngine = compute_metrics,
    ) -> None:
        self._resize = resize_client
        self._sink = sink
        self._metrics = metric_engine
        self._lock = threading.Lock()
        self._sink_lock = threading.Lock()
        self._jobs: Tuple[Job, ...] = ()
        self._max_concurrency = 0
        self._state: Optional[SchedulerState] = None
        self._executor: Optional[ThreadPoolExecutor] = None
        self._original: Optional[PixelBuffer] = None
        self._finished = threading.Event()

    @property
    def jobs(self) -> Tuple[Job, ...]:
        return self._jobs

    @property
    def max_concurrency(self) -> int:
        return self._max_concurrency

    @property
    def state(self) -> Optional[SchedulerState]:
        return self._state

    def configure(
        self,
        max_concurrency: int,
        methods: Iterable[InterpolationMethod],
        scale_factors: Iterable[float],
    ) -> None:
        if isinstance(max_concurrency, bool) or not isinstance(max_concurrency, int):
            raise SchedulerConfigError(f"max_concurrency must be an integer, got {max_concurrency!r}")
        if max_concurrency < 1:
            raise SchedulerConfigError(f"max_concurrency must be >= 1, got {max_concurrency}")
        jobs = build_job_matrix(methods, scale_factors)
        with self._lock:
            if self._state is not None and not self._state.is_terminal:
                raise RuntimeError("Cannot reconfigure while a run is in progress")
            self._jobs = jobs
            self._max_concurrency = max_concurrency

    def run(self, original: PixelBuffer) -> CompletionReport:
        if not self._jobs:
            raise SchedulerConfigError("configure() must be called before run()")
        if not isinstance(original, PixelBuffer):
            raise TypeError(f"original must be a PixelBuffer, got {type(original).__name__}")
        with self._lock:
            if self._state is not None and not self._state.is_terminal:
                raise RuntimeError("A run is already in progress")
            self._state = SchedulerState(queue=deque(self._jobs), total_count=len(self._jobs))
            self._finished.clear()

        logger.info(
            "Dispatching %d jobs on a %dx%d image with up to %d workers",
            len(self._jobs),
            original.width,
            original.height,
            self._max_concurrency,
        )
        start = time.perf_counter()
        self._original = original
        try:
            with ThreadPoolExecutor(
                max_workers=self._max_concurrency, thread_name_prefix="resample-job"
            ) as executor:
                self._executor = executor
                self._dispatch()
                self._finished.wait()
        except BaseException:
            # leave the scheduler runnable again
            with self._lock:
                self._state = None
            raise
        finally:
            self._executor = None
            self._original = None
        elapsed = time.perf_counter() - start

        state = self._state
        report = CompletionReport(
            completed_count=state.completed_count,
            total_count=state.total_count,
            errors=tuple(state.errors),
            elapsed_s=elapsed,
        )
        logger.info(
            "Finished %d/%d jobs in %.2fs (%d failed)",
            report.completed_count,
            report.total_count,
            report.elapsed_s,
            len(report.errors),
        )
        return report

    def _dispatch(self) -> None:
        while True:
            with self._lock:
                state = self._state
                if state.active_count >= self._max_concurrency or not state.queue:
                    return
                job = state.queue.popleft()
                state.active_count += 1
            future = self._executor.submit(self._execute, self._original, job)
            future.add_done_callback(partial(self._on_job_done, job))

    def _execute(self, original: PixelBuffer, job: Job) -> JobResult:
        width = scaled_dimension(original.width, job.scale_factor)
        height = scaled_dimension(original.height, job.scale_factor)
        scaled, elapsed_ms = self._resize.resize(original, width, height, job.method)
        round_trip, _ = self._resize.resize(scaled, original.width, original.height, job.method)
        scores = self._metrics(original, round_trip)
        return JobResult(
            method=job.method,
            scale_factor=job.scale_factor,
            processing_time_ms=elapsed_ms,
            psnr=scores.psnr,
            ssim=scores.ssim,
            fsim=scores.fsim,
            resized_buffer=scaled,
        )

    def _on_job_done(self, job: Job, future: "Future[JobResult]") -> None:
        exc = future.exception()
        outcome: JobOutcome
        if exc is None:
            outcome = future.result()
            logger.debug(
                "%s x%s done: psnr=%.2f ssim=%.4f fsim=%.4f",
                job.method.value,
                job.scale_factor,
                outcome.psnr,
                outcome.ssim,
                outcome.fsim,
            )
        else:
            outcome = JobError(job.method, job.scale_factor, exc)
            logger.warning("%s x%s failed: %s", job.method.value, job.scale_factor, exc)

        with self._lock:
            state = self._state
            state.active_count -= 1
            state.completed_count += 1
            if isinstance(outcome, JobError):
                state.errors.append(outcome)
            finished = state.is_terminal

        self._forward(outcome)
        if finished:
            self._finished.set()
        else:
            self._dispatch()

    def _forward(self, outcome: JobOutcome) -> None:
        with self._sink_lock:
            try:
                self._sink.accept(outcome)
            except Exception:
                logger.exception(
                    "Result sink rejected %s x%s", outcome.method.value, outcome.scale_factor
                )
