"""Result sink implementations."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pandas as pd
from tqdm import tqdm

from .buffers import PixelBuffer
from .config import DEFAULT_METHODS, InterpolationMethod
from .image_io import save_pixel_buffer
from .interfaces import IResultSink
from .scheduler import JobError, JobOutcome, JobResult

logger = logging.getLogger(__name__)

METRICS_FILENAME = "metrics.csv"
ERRORS_FILENAME = "errors.csv"
ORIGINAL_METHOD = "original"

ResultKey = Tuple[InterpolationMethod, float]


def _method_rank(method: InterpolationMethod) -> int:
    return DEFAULT_METHODS.index(method) if method in DEFAULT_METHODS else len(DEFAULT_METHODS)


class MemoryResultSink(IResultSink):
    """Keep outcomes in memory, keyed by ``(method, scale_factor)``."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._outcomes: Dict[ResultKey, JobOutcome] = {}
        self._order: List[ResultKey] = []
        self.closed = False

    def accept(self, outcome: JobOutcome) -> None:
        with self._lock:
            if outcome.key in self._outcomes:
                raise KeyError(f"Duplicate outcome for {outcome.method.value} x{outcome.scale_factor}")
            self._outcomes[outcome.key] = outcome
            self._order.append(outcome.key)

    def close(self) -> None:
        self.closed = True

    def get(self, method: InterpolationMethod, scale_factor: float) -> Optional[JobOutcome]:
        with self._lock:
            return self._outcomes.get((InterpolationMethod(method), float(scale_factor)))

    @property
    def arrival_order(self) -> List[ResultKey]:
        with self._lock:
            return list(self._order)

    @property
    def results(self) -> List[JobResult]:
        with self._lock:
            return [o for o in self._outcomes.values() if isinstance(o, JobResult)]

    @property
    def errors(self) -> List[JobError]:
        with self._lock:
            return [o for o in self._outcomes.values() if isinstance(o, JobError)]

    def for_scale_factor(self, scale_factor: float) -> List[JobResult]:
        """Successful results of one scale factor in method order."""

        matches = [r for r in self.results if r.scale_factor == float(scale_factor)]
        return sorted(matches, key=lambda r: _method_rank(r.method))

    def __len__(self) -> int:
        with self._lock:
            return len(self._outcomes)


class DiskResultSink(IResultSink):
    """Write scaled images and a metrics table under ``out_dir/image_id``."""

    def __init__(
        self,
        out_dir: Path,
        image_id: str,
        image_format: str = "png",
        jpg_quality: int = 95,
    ) -> None:
        if not image_id:
            raise ValueError("image_id must not be empty")
        self._dir = Path(out_dir) / image_id
        self._dir.mkdir(parents=True, exist_ok=True)
        self._image_id = image_id
        self._fmt = image_format.lower()
        self._jpg_quality = jpg_quality
        self._rows: List[Dict[str, object]] = []
        self._error_rows: List[Dict[str, object]] = []

    @property
    def directory(self) -> Path:
        return self._dir

    def _image_path(self, method: str, scale_factor: float) -> Path:
        # repr keeps every distinct float distinct (0.12 vs 0.125).
        return self._dir / f"{method}_x{float(scale_factor)!r}.{self._fmt}"

    def store_original(self, original: PixelBuffer) -> Path:
        path = self._image_path(ORIGINAL_METHOD, 1.0)
        save_pixel_buffer(path, original, self._fmt, self._jpg_quality)
        return path

    def accept(self, outcome: JobOutcome) -> None:
        if isinstance(outcome, JobError):
            self._error_rows.append(
                {
                    "image_id": self._image_id,
                    "method": outcome.method.value,
                    "scale_factor": outcome.scale_factor,
                    "error_type": type(outcome.cause).__name__,
                    "error": str(outcome.cause),
                }
            )
            return

        path = self._image_path(outcome.method.value, outcome.scale_factor)
        save_pixel_buffer(path, outcome.resized_buffer, self._fmt, self._jpg_quality)
        self._rows.append(
            {
                "image_id": self._image_id,
                "method": outcome.method.value,
                "scale_factor": outcome.scale_factor,
                "width": outcome.resized_buffer.width,
                "height": outcome.resized_buffer.height,
                "processing_time_ms": outcome.processing_time_ms,
                "psnr": outcome.psnr,
                "ssim": outcome.ssim,
                "fsim": outcome.fsim,
                "file": path.name,
            }
        )

    def close(self) -> None:
        if self._rows:
            df = pd.DataFrame(self._rows)
            df["method_rank"] = df["method"].map(
                lambda m: _method_rank(InterpolationMethod(m))
            )
            df.sort_values(by=["scale_factor", "method_rank"], inplace=True)
            df.drop(columns=["method_rank"]).to_csv(self._dir / METRICS_FILENAME, index=False)
            logger.info("Wrote %d result rows to %s", len(df), self._dir / METRICS_FILENAME)
        if self._error_rows:
            pd.DataFrame(self._error_rows).to_csv(self._dir / ERRORS_FILENAME, index=False)


class ProgressResultSink(IResultSink):
    """Advance a progress bar for every outcome, then delegate."""

    def __init__(self, inner: IResultSink, total: int, desc: str = "Resampling jobs") -> None:
        self._inner = inner
        self._bar = tqdm(total=total, desc=desc, leave=False)

    def accept(self, outcome: JobOutcome) -> None:
        try:
            self._inner.accept(outcome)
        finally:
            self._bar.update(1)

    def close(self) -> None:
        self._bar.close()
        self._inner.close()
