"""Configuration models for the resampling evaluator."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple


class InterpolationMethod(str, Enum):
    """Supported interpolation methods."""

    NEAREST = "nearest"
    BILINEAR = "bilinear"
    BICUBIC = "bicubic"
    LANCZOS = "lanczos"


DEFAULT_METHODS: Tuple[InterpolationMethod, ...] = (
    InterpolationMethod.NEAREST,
    InterpolationMethod.BILINEAR,
    InterpolationMethod.BICUBIC,
    InterpolationMethod.LANCZOS,
)

DEFAULT_SCALE_FACTORS: Tuple[float, ...] = (0.25, 0.5, 0.75, 1.25, 1.5, 1.75, 2.0)

MAX_DEFAULT_CONCURRENCY = 8


def default_max_concurrency() -> int:
    """Number of parallel jobs used when none is requested."""

    return min(os.cpu_count() or 2, MAX_DEFAULT_CONCURRENCY)


@dataclass(frozen=True)
class EvaluationConfig:
    """Immutable container with evaluation options."""

    # IO
    input_image: Path
    output_dir: Path
    image_id: Optional[str] = None

    # Job matrix
    max_concurrency: int = field(default_factory=default_max_concurrency)
    methods: Tuple[InterpolationMethod, ...] = DEFAULT_METHODS
    scale_factors: Tuple[float, ...] = DEFAULT_SCALE_FACTORS

    # Export
    image_format: str = "png"
    jpg_quality: int = 95
    store_original: bool = False

    # Runtime
    show_progress: bool = True
    # Also list every result of this scale factor after the run.
    show_scale_factor: Optional[float] = None
    log_level: str = "INFO"

    @property
    def resolved_image_id(self) -> str:
        return self.image_id or self.input_image.stem
