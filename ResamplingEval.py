#!/usr/bin/env python3
"""Convenience entry script for the resampling evaluator."""

from __future__ import annotations

from resampling_eval.cli import main


if __name__ == "__main__":
    main()
