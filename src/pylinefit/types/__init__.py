"""
Shared dataclasses for fitting.
"""

from .fitting import (
    FitConfig,
    FitResult,
    GridPoint,
    GridSpec,
    ModelParams,
    RefinerState,
    Sample,
)

__all__ = [
    "FitConfig",
    "FitResult",
    "GridPoint",
    "GridSpec",
    "ModelParams",
    "RefinerState",
    "Sample",
]
