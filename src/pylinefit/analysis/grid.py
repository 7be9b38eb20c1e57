"""
Exhaustive grid scan over (intercept, slope).

Points are generated row-major: intercept in the outer loop, slope in the
inner loop. The generation index is the tie-breaker for ranking.
"""

import heapq
import logging
from collections.abc import Iterator

import numpy as np
import pandas as pd

from pylinefit.analysis.loss import rms_loss
from pylinefit.errors import EmptyInputError
from pylinefit.types.fitting import GridPoint, GridSpec, ModelParams, Sample

logger = logging.getLogger(__name__)


def scan_grid(spec: GridSpec, sample: Sample) -> Iterator[GridPoint]:
    """Lazily evaluate the loss at every grid point.

    Args:
        spec: Grid specification (validated on construction)
        sample: Sample to evaluate against

    Yields:
        GridPoint(index, params, loss), each grid index exactly once
    """
    if len(sample) == 0:
        raise EmptyInputError("Cannot scan a grid against an empty sample")
    intercepts, slopes = spec.axes()
    index = 0
    for intercept in intercepts:
        for slope in slopes:
            params = ModelParams(intercept=float(intercept), slope=float(slope))
            yield GridPoint(index, params, rms_loss(params, sample))
            index += 1


def top_k(spec: GridSpec, sample: Sample, k: int) -> list[GridPoint]:
    """Return the k lowest-loss grid points, earliest generated first on ties."""
    if k < 1:
        raise ValueError(f"k must be >= 1 (got {k})")
    # non-finite losses rank after every finite one
    ranked = heapq.nsmallest(
        k,
        scan_grid(spec, sample),
        key=lambda point: (_rank_loss(point.loss), point.index),
    )
    logger.debug(
        "Grid scan of %d points: best loss %.6g", spec.size, ranked[0].loss
    )
    return ranked


def best_point(spec: GridSpec, sample: Sample) -> GridPoint:
    return top_k(spec, sample, 1)[0]


def _rank_loss(loss: float) -> float:
    return loss if np.isfinite(loss) else np.inf


def grid_for_sample(
    sample: Sample, resolution: int = 25, padding: float = 1.0
) -> GridSpec:
    """Build a grid that brackets plausible lines through a sample.

    Slope range spans the steepest secant between points sorted by x; the
    intercept range covers every line with such a slope passing through a
    data point. Both ranges are widened by `padding` times their half-width
    (at least `padding`) on each side.
    """
    if len(sample) == 0:
        raise EmptyInputError("Cannot derive a grid from an empty sample")

    order = np.argsort(sample.x, kind="stable")
    x = sample.x[order]
    y = sample.y[order]

    dx = np.diff(x)
    dy = np.diff(y)
    valid = dx > 0
    if np.any(valid):
        secants = dy[valid] / dx[valid]
        slope_lo, slope_hi = float(secants.min()), float(secants.max())
    else:
        slope_lo = slope_hi = 0.0
    slope_lo, slope_hi = _pad(slope_lo, slope_hi, padding)

    candidates = np.concatenate([y - slope_lo * x, y - slope_hi * x])
    intercept_lo, intercept_hi = _pad(
        float(candidates.min()), float(candidates.max()), padding
    )

    return GridSpec(
        intercept_min=intercept_lo,
        intercept_max=intercept_hi,
        slope_min=slope_lo,
        slope_max=slope_hi,
        resolution=resolution,
    )


def _pad(lower: float, upper: float, padding: float) -> tuple[float, float]:
    half_width = max((upper - lower) / 2.0, 1.0) * padding
    return lower - half_width, upper + half_width


def scan_to_frame(spec: GridSpec, sample: Sample) -> pd.DataFrame:
    """Tabulate a full scan as columns (intercept, slope, loss)."""
    rows = [
        {
            "intercept": point.params.intercept,
            "slope": point.params.slope,
            "loss": point.loss,
        }
        for point in scan_grid(spec, sample)
    ]
    return pd.DataFrame(rows, columns=["intercept", "slope", "loss"])
