"""
Two-phase line fitting: grid scan for a seed, simplex descent to refine.
"""

import logging
from collections.abc import Hashable, Mapping, Sequence
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Callable

import numpy as np
import pandas as pd
from scipy import stats

from pylinefit.analysis.grid import best_point, grid_for_sample
from pylinefit.analysis.loss import rms_loss
from pylinefit.analysis.simplex import SimplexRefiner
from pylinefit.errors import EmptyInputError
from pylinefit.types.fitting import (
    FitConfig,
    FitResult,
    GridSpec,
    ModelParams,
    RefinerState,
    Sample,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]


def fit(
    sample: Sample,
    config: FitConfig | None = None,
    grid: GridSpec | None = None,
) -> FitResult:
    """Fit a line to a sample.

    Args:
        sample: Non-empty sample to fit
        config: Fit settings; defaults to FitConfig()
        grid: Optional explicit grid. When omitted a grid bracketing the
            sample is derived with `config.grid_resolution` points per axis.

    Returns:
        FitResult from the simplex refiner, seeded at the best grid point

    Raises:
        EmptyInputError: If the sample has no points
        InvalidRangeError: If the derived or given grid is malformed
    """
    config = config or FitConfig()
    if len(sample) == 0:
        raise EmptyInputError("Cannot fit an empty sample")

    spec = grid or grid_for_sample(
        sample, resolution=config.grid_resolution, padding=config.grid_padding
    )
    seed = best_point(spec, sample)
    logger.debug(
        "Seed from %d-point grid: intercept=%.6g slope=%.6g loss=%.6g",
        spec.size,
        seed.params.intercept,
        seed.params.slope,
        seed.loss,
    )

    refiner = SimplexRefiner(
        max_iterations=config.max_iterations,
        tolerance=config.tolerance,
        patience=config.patience,
        initial_step=config.initial_step,
    )
    return refiner.refine(seed.params, sample)


def _fit_job(key: Hashable, sample: Sample, config: FitConfig) -> tuple[Hashable, FitResult]:
    return key, fit(sample, config)


def fit_many(
    samples: Mapping[Hashable, Sample] | Sequence[Sample],
    config: FitConfig | None = None,
    n_workers: int = 1,
    progress_callback: ProgressCallback | None = None,
) -> list[tuple[Hashable, FitResult]]:
    """Fit many independent samples.

    Args:
        samples: Mapping of key to Sample, or a sequence (keys are indices)
        config: Shared fit settings
        n_workers: Number of worker processes; 1 fits in-process
        progress_callback: Optional callable(current, total, message)

    Returns:
        List of (key, FitResult) in input order
    """
    config = config or FitConfig()
    items = list(samples.items()) if isinstance(samples, Mapping) else list(enumerate(samples))
    total = len(items)
    if total == 0:
        return []

    if n_workers <= 1 or total == 1:
        results = []
        for idx, (key, sample) in enumerate(items):
            results.append(_fit_job(key, sample, config))
            if progress_callback:
                progress_callback(idx + 1, total, "Fitting samples")
        return results

    logger.info("Fitting %d samples with %d workers", total, n_workers)
    by_position: dict[int, tuple[Hashable, FitResult]] = {}
    with ProcessPoolExecutor(max_workers=n_workers) as executor:
        futures = {
            executor.submit(_fit_job, key, sample, config): position
            for position, (key, sample) in enumerate(items)
        }
        for completed, future in enumerate(as_completed(futures), start=1):
            by_position[futures[future]] = future.result()
            if progress_callback:
                progress_callback(completed, total, "Fitting samples")

    return [by_position[position] for position in range(total)]


def reference_fit(sample: Sample) -> FitResult:
    """Closed-form ordinary least squares via scipy.stats.linregress."""
    if len(sample) == 0:
        raise EmptyInputError("Cannot fit an empty sample")

    if len(sample) < 2 or np.ptp(sample.x) == 0:
        params = ModelParams(intercept=float(np.mean(sample.y)), slope=0.0)
    else:
        regression = stats.linregress(sample.x, sample.y)
        params = ModelParams(
            intercept=float(regression.intercept), slope=float(regression.slope)
        )

    return FitResult(
        params=params,
        loss=rms_loss(params, sample),
        iterations=0,
        converged=True,
        state=RefinerState.CONVERGED,
    )


def r_squared(params: ModelParams, sample: Sample) -> float:
    """Coefficient of determination clamped to [0, 1]."""
    if len(sample) == 0:
        raise EmptyInputError("Cannot compute r_squared on an empty sample")
    ss_res = float(np.sum((sample.y - params.predict(sample.x)) ** 2))
    ss_tot = float(np.sum((sample.y - np.mean(sample.y)) ** 2))
    if ss_tot <= 0:
        return 1.0 if ss_res == 0 else 0.0
    return max(0.0, min(1.0, 1 - ss_res / ss_tot))


def analyze_fit_quality(results_df: pd.DataFrame | None) -> dict:
    """
    Summarize fit quality from a results DataFrame.

    Args:
        results_df: DataFrame containing fitting results with 'r_squared' column

    Returns:
        Dictionary with good (> 0.9), fair (0.7-0.9) and poor (<= 0.7) counts
        and percentages; empty when no r_squared values are present
    """
    if results_df is None or "r_squared" not in results_df.columns:
        return {}

    values = pd.to_numeric(results_df["r_squared"], errors="coerce").dropna()
    if values.empty:
        return {}

    good_count = int((values > 0.9).sum())
    fair_count = int(((values > 0.7) & (values <= 0.9)).sum())
    poor_count = int((values <= 0.7).sum())
    total = len(values)

    return {
        "r_squared_values": values.values,
        "good_percentage": good_count / total * 100,
        "fair_percentage": fair_count / total * 100,
        "poor_percentage": poor_count / total * 100,
        "good_count": good_count,
        "fair_count": fair_count,
        "poor_count": poor_count,
        "total_count": total,
    }
