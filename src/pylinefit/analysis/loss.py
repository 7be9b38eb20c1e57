"""
Loss evaluation for candidate lines.
"""

import numpy as np

from pylinefit.errors import EmptyInputError
from pylinefit.types.fitting import ModelParams, Sample


def residuals(params: ModelParams, sample: Sample) -> np.ndarray:
    """Return y - (intercept + slope * x) for every point."""
    return sample.y - params.predict(sample.x)


def rms_loss(params: ModelParams, sample: Sample) -> float:
    """Root-mean-square residual of a line against a sample.

    Args:
        params: Candidate intercept and slope
        sample: Non-empty sample to evaluate against

    Returns:
        Non-negative RMS residual; finite whenever every residual is finite

    Raises:
        EmptyInputError: If the sample has no points
    """
    if len(sample) == 0:
        raise EmptyInputError("Cannot evaluate loss on an empty sample")
    with np.errstate(over="ignore", invalid="ignore"):
        resid = residuals(params, sample)
        # scaled so squaring residuals above ~1e154 cannot overflow
        scale = np.max(np.abs(resid))
        if scale == 0:
            return 0.0
        return float(scale * np.sqrt(np.mean((resid / scale) ** 2)))


def rms_loss_vector(values: np.ndarray, sample: Sample) -> float:
    """`rms_loss` for an [intercept, slope] vector."""
    return rms_loss(ModelParams.from_array(values), sample)
