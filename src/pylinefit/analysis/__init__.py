'''
Loss evaluation, grid scanning, simplex refinement and fitting.
'''

from .loss import residuals, rms_loss
from .grid import best_point, grid_for_sample, scan_grid, scan_to_frame, top_k
from .simplex import SimplexRefiner, refine
from .fitting import (
    analyze_fit_quality,
    fit,
    fit_many,
    r_squared,
    reference_fit,
)
from .fitting_service import FittingService

__all__ = [
    "residuals",
    "rms_loss",
    "best_point",
    "grid_for_sample",
    "scan_grid",
    "scan_to_frame",
    "top_k",
    "SimplexRefiner",
    "refine",
    "analyze_fit_quality",
    "fit",
    "fit_many",
    "r_squared",
    "reference_fit",
    "FittingService",
]
