"""
Exploratory data analysis helpers (pandas, no plotting).
"""

from .eda import (
    bin_counts,
    count_values,
    density_by_group,
    drop_unusual,
    find_unusual,
    mask_unusual,
    summarize_by_group,
)

__all__ = [
    "bin_counts",
    "count_values",
    "density_by_group",
    "drop_unusual",
    "find_unusual",
    "mask_unusual",
    "summarize_by_group",
]
