"""
Exploratory data analysis helpers.

Tabular counterparts of the usual first questions about a dataset: how is a
variable distributed, which values are unusual, and what should happen to
them. Plotting is left to the caller.
"""

import logging
from collections.abc import Sequence
from typing import Any

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

BIN_COLUMNS = ["bin_start", "bin_end", "count"]
MAX_BINS = 1_000_000


def count_values(df: pd.DataFrame, column: str) -> pd.DataFrame:
    """Frequency table of a (usually categorical) column as columns (column, n)."""
    if column not in df.columns:
        raise ValueError(f"Column '{column}' not found")
    return df.groupby(column, observed=True).size().reset_index(name="n")


def bin_counts(values: Any, binwidth: float, boundary: float = 0.0) -> pd.DataFrame:
    """
    Count values in consecutive bins of equal width.

    Bins are half-open [start, start + binwidth) and aligned so that
    `boundary` is a bin edge. Every bin between the smallest and largest value
    is listed, including empty ones. Missing and infinite values are ignored.

    Args:
        values: Array-like of numbers
        binwidth: Width of each bin, must be positive
        boundary: Any bin edge

    Returns:
        DataFrame with columns bin_start, bin_end, count
    """
    if binwidth <= 0:
        raise ValueError(f"binwidth must be positive (got {binwidth})")

    series = pd.to_numeric(pd.Series(np.asarray(values).ravel()), errors="coerce")
    arr = series.dropna().to_numpy(dtype=np.float64)
    arr = arr[np.isfinite(arr)]
    if arr.size == 0:
        return pd.DataFrame(columns=BIN_COLUMNS)

    with np.errstate(over="ignore", invalid="ignore"):
        positions = np.floor((arr - boundary) / binwidth)
    n_bins = positions.max() - positions.min() + 1
    if not np.isfinite(n_bins) or n_bins > MAX_BINS:
        raise ValueError(
            f"binwidth {binwidth} gives more than {MAX_BINS} bins for this range"
        )
    if np.abs(positions).max() >= 2**62:
        raise ValueError(f"Values too far from boundary {boundary} for binwidth {binwidth}")
    idx = positions.astype(np.int64)
    lo, hi = int(idx.min()), int(idx.max())
    counts = np.bincount(idx - lo, minlength=hi - lo + 1)
    starts = boundary + np.arange(lo, hi + 1) * binwidth
    return pd.DataFrame(
        {"bin_start": starts, "bin_end": starts + binwidth, "count": counts}
    )


def density_by_group(
    df: pd.DataFrame, value: str, group: str, binwidth: float
) -> pd.DataFrame:
    """Per-group binned densities; each group's histogram integrates to one."""
    frames = []
    for label, group_df in df.groupby(group, observed=True, sort=True):
        binned = bin_counts(group_df[value], binwidth)
        if binned.empty:
            continue
        total = binned["count"].sum()
        binned["density"] = binned["count"] / (total * binwidth)
        binned.insert(0, group, label)
        frames.append(binned)
    if not frames:
        return pd.DataFrame(columns=[group, *BIN_COLUMNS, "density"])
    return pd.concat(frames, ignore_index=True)


def summarize_by_group(df: pd.DataFrame, value: str, group: str) -> pd.DataFrame:
    """Box-plot statistics of `value` for each group.

    Returns one row per group with count, min, q1, median, q3, max and iqr.
    """
    for column in (value, group):
        if column not in df.columns:
            raise ValueError(f"Column '{column}' not found")
    summary = (
        df.groupby(group, observed=True)[value]
        .describe()[["count", "min", "25%", "50%", "75%", "max"]]
        .rename(columns={"25%": "q1", "50%": "median", "75%": "q3"})
    )
    summary["count"] = summary["count"].astype(int)
    summary["iqr"] = summary["q3"] - summary["q1"]
    return summary.reset_index()


def _unusual_mask(df: pd.DataFrame, column: str, lower: float, upper: float) -> pd.Series:
    if column not in df.columns:
        raise ValueError(f"Column '{column}' not found")
    if lower > upper:
        raise ValueError(f"lower ({lower}) must be <= upper ({upper})")
    return (df[column] < lower) | (df[column] > upper)


def find_unusual(
    df: pd.DataFrame,
    column: str,
    lower: float,
    upper: float,
    columns: Sequence[str] | None = None,
) -> pd.DataFrame:
    """Rows whose value lies outside [lower, upper], sorted by that value."""
    unusual = df[_unusual_mask(df, column, lower, upper)]
    if columns is not None:
        unusual = unusual[list(columns)]
    return unusual.sort_values(column, kind="stable")


def mask_unusual(df: pd.DataFrame, column: str, lower: float, upper: float) -> pd.DataFrame:
    """Copy of `df` with values outside [lower, upper] replaced by NaN.

    The rest of each row is kept; only the implausible measurement is dropped.
    """
    mask = _unusual_mask(df, column, lower, upper)
    result = df.copy()
    result[column] = result[column].mask(mask)
    logger.debug("Masked %d unusual values in '%s'", int(mask.sum()), column)
    return result


def drop_unusual(df: pd.DataFrame, column: str, lower: float, upper: float) -> pd.DataFrame:
    """Rows with lower <= value <= upper."""
    _unusual_mask(df, column, lower, upper)
    return df[df[column].between(lower, upper)]
