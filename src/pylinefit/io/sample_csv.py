"""
CSV loading and writing for fitting samples and results.

CSV Formats
-----------
Sample CSV:
    One observation per row with an x column and a y column (names
    configurable). Lines starting with '#' are comments.

Grouped Sample CSV (Tidy Format):
    As above plus a group column; one Sample is built per group, in order of
    first appearance.

Fitted Results CSV:
    One row per sample: group, intercept, slope, loss, iterations, converged,
    state, r_squared.
"""

import logging
from pathlib import Path

import pandas as pd

from pylinefit.types.fitting import Sample

logger = logging.getLogger(__name__)


def _read_csv(csv_path: Path, required: list[str]) -> pd.DataFrame:
    if not csv_path.exists():
        raise FileNotFoundError(f"Sample CSV file not found: {csv_path}")

    df = pd.read_csv(csv_path, comment="#")
    missing = [column for column in required if column not in df.columns]
    if missing:
        raise ValueError(f"CSV missing required columns: {missing}")
    return df


def load_sample_csv(
    csv_path: Path, x_column: str = "x", y_column: str = "y"
) -> Sample:
    """
    Load a single sample from a CSV file.

    Rows with a missing or non-numeric x or y are dropped.

    Args:
        csv_path: Path to the CSV file
        x_column: Name of the x column
        y_column: Name of the y column

    Returns:
        Sample built from the two columns
    """
    df = _read_csv(csv_path, [x_column, y_column])
    x = pd.to_numeric(df[x_column], errors="coerce")
    y = pd.to_numeric(df[y_column], errors="coerce")
    sample = Sample.from_arrays(x.to_numpy(), y.to_numpy())
    dropped = len(df) - len(sample)
    if dropped:
        logger.info("Dropped %d incomplete rows from %s", dropped, csv_path.name)
    return sample


def load_grouped_samples_csv(
    csv_path: Path,
    x_column: str = "x",
    y_column: str = "y",
    group_column: str = "group",
) -> dict[str, Sample]:
    """
    Load one sample per group from a tidy CSV file.

    Returns:
        Mapping of group label (as str) to Sample, in order of first appearance
    """
    df = _read_csv(csv_path, [x_column, y_column, group_column])
    samples: dict[str, Sample] = {}
    for group, group_df in df.groupby(group_column, sort=False):
        x = pd.to_numeric(group_df[x_column], errors="coerce")
        y = pd.to_numeric(group_df[y_column], errors="coerce")
        samples[str(group)] = Sample.from_arrays(x.to_numpy(), y.to_numpy())
    logger.debug("Loaded %d groups from %s", len(samples), csv_path.name)
    return samples


def write_results_csv(df: pd.DataFrame, output_path: Path) -> None:
    """Write a fitted results DataFrame, creating parent directories."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output_path, index=False, float_format="%.10g")
