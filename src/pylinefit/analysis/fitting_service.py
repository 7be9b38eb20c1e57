"""
Fitting service utilities.

Loads samples from CSV, fits them, and flattens/saves the results so that the
CLI only handles argument parsing and printing.
"""

import logging
from pathlib import Path
from typing import Callable

import pandas as pd

from pylinefit.analysis.fitting import fit_many, r_squared
from pylinefit.io.sample_csv import (
    load_grouped_samples_csv,
    load_sample_csv,
    write_results_csv,
)
from pylinefit.types.fitting import FitConfig, FitResult, Sample

logger = logging.getLogger(__name__)

RESULT_COLUMNS = [
    "group",
    "intercept",
    "slope",
    "loss",
    "iterations",
    "converged",
    "state",
    "r_squared",
]


class FittingService:
    """Service for fitting sample CSV files."""

    def __init__(
        self,
        config: FitConfig | None = None,
        n_workers: int = 1,
        progress_reporter: Callable[[dict], None] | None = None,
    ) -> None:
        """
        Args:
            config: Fit settings shared by every sample.
            n_workers: Worker processes used for grouped files.
            progress_reporter: Optional callable receiving a progress event dict.
        """
        self._config = config or FitConfig()
        self._n_workers = n_workers
        self._progress_reporter = progress_reporter

    def fit_csv_file(
        self,
        csv_file: Path,
        x_column: str = "x",
        y_column: str = "y",
        group_column: str | None = None,
        output_path: Path | None = None,
        *,
        progress_reporter: Callable[[dict], None] | None = None,
    ) -> tuple[pd.DataFrame, Path | None]:
        """Fit the samples in a CSV file and save results.

        Args:
            csv_file: Path to the input CSV file.
            x_column: Column holding x values.
            y_column: Column holding y values.
            group_column: Optional column splitting rows into samples.
            output_path: Where to save results; defaults to
                ``<stem>_fitted.csv`` next to the input.
            progress_reporter: Optional callable to receive progress events.

        Returns:
            Tuple of (results DataFrame, saved CSV Path or None).
        """
        reporter = progress_reporter or self._progress_reporter

        if not csv_file.exists():
            raise FileNotFoundError(f"CSV file not found: {csv_file}")

        logger.info(
            "Processing %s (x=%s, y=%s, group=%s)",
            csv_file.name,
            x_column,
            y_column,
            group_column,
        )

        samples = self._load_samples(csv_file, x_column, y_column, group_column)
        results = fit_many(
            samples,
            self._config,
            n_workers=self._n_workers,
            progress_callback=self._build_progress_callback(csv_file, reporter),
        )
        results_df = self.flatten_results(results, samples)

        saved_csv_path = output_path or csv_file.with_name(f"{csv_file.stem}_fitted.csv")
        try:
            write_results_csv(results_df, saved_csv_path)
            logger.info(
                "Saved fitted results to %s (%d rows)",
                saved_csv_path,
                len(results_df),
            )
        except OSError as exc:
            logger.warning("Failed to save fitted results for %s: %s", saved_csv_path, exc)
            saved_csv_path = None

        return results_df, saved_csv_path

    def _load_samples(
        self,
        csv_file: Path,
        x_column: str,
        y_column: str,
        group_column: str | None,
    ) -> dict[str, Sample]:
        if group_column:
            return load_grouped_samples_csv(csv_file, x_column, y_column, group_column)
        return {csv_file.stem: load_sample_csv(csv_file, x_column, y_column)}

    def _build_progress_callback(
        self, csv_file: Path, reporter: Callable[[dict], None] | None
    ) -> Callable[[int, int, str], None]:
        def progress_callback(current: int, total: int, message: str) -> None:
            """Progress callback that logs throttled progress updates."""
            should_log = current == 1 or current % 30 == 0 or current == total
            if not should_log:
                return
            progress = int((current / total) * 100) if total > 0 else None
            logger.info(
                "%s: %d/%d for %s",
                message,
                current,
                total,
                csv_file.name,
            )
            if reporter:
                reporter(
                    {
                        "step": "fitting",
                        "file": csv_file.name,
                        "current": current,
                        "total": total,
                        "progress": progress,
                        "message": message,
                    }
                )

        return progress_callback

    @staticmethod
    def flatten_results(
        results: list[tuple[str, FitResult]], samples: dict[str, Sample]
    ) -> pd.DataFrame:
        rows = []
        for group, result in results:
            row = {"group": group}
            row.update(result.to_dict())
            row["r_squared"] = r_squared(result.params, samples[group])
            rows.append(row)
        return pd.DataFrame(rows, columns=RESULT_COLUMNS)
