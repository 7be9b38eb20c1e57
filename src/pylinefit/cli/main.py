"""Command-line helpers for pylinefit."""

import logging
from pathlib import Path

import pandas as pd
import typer
from tqdm.auto import tqdm

from pylinefit.analysis.fitting import analyze_fit_quality
from pylinefit.analysis.fitting_service import FittingService
from pylinefit.analysis.grid import grid_for_sample, top_k
from pylinefit.exercises import categorize_temperatures, fizzbuzz
from pylinefit.io.config_yaml import load_fit_config
from pylinefit.io.sample_csv import load_sample_csv
from pylinefit.types.fitting import FitConfig, GridSpec

app = typer.Typer(help="pylinefit utilities")
logger = logging.getLogger(__name__)

csv_argument = typer.Argument(
    ...,
    exists=True,
    file_okay=True,
    dir_okay=False,
    readable=True,
    help="CSV file with x and y columns.",
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """pylinefit utility commands."""
    # Configure basic logging so info-level messages are visible by default.
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format="%(levelname)s: %(message)s",
        )
    return None


def _resolve_config(
    config_path: Path | None,
    resolution: int | None,
    max_iterations: int | None,
    tolerance: float | None,
) -> FitConfig:
    base = load_fit_config(config_path) if config_path is not None else FitConfig()
    return base.merged(
        grid_resolution=resolution,
        max_iterations=max_iterations,
        tolerance=tolerance,
    )


@app.command()
def fit(
    csv_file: Path = csv_argument,
    x_column: str = typer.Option("x", "--x-column", "-x", help="Column holding x values."),
    y_column: str = typer.Option("y", "--y-column", "-y", help="Column holding y values."),
    group_column: str | None = typer.Option(
        None, "--group-column", "-g", help="Fit one line per value of this column."
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        exists=True,
        dir_okay=False,
        readable=True,
        help="YAML file with fit settings.",
    ),
    resolution: int | None = typer.Option(
        None, "--resolution", "-r", help="Grid points per axis."
    ),
    max_iterations: int | None = typer.Option(
        None, "--max-iterations", help="Simplex iteration cap."
    ),
    tolerance: float | None = typer.Option(
        None, "--tolerance", help="Minimum loss improvement per iteration."
    ),
    workers: int = typer.Option(1, "--workers", "-w", min=1, help="Worker processes."),
    output: Path | None = typer.Option(
        None, "--output", "-o", dir_okay=False, help="Results CSV path."
    ),
) -> None:
    """Fit a line (or one line per group) to a CSV file and save the results."""
    try:
        config = _resolve_config(config_path, resolution, max_iterations, tolerance)
    except ValueError as exc:
        typer.secho(f"Invalid configuration: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc

    with tqdm(desc="Fitting", unit="sample", leave=False) as bar:

        def _report(event: dict) -> None:
            bar.total = event["total"]
            bar.n = event["current"]
            bar.refresh()

        service = FittingService(config, n_workers=workers, progress_reporter=_report)
        try:
            results_df, saved_path = service.fit_csv_file(
                csv_file,
                x_column=x_column,
                y_column=y_column,
                group_column=group_column,
                output_path=output,
            )
        except (ValueError, FileNotFoundError) as exc:
            typer.secho(f"Fit failed: {exc}", err=True, fg=typer.colors.RED)
            raise typer.Exit(code=1) from exc

    with pd.option_context("display.width", 120, "display.max_columns", None):
        typer.echo(results_df.to_string(index=False))

    quality = analyze_fit_quality(results_df)
    if quality:
        typer.echo(
            f"\nr_squared: {quality['good_count']} good, "
            f"{quality['fair_count']} fair, {quality['poor_count']} poor"
        )
    if saved_path is not None:
        typer.secho(f"Saved results to {saved_path}", fg=typer.colors.GREEN)


@app.command()
def scan(
    csv_file: Path = csv_argument,
    x_column: str = typer.Option("x", "--x-column", "-x"),
    y_column: str = typer.Option("y", "--y-column", "-y"),
    intercept_min: float | None = typer.Option(None, "--intercept-min"),
    intercept_max: float | None = typer.Option(None, "--intercept-max"),
    slope_min: float | None = typer.Option(None, "--slope-min"),
    slope_max: float | None = typer.Option(None, "--slope-max"),
    resolution: int = typer.Option(25, "--resolution", "-r", help="Grid points per axis."),
    top: int = typer.Option(5, "--top", "-k", min=1, help="Number of grid points to show."),
) -> None:
    """Scan an (intercept, slope) grid and print the lowest-loss points.

    Without explicit bounds the grid is derived from the data.
    """
    bounds = (intercept_min, intercept_max, slope_min, slope_max)
    try:
        sample = load_sample_csv(csv_file, x_column, y_column)
        if all(value is not None for value in bounds):
            spec = GridSpec(*bounds, resolution=resolution)
        elif any(value is not None for value in bounds):
            raise ValueError("Give all four grid bounds or none of them")
        else:
            spec = grid_for_sample(sample, resolution=resolution)
        ranked = top_k(spec, sample, top)
    except ValueError as exc:
        typer.secho(f"Scan failed: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc

    typer.echo(
        f"Grid: intercept [{spec.intercept_min:.4g}, {spec.intercept_max:.4g}], "
        f"slope [{spec.slope_min:.4g}, {spec.slope_max:.4g}], {spec.size} points"
    )
    for rank, point in enumerate(ranked, start=1):
        typer.echo(
            f"{rank:>3}. intercept={point.params.intercept:.6g} "
            f"slope={point.params.slope:.6g} loss={point.loss:.6g}"
        )


@app.command("fizzbuzz")
def fizzbuzz_command(
    n: int = typer.Argument(..., min=1, help="Print fizzbuzz for 1..N."),
) -> None:
    """Print the fizzbuzz sequence."""
    for value in range(1, n + 1):
        typer.echo(fizzbuzz(value))


@app.command()
def temperature(
    temps: list[float] = typer.Argument(..., help="Temperatures in degrees Celsius."),
    left_closed: bool = typer.Option(
        False, "--left-closed", help="Use [a, b) bins instead of (a, b]."
    ),
) -> None:
    """Print a category for each temperature."""
    categories = categorize_temperatures(temps, right=not left_closed)
    for temp, category in zip(temps, categories):
        typer.echo(f"{temp:g}: {category}")


if __name__ == "__main__":
    app()
