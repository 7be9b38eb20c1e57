from pathlib import Path

import pandas as pd
import pytest

from pylinefit.analysis.fitting_service import RESULT_COLUMNS, FittingService
from pylinefit.types.fitting import FitConfig


def _write(path: Path, text: str) -> Path:
    path.write_text(text)
    return path


def test_fit_single_sample_csv(tmp_path: Path):
    csv_path = _write(tmp_path / "line.csv", "x,y\n0,7\n1,8.5\n2,10\n")
    results_df, saved = FittingService().fit_csv_file(csv_path)

    assert saved == tmp_path / "line_fitted.csv"
    assert saved.exists()
    assert list(results_df.columns) == RESULT_COLUMNS
    row = results_df.iloc[0]
    assert row["group"] == "line"
    assert row["intercept"] == pytest.approx(7.0, abs=1e-3)
    assert row["slope"] == pytest.approx(1.5, abs=1e-3)
    assert bool(row["converged"])
    assert row["state"] == "converged"
    assert row["r_squared"] == pytest.approx(1.0)

    saved_df = pd.read_csv(saved)
    assert list(saved_df.columns) == RESULT_COLUMNS


def test_fit_grouped_csv(tmp_path: Path):
    csv_path = _write(
        tmp_path / "grouped.csv",
        "sample,t,v\n"
        "up,0,0\nup,1,1\nup,2,2\n"
        "down,0,4\ndown,1,2\ndown,2,0\n",
    )
    output = tmp_path / "out" / "results.csv"
    service = FittingService(FitConfig(grid_resolution=15))
    results_df, saved = service.fit_csv_file(
        csv_path,
        x_column="t",
        y_column="v",
        group_column="sample",
        output_path=output,
    )

    assert saved == output
    assert output.exists()
    assert results_df["group"].tolist() == ["up", "down"]
    slopes = dict(zip(results_df["group"], results_df["slope"]))
    assert slopes["up"] == pytest.approx(1.0, abs=1e-3)
    assert slopes["down"] == pytest.approx(-2.0, abs=1e-3)


def test_progress_reporter_receives_events(tmp_path: Path):
    csv_path = _write(tmp_path / "grouped.csv", "g,x,y\na,0,0\na,1,1\nb,0,1\nb,1,3\n")
    events = []
    FittingService(progress_reporter=events.append).fit_csv_file(csv_path, group_column="g")
    assert [event["current"] for event in events] == [1, 2]
    assert events[-1]["progress"] == 100
    assert all(event["file"] == "grouped.csv" for event in events)


def test_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        FittingService().fit_csv_file(tmp_path / "missing.csv")


def test_missing_columns(tmp_path: Path):
    csv_path = _write(tmp_path / "bad.csv", "a,b\n0,1\n")
    with pytest.raises(ValueError, match="missing required columns"):
        FittingService().fit_csv_file(csv_path)
