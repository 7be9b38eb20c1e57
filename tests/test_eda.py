import numpy as np
import pandas as pd
import pytest

from pylinefit.exploration import (
    bin_counts,
    count_values,
    density_by_group,
    drop_unusual,
    find_unusual,
    mask_unusual,
    summarize_by_group,
)


@pytest.fixture
def diamonds() -> pd.DataFrame:
    cut = pd.Categorical(
        ["Ideal", "Good", "Ideal", "Premium", "Ideal", "Good"],
        categories=["Fair", "Good", "Very Good", "Premium", "Ideal"],
        ordered=True,
    )
    return pd.DataFrame(
        {
            "cut": cut,
            "carat": [0.23, 0.31, 1.02, 0.5, 2.4, 0.29],
            "price": [326, 335, 4500, 1200, 15000, 400],
            "y": [3.9, 0.0, 6.4, 5.1, 31.8, 4.2],
        }
    )


def test_count_values_follows_category_order(diamonds):
    counts = count_values(diamonds, "cut")
    assert counts["cut"].astype(str).tolist() == ["Good", "Premium", "Ideal"]
    assert counts["n"].tolist() == [2, 1, 3]


def test_count_values_unknown_column(diamonds):
    with pytest.raises(ValueError, match="not found"):
        count_values(diamonds, "clarity")


def test_bin_counts_includes_empty_bins():
    binned = bin_counts([0.1, 0.2, 1.7, np.nan], binwidth=0.5)
    assert binned["bin_start"].tolist() == pytest.approx([0.0, 0.5, 1.0, 1.5])
    assert binned["count"].tolist() == [2, 0, 0, 1]
    assert (binned["bin_end"] - binned["bin_start"]).tolist() == pytest.approx([0.5] * 4)


def test_bin_counts_edges_are_left_closed():
    binned = bin_counts([1.0, 2.0], binwidth=1.0)
    assert binned["bin_start"].tolist() == [1.0, 2.0]
    assert binned["count"].tolist() == [1, 1]


def test_bin_counts_boundary_shift():
    binned = bin_counts([0.9, 1.1], binwidth=1.0, boundary=0.5)
    assert binned["bin_start"].tolist() == [0.5]
    assert binned["count"].tolist() == [2]


def test_bin_counts_rejects_bad_width():
    with pytest.raises(ValueError, match="binwidth"):
        bin_counts([1, 2], binwidth=0)


def test_bin_counts_empty():
    assert bin_counts([np.nan], binwidth=1.0).empty


def test_density_by_group_integrates_to_one(diamonds):
    density = density_by_group(diamonds, "carat", "cut", binwidth=0.5)
    for _, group_df in density.groupby("cut", observed=True):
        assert (group_df["density"] * 0.5).sum() == pytest.approx(1.0)


def test_find_unusual_sorted(diamonds):
    unusual = find_unusual(diamonds, "y", 3, 20, columns=["price", "y"])
    assert list(unusual.columns) == ["price", "y"]
    assert unusual["y"].tolist() == [0.0, 31.8]


def test_mask_unusual_keeps_rows(diamonds):
    masked = mask_unusual(diamonds, "y", 3, 20)
    assert len(masked) == len(diamonds)
    assert masked["y"].isna().sum() == 2
    assert masked["price"].tolist() == diamonds["price"].tolist()
    # original untouched
    assert diamonds["y"].isna().sum() == 0


def test_drop_unusual(diamonds):
    kept = drop_unusual(diamonds, "y", 3, 20)
    assert kept["y"].tolist() == [3.9, 6.4, 5.1, 4.2]


def test_inverted_bounds(diamonds):
    with pytest.raises(ValueError, match="lower"):
        drop_unusual(diamonds, "y", 20, 3)


def test_bin_counts_ignores_infinite_values():
    binned = bin_counts([0.0, 1.0, np.inf, -np.inf], binwidth=1.0)
    assert binned["bin_start"].tolist() == [0.0, 1.0]
    assert binned["count"].tolist() == [1, 1]


def test_bin_counts_rejects_too_many_bins():
    with pytest.raises(ValueError, match="bins"):
        bin_counts([0.0, 1e12], binwidth=1.0)


def test_bin_counts_rejects_values_far_from_boundary():
    with pytest.raises(ValueError, match="too far"):
        bin_counts([1e300], binwidth=1.0)


def test_summarize_by_group(diamonds):
    summary = summarize_by_group(diamonds, "price", "cut")
    assert summary["cut"].astype(str).tolist() == ["Good", "Premium", "Ideal"]
    assert summary["count"].tolist() == [2, 1, 3]
    ideal = summary[summary["cut"] == "Ideal"].iloc[0]
    assert ideal["median"] == pytest.approx(4500.0)
    assert ideal["q1"] == pytest.approx(2413.0)
    assert ideal["q3"] == pytest.approx(9750.0)
    assert ideal["iqr"] == pytest.approx(7337.0)


def test_summarize_by_group_unknown_column(diamonds):
    with pytest.raises(ValueError, match="not found"):
        summarize_by_group(diamonds, "depth", "cut")
