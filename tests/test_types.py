from dataclasses import FrozenInstanceError

import numpy as np
import pytest

from pylinefit.errors import InvalidRangeError
from pylinefit.types.fitting import FitConfig, GridSpec, ModelParams, Sample


class TestSample:
    def test_from_pairs_keeps_order(self):
        sample = Sample.from_pairs([(3, 1), (1, 2), (2, 3)])
        assert sample.pairs() == [(3.0, 1.0), (1.0, 2.0), (2.0, 3.0)]
        assert len(sample) == 3

    def test_nan_rows_are_dropped(self):
        sample = Sample.from_arrays([0, 1, np.nan, 3], [1, np.nan, 2, 4])
        assert sample.pairs() == [(0.0, 1.0), (3.0, 4.0)]

    def test_empty_sample_can_be_built(self):
        assert len(Sample.from_pairs([])) == 0

    def test_length_mismatch(self):
        with pytest.raises(ValueError, match="same length"):
            Sample.from_arrays([1, 2, 3], [1, 2])

    def test_is_read_only(self):
        sample = Sample.from_pairs([(0, 1), (1, 2)])
        with pytest.raises(ValueError):
            sample.x[0] = 5.0
        with pytest.raises(FrozenInstanceError):
            sample.x = np.zeros(2)

    def test_does_not_alias_input(self):
        x = np.array([0.0, 1.0])
        sample = Sample(x, np.array([1.0, 2.0]))
        x[0] = 10.0
        assert sample.x[0] == 0.0


def test_model_params_array_conversion():
    params = ModelParams.from_array([1.5, -2.0])
    assert params == ModelParams(intercept=1.5, slope=-2.0)
    np.testing.assert_allclose(params.to_array(), [1.5, -2.0])
    np.testing.assert_allclose(params.predict([0, 1, 2]), [1.5, -0.5, -2.5])


class TestGridSpec:
    def test_inverted_intercept_range(self):
        with pytest.raises(InvalidRangeError, match="intercept"):
            GridSpec(intercept_min=5, intercept_max=1, slope_min=0, slope_max=1)

    def test_inverted_slope_range(self):
        with pytest.raises(InvalidRangeError, match="slope"):
            GridSpec(intercept_min=0, intercept_max=1, slope_min=2, slope_max=1)

    @pytest.mark.parametrize("resolution", [0, -3, 2.5])
    def test_bad_resolution(self, resolution):
        with pytest.raises(InvalidRangeError, match="resolution"):
            GridSpec(0, 1, 0, 1, resolution=resolution)

    def test_non_finite_bounds(self):
        with pytest.raises(InvalidRangeError, match="finite"):
            GridSpec(0, np.inf, 0, 1)

    def test_invalid_range_is_a_value_error(self):
        with pytest.raises(ValueError):
            GridSpec(5, 1, 0, 1)

    def test_axes(self):
        intercepts, slopes = GridSpec(0, 4, -1, 1, resolution=5).axes()
        np.testing.assert_allclose(intercepts, [0, 1, 2, 3, 4])
        np.testing.assert_allclose(slopes, [-1, -0.5, 0, 0.5, 1])

    def test_single_point_axis_is_midpoint(self):
        intercepts, slopes = GridSpec(0, 4, -1, 3, resolution=1).axes()
        assert intercepts.tolist() == [2.0]
        assert slopes.tolist() == [1.0]


class TestFitConfig:
    def test_defaults(self):
        config = FitConfig()
        assert config.grid_resolution == 25
        assert config.max_iterations == 200
        assert config.tolerance == 1e-6

    def test_from_dict_ignores_unknown_keys(self):
        config = FitConfig.from_dict({"max_iterations": 50, "colour": "blue"})
        assert config.max_iterations == 50
        assert config.grid_resolution == 25

    def test_from_dict_coerces_strings(self):
        config = FitConfig.from_dict({"tolerance": "1e-8", "grid_resolution": "11"})
        assert config.tolerance == 1e-8
        assert config.grid_resolution == 11

    @pytest.mark.parametrize(
        "field_name, value",
        [
            ("grid_resolution", 0),
            ("max_iterations", 0),
            ("tolerance", -1.0),
            ("patience", 0),
            ("initial_step", 0.0),
        ],
    )
    def test_validation(self, field_name, value):
        with pytest.raises(ValueError, match=field_name):
            FitConfig(**{field_name: value})

    def test_merged_skips_none(self):
        config = FitConfig(max_iterations=50).merged(max_iterations=None, tolerance=1e-3)
        assert config.max_iterations == 50
        assert config.tolerance == 1e-3
