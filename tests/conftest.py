import numpy as np
import pytest

from pylinefit.types.fitting import Sample


@pytest.fixture
def identity_sample() -> Sample:
    return Sample.from_pairs([(1, 1), (2, 2), (3, 3)])


@pytest.fixture
def offset_sample() -> Sample:
    return Sample.from_pairs([(0, 7), (1, 8.5), (2, 10)])


@pytest.fixture
def noisy_sample() -> Sample:
    rng = np.random.default_rng(42)
    x = np.linspace(0.0, 10.0, 40)
    y = 3.0 - 0.8 * x + rng.normal(0.0, 0.5, size=x.size)
    return Sample.from_arrays(x, y)
