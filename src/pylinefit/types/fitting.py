"""
Fitting types: samples, candidate lines, grid specifications and results.
"""

from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any, NamedTuple

import numpy as np

from pylinefit.errors import InvalidRangeError, NumericDivergenceError


@dataclass(frozen=True, slots=True, eq=False)
class Sample:
    """Ordered (x, y) observations; arrays are read-only once built."""

    x: np.ndarray
    y: np.ndarray

    def __post_init__(self) -> None:
        x = np.array(self.x, dtype=np.float64).ravel()
        y = np.array(self.y, dtype=np.float64).ravel()
        if x.shape != y.shape:
            raise ValueError(
                f"x and y must have the same length (got {x.size} and {y.size})"
            )
        x.setflags(write=False)
        y.setflags(write=False)
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "y", y)

    @classmethod
    def from_arrays(cls, x: Any, y: Any, drop_nan: bool = True) -> "Sample":
        x_arr = np.asarray(x, dtype=np.float64).ravel()
        y_arr = np.asarray(y, dtype=np.float64).ravel()
        if x_arr.shape != y_arr.shape:
            raise ValueError(
                f"x and y must have the same length (got {x_arr.size} and {y_arr.size})"
            )
        if drop_nan:
            mask = ~(np.isnan(x_arr) | np.isnan(y_arr))
            x_arr, y_arr = x_arr[mask], y_arr[mask]
        return cls(x_arr, y_arr)

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[float, float]]) -> "Sample":
        pairs = list(pairs)
        if not pairs:
            return cls(np.empty(0), np.empty(0))
        data = np.asarray(pairs, dtype=np.float64)
        if data.ndim != 2 or data.shape[1] != 2:
            raise ValueError("Pairs must be a sequence of (x, y) tuples")
        return cls.from_arrays(data[:, 0], data[:, 1])

    def __len__(self) -> int:
        return int(self.x.size)

    def pairs(self) -> list[tuple[float, float]]:
        return [(float(a), float(b)) for a, b in zip(self.x, self.y)]


@dataclass(frozen=True, slots=True)
class ModelParams:
    """A candidate line y = intercept + slope * x."""

    intercept: float
    slope: float

    def predict(self, x: Any) -> np.ndarray:
        return self.intercept + self.slope * np.asarray(x, dtype=np.float64)

    def to_array(self) -> np.ndarray:
        return np.array([self.intercept, self.slope], dtype=np.float64)

    @classmethod
    def from_array(cls, values: Any) -> "ModelParams":
        intercept, slope = np.asarray(values, dtype=np.float64).ravel()[:2]
        return cls(intercept=float(intercept), slope=float(slope))


@dataclass(frozen=True, slots=True)
class GridSpec:
    """Closed intercept/slope ranges sampled at `resolution` points per axis."""

    intercept_min: float
    intercept_max: float
    slope_min: float
    slope_max: float
    resolution: int = 25

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        bounds = (self.intercept_min, self.intercept_max, self.slope_min, self.slope_max)
        if not all(np.isfinite(value) for value in bounds):
            raise InvalidRangeError(f"Grid bounds must be finite: {bounds}")
        if self.intercept_min > self.intercept_max:
            raise InvalidRangeError(
                f"Invalid intercept range: min {self.intercept_min} > max {self.intercept_max}"
            )
        if self.slope_min > self.slope_max:
            raise InvalidRangeError(
                f"Invalid slope range: min {self.slope_min} > max {self.slope_max}"
            )
        if int(self.resolution) != self.resolution or self.resolution < 1:
            raise InvalidRangeError(
                f"Grid resolution must be a positive integer (got {self.resolution})"
            )

    @property
    def size(self) -> int:
        return int(self.resolution) ** 2

    def axes(self) -> tuple[np.ndarray, np.ndarray]:
        return (
            _axis(self.intercept_min, self.intercept_max, int(self.resolution)),
            _axis(self.slope_min, self.slope_max, int(self.resolution)),
        )


def _axis(lower: float, upper: float, n: int) -> np.ndarray:
    if n == 1:
        return np.array([(lower + upper) / 2.0])
    return np.linspace(lower, upper, n)


class GridPoint(NamedTuple):
    index: int
    params: ModelParams
    loss: float


class RefinerState(str, Enum):
    SEEDED = "seeded"
    REFINING = "refining"
    CONVERGED = "converged"
    EXHAUSTED = "exhausted"
    DIVERGED = "diverged"


@dataclass(frozen=True)
class FitResult:
    """Result of one fit invocation."""

    params: ModelParams
    loss: float
    iterations: int
    converged: bool
    state: RefinerState = RefinerState.CONVERGED
    error: NumericDivergenceError | None = None

    def to_dict(self) -> dict[str, Any]:
        """Flatten to a single row for tabular output."""
        return {
            "intercept": self.params.intercept,
            "slope": self.params.slope,
            "loss": self.loss,
            "iterations": self.iterations,
            "converged": self.converged,
            "state": self.state.value,
        }


@dataclass(slots=True)
class FitConfig:
    grid_resolution: int = 25
    max_iterations: int = 200
    tolerance: float = 1e-6
    # consecutive low-improvement iterations required to converge
    patience: int = 5
    initial_step: float = 0.1
    grid_padding: float = 1.0

    def __post_init__(self) -> None:
        self.grid_resolution = int(self.grid_resolution)
        self.max_iterations = int(self.max_iterations)
        self.tolerance = float(self.tolerance)
        self.patience = int(self.patience)
        self.initial_step = float(self.initial_step)
        self.grid_padding = float(self.grid_padding)
        if self.grid_resolution < 1:
            raise ValueError(f"grid_resolution must be >= 1 (got {self.grid_resolution})")
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1 (got {self.max_iterations})")
        if self.tolerance < 0:
            raise ValueError(f"tolerance must be >= 0 (got {self.tolerance})")
        if self.patience < 1:
            raise ValueError(f"patience must be >= 1 (got {self.patience})")
        if self.initial_step <= 0:
            raise ValueError(f"initial_step must be > 0 (got {self.initial_step})")
        if self.grid_padding < 0:
            raise ValueError(f"grid_padding must be >= 0 (got {self.grid_padding})")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "FitConfig":
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known and v is not None})

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def merged(self, **overrides: Any) -> "FitConfig":
        """Return a copy with non-None overrides applied."""
        values = self.to_dict()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return FitConfig(**values)
