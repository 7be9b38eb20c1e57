"""
Small branching exercises: fizzbuzz and temperature categories.
"""

import math
from collections.abc import Callable, Iterable, Sequence
from typing import Any

import numpy as np
import pandas as pd

TEMPERATURE_BREAKS = [-np.inf, 0, 10, 20, 30, np.inf]
TEMPERATURE_LABELS = ["freezing", "cold", "cool", "warm", "hot"]


def fizzbuzz(x: int) -> int | str:
    mod3 = x % 3 == 0
    mod5 = x % 5 == 0

    if mod3 and mod5:
        return "fizzbuzz"
    if mod3:
        return "fizz"
    if mod5:
        return "buzz"
    return x


def fizzbuzz_rules(
    values: Iterable[int],
    rules: Sequence[tuple[int, str]],
    default: Callable[[int], Any] = str,
) -> list[Any]:
    """Label each value by the first rule whose divisor divides it.

    E.g. rules ``[(35, "fizz buzz"), (5, "fizz"), (7, "buzz")]``; values
    matching no rule are passed through `default`.
    """
    for divisor, _ in rules:
        if divisor == 0:
            raise ValueError("Rule divisors must be non-zero")

    labels = []
    for value in values:
        for divisor, label in rules:
            if value % divisor == 0:
                labels.append(label)
                break
        else:
            labels.append(default(value))
    return labels


def categorize_temperature(temp: float) -> str:
    """Category for a temperature in degrees Celsius; upper bounds inclusive."""
    if math.isnan(temp):
        raise ValueError("Temperature must not be NaN")
    if temp <= 0:
        return "freezing"
    elif temp <= 10:
        return "cold"
    elif temp <= 20:
        return "cool"
    elif temp <= 30:
        return "warm"
    else:
        return "hot"


def categorize_temperatures(temps: Any, right: bool = True) -> pd.Series:
    """Vectorized temperature categories.

    Args:
        temps: Array-like of temperatures
        right: If True bins are (a, b] (matches `categorize_temperature`);
            if False bins are [a, b), so 0 is "cold" rather than "freezing"

    Returns:
        Categorical Series; missing temperatures stay missing
    """
    values = pd.to_numeric(pd.Series(temps), errors="coerce")
    return pd.cut(values, bins=TEMPERATURE_BREAKS, labels=TEMPERATURE_LABELS, right=right)
