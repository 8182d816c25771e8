"""Log-return transform and shared series primitives."""

from dataclasses import dataclass
from datetime import date
from enum import IntEnum
from typing import Sequence, Tuple, Union

import numpy as np

from macrolens.core.errors import ValidationError


class Window(IntEnum):
    """Trailing analysis horizons, in trading periods."""
    D30 = 30
    D90 = 90
    D250 = 250


# Ordered shortest to longest; every component iterates this, never literals.
WINDOWS: Tuple[Window, ...] = (Window.D30, Window.D90, Window.D250)


@dataclass(frozen=True)
class PricePoint:
    date: date
    close: float


PriceInput = Union[Sequence[PricePoint], Sequence[float], np.ndarray]


def closes(prices: PriceInput) -> np.ndarray:
    """Extract close values as a float array from PricePoints or raw numbers."""
    if len(prices) and isinstance(prices[0], PricePoint):
        return np.array([p.close for p in prices], dtype=float)
    return np.asarray(prices, dtype=float)


def validate_prices(prices: PriceInput, name: str = "prices") -> np.ndarray:
    """
    Check a level series before taking logs.

    Args:
        prices: PricePoints or raw positive numbers
        name: Series label used in error messages

    Returns:
        Read-only float array of the values

    Raises:
        ValidationError: If the series is empty, non-finite or non-positive
    """
    if prices is None or len(prices) == 0:
        raise ValidationError(f"{name} must be a non-empty series")

    values = closes(prices)
    if values.ndim != 1:
        raise ValidationError(f"{name} must be one-dimensional")
    if not np.all(np.isfinite(values)):
        raise ValidationError(f"{name} contains non-finite values")
    if np.any(values <= 0):
        raise ValidationError(f"{name} must be strictly positive")

    values = values.copy()
    values.setflags(write=False)
    return values


def log_returns(prices: PriceInput, name: str = "prices") -> np.ndarray:
    """
    Convert a price series into log returns.

    r[i] = ln(p[i+1] / p[i]), so the result has len(prices) - 1 entries and
    index i is the transition ending at prices[i + 1].

    Raises:
        ValidationError: If fewer than two prices are given or any is invalid
    """
    values = validate_prices(prices, name)
    if len(values) < 2:
        raise ValidationError(f"{name} needs at least 2 points for returns, got {len(values)}")

    returns = np.log(values[1:] / values[:-1])
    returns.setflags(write=False)
    return returns


def returns_or_empty(prices: PriceInput, name: str = "prices") -> np.ndarray:
    """Validate and transform, treating a single point as an empty return series."""
    values = validate_prices(prices, name)
    if len(values) < 2:
        empty = np.empty(0, dtype=float)
        empty.setflags(write=False)
        return empty
    return log_returns(values, name)


def sample_mean(values: np.ndarray) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def sample_std(values: np.ndarray) -> float:
    """Sample standard deviation (n - 1 denominator), 0 for fewer than 2 points."""
    if len(values) < 2:
        return 0.0
    return float(np.std(values, ddof=1))
