"""Tests for the log-return transform."""
import math
from datetime import date

import numpy as np
import pytest

from macrolens.analysis.returns import (
    WINDOWS,
    PricePoint,
    Window,
    closes,
    log_returns,
    returns_or_empty,
    sample_mean,
    sample_std,
    validate_prices,
)
from macrolens.core.errors import ValidationError


class TestLogReturns:
    """Tests for log_returns."""

    def test_length_is_one_less_than_prices(self):
        """n prices give n - 1 returns."""
        for n in (2, 3, 31, 251):
            prices = [100.0 + i for i in range(n)]
            assert len(log_returns(prices)) == n - 1

    def test_values(self):
        """r[i] is ln(p[i+1] / p[i])."""
        returns = log_returns([100.0, 110.0, 99.0])
        assert returns[0] == pytest.approx(math.log(1.1))
        assert returns[1] == pytest.approx(math.log(0.9))

    def test_accepts_price_points(self):
        """PricePoints and raw floats give the same result."""
        points = [PricePoint(date=date(2024, 1, d), close=c) for d, c in ((1, 50.0), (2, 55.0), (3, 52.0))]
        np.testing.assert_allclose(log_returns(points), log_returns([50.0, 55.0, 52.0]))

    def test_result_is_read_only(self):
        """Returned series cannot be mutated by consumers."""
        returns = log_returns([1.0, 2.0, 3.0])
        with pytest.raises(ValueError):
            returns[0] = 0.0

    def test_single_price_is_rejected(self):
        """Fewer than two prices violates the precondition."""
        with pytest.raises(ValidationError):
            log_returns([100.0])


class TestValidation:
    """Tests for input validation."""

    def test_empty_series(self):
        with pytest.raises(ValidationError):
            validate_prices([])

    def test_non_finite(self):
        with pytest.raises(ValidationError):
            validate_prices([100.0, float("nan"), 101.0])
        with pytest.raises(ValidationError):
            validate_prices([100.0, float("inf")])

    def test_non_positive(self):
        with pytest.raises(ValidationError):
            validate_prices([100.0, 0.0, 101.0])
        with pytest.raises(ValidationError):
            validate_prices([100.0, -5.0])

    def test_error_names_series(self):
        """The series label appears in the message."""
        with pytest.raises(ValidationError, match="market prices"):
            validate_prices([], "market prices")

    def test_returns_or_empty_single_point(self):
        """One valid point is insufficient data, not an error."""
        assert len(returns_or_empty([100.0])) == 0

    def test_returns_or_empty_still_validates(self):
        with pytest.raises(ValidationError):
            returns_or_empty([])


class TestPrimitives:
    """Tests for shared helpers and the window constant."""

    def test_windows_fixed_order(self):
        assert [int(w) for w in WINDOWS] == [30, 90, 250]
        assert Window.D250 == 250

    def test_closes_from_points(self):
        points = [PricePoint(date=date(2024, 1, 1), close=10.0), PricePoint(date=date(2024, 1, 2), close=12.5)]
        np.testing.assert_array_equal(closes(points), [10.0, 12.5])

    def test_sample_std_uses_n_minus_one(self):
        assert sample_std(np.array([1.0, 2.0, 3.0, 4.0])) == pytest.approx(1.2909944, rel=1e-6)

    def test_degenerate_stats(self):
        assert sample_mean(np.array([])) == 0.0
        assert sample_std(np.array([5.0])) == 0.0
