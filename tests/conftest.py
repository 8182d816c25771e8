"""Pytest configuration and shared fixtures."""
from datetime import date, timedelta

import numpy as np
import pytest

from macrolens.analysis.correlations import IndicatorValue, MacroIndicatorSeries
from macrolens.analysis.returns import PricePoint
from macrolens.core.config import AnalyticsConfig, reset_config


@pytest.fixture(autouse=True)
def _fresh_config():
    """Keep the config singleton from leaking between tests."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def config():
    return AnalyticsConfig()


@pytest.fixture
def make_prices():
    """Build PricePoints whose log returns are exactly the given sequence."""
    def _make(returns, start: float = 100.0, start_date: date = date(2024, 1, 1)):
        levels = start * np.exp(np.concatenate([[0.0], np.cumsum(returns)]))
        return [
            PricePoint(date=start_date + timedelta(days=i), close=float(p))
            for i, p in enumerate(levels)
        ]
    return _make


@pytest.fixture
def make_indicator():
    """Build a MacroIndicatorSeries from raw levels."""
    def _make(name: str, levels, start_date: date = date(2024, 1, 1)):
        return MacroIndicatorSeries(
            name=name,
            values=tuple(
                IndicatorValue(date=start_date + timedelta(days=i), value=float(v))
                for i, v in enumerate(levels)
            ),
        )
    return _make


@pytest.fixture
def market_returns():
    """300 seeded daily benchmark returns."""
    rng = np.random.default_rng(42)
    return rng.normal(0.0005, 0.01, 300)


@pytest.fixture
def noise_returns():
    """300 seeded returns independent of market_returns."""
    rng = np.random.default_rng(7)
    return rng.normal(0.0, 0.012, 300)
