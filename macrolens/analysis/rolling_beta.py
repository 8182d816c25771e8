"""Rolling beta time series for charting, one point per input date."""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence

from macrolens.analysis.beta import linear_regression
from macrolens.analysis.returns import WINDOWS, PricePoint, Window, returns_or_empty
from macrolens.core.errors import ValidationError
from macrolens.core.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RollingBetaPoint:
    date: date
    beta30d: Optional[float] = None
    beta90d: Optional[float] = None
    beta250d: Optional[float] = None


_FIELD_FOR_WINDOW = {
    Window.D30: "beta30d",
    Window.D90: "beta90d",
    Window.D250: "beta250d",
}


def build_rolling_beta(
    asset_prices: Sequence[PricePoint],
    market_prices: Sequence[PricePoint],
) -> List[RollingBetaPoint]:
    """
    Beta at every date over each trailing window.

    The point at date index i only sees returns[:i], the transitions that
    end on or before prices[i]. A window w is filled once i >= w, so
    truncating the history after i never changes the value at i.

    Args:
        asset_prices: Asset PricePoints, ascending by date
        market_prices: Benchmark PricePoints on the same dates

    Returns:
        One RollingBetaPoint per asset date; unfilled windows are None

    Raises:
        ValidationError: On empty, malformed or unequal-length input
    """
    if len(asset_prices) != len(market_prices):
        raise ValidationError(
            f"asset and market series must be aligned: {len(asset_prices)} vs {len(market_prices)} points"
        )

    asset_returns = returns_or_empty(asset_prices, "asset prices")
    market_returns = returns_or_empty(market_prices, "market prices")

    series: List[RollingBetaPoint] = []
    for i, point in enumerate(asset_prices):
        cells = {}
        for window in WINDOWS:
            if i < window:
                continue
            metrics = linear_regression(market_returns[i - window:i], asset_returns[i - window:i])
            cells[_FIELD_FOR_WINDOW[window]] = round(metrics.slope, 3)
        series.append(RollingBetaPoint(date=point.date, **cells))

    logger.debug("rolling_beta_built", points=len(series))
    return series
