"""Beta regression: OLS of asset returns on benchmark returns at 30/90/250-period horizons."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

import numpy as np

from macrolens.analysis.returns import (
    WINDOWS,
    PriceInput,
    Window,
    returns_or_empty,
    sample_mean,
    sample_std,
)
from macrolens.core.config import AnalyticsConfig, get_config
from macrolens.core.logger import get_logger

logger = get_logger(__name__)

DEFENSIVE_BELOW = 0.8
AGGRESSIVE_ABOVE = 1.2
DEFAULT_BETA = 1.0

_DEGENERATE_EPS = 1e-18


class BetaClass(Enum):
    DEFENSIVE = "defensive"
    NEUTRAL = "neutral"
    AGGRESSIVE = "aggressive"


class BetaSource(Enum):
    EXACT = "exact"         # 250-period beta was available
    FALLBACK = "fallback"   # a shorter window stood in
    DEFAULT = "default"     # no window had enough data


@dataclass(frozen=True)
class RegressionMetrics:
    slope: float
    intercept: float
    r_squared: float        # 0 to 1
    correlation: float      # -1 to 1


@dataclass(frozen=True)
class ResolvedBeta:
    value: float
    source: BetaSource
    window: Optional[Window] = None


@dataclass(frozen=True)
class BetaResult:
    beta30d: Optional[float]
    beta90d: Optional[float]
    beta250d: Optional[float]
    alpha: float
    r_squared: float
    classification: BetaClass
    interpretation: str
    resolved_beta: ResolvedBeta


_ZERO_FIT = RegressionMetrics(slope=0.0, intercept=0.0, r_squared=0.0, correlation=0.0)


def linear_regression(x: np.ndarray, y: np.ndarray) -> RegressionMetrics:
    """
    Fit y = intercept + slope * x by ordinary least squares.

    Uses sample covariance / variance (n - 1). A flat x series cannot be
    regressed on, so it yields slope 0 and intercept mean(y).

    Args:
        x: Benchmark returns
        y: Asset returns, same length as x

    Returns:
        Unrounded RegressionMetrics
    """
    if len(x) != len(y) or len(x) < 2:
        return _ZERO_FIT

    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    n = len(x)
    x_mean = float(np.mean(x))
    y_mean = float(np.mean(y))
    x_diff = x - x_mean
    y_diff = y - y_mean

    x_var = float(np.sum(x_diff * x_diff)) / (n - 1)
    if x_var <= _DEGENERATE_EPS:
        return RegressionMetrics(slope=0.0, intercept=y_mean, r_squared=0.0, correlation=0.0)

    cov = float(np.sum(x_diff * y_diff)) / (n - 1)
    slope = cov / x_var
    intercept = y_mean - slope * x_mean

    residuals = y - (intercept + slope * x)
    ss_res = float(np.sum(residuals * residuals))
    ss_tot = float(np.sum(y_diff * y_diff))
    r_squared = 0.0 if ss_tot <= _DEGENERATE_EPS else 1.0 - ss_res / ss_tot

    y_std = sample_std(y)
    x_std = sample_std(x)
    correlation = 0.0 if x_std == 0 or y_std == 0 else cov / (x_std * y_std)

    return RegressionMetrics(
        slope=slope,
        intercept=intercept,
        r_squared=max(0.0, min(1.0, r_squared)),
        correlation=max(-1.0, min(1.0, correlation)),
    )


def beta_for_window(
    asset_returns: np.ndarray,
    market_returns: np.ndarray,
    window: Window,
) -> Optional[float]:
    """Slope over the trailing window, or None when either series is too short."""
    if len(asset_returns) < window or len(market_returns) < window:
        return None
    return linear_regression(market_returns[-window:], asset_returns[-window:]).slope


def resolve_beta(betas: Dict[Window, Optional[float]]) -> ResolvedBeta:
    """
    Pick the beta used for classification and alpha.

    Prefers the 250-period estimate, then 90, then 30, then DEFAULT_BETA.
    The source tag tells callers whether they got a degraded estimate.
    """
    for window in reversed(WINDOWS):
        value = betas.get(window)
        if value is None:
            continue
        source = BetaSource.EXACT if window == Window.D250 else BetaSource.FALLBACK
        return ResolvedBeta(value=value, source=source, window=window)
    return ResolvedBeta(value=DEFAULT_BETA, source=BetaSource.DEFAULT)


def classify_beta(beta: float) -> BetaClass:
    if beta < DEFENSIVE_BELOW:
        return BetaClass.DEFENSIVE
    elif beta > AGGRESSIVE_ABOVE:
        return BetaClass.AGGRESSIVE
    return BetaClass.NEUTRAL


def _round_optional(value: Optional[float], digits: int) -> Optional[float]:
    return None if value is None else round(value, digits)


class BetaRegressor:
    """Snapshot beta, alpha and R-squared of an asset against a benchmark."""

    def __init__(self, config: Optional[AnalyticsConfig] = None):
        self.config = config or get_config()

    def interpret(
        self,
        ticker: str,
        classification: BetaClass,
        beta: float,
        alpha: float,
        r_squared: float,
        benchmark: str,
    ) -> str:
        """Template text; deterministic for identical rounded inputs."""
        beta_txt = f"{beta:.2f}"
        if classification == BetaClass.DEFENSIVE:
            text = (
                f"{ticker} is a defensive stock (β={beta_txt}) that moves less than the market. "
                "In down markets, it typically falls less. In up markets, it rises less."
            )
        elif classification == BetaClass.AGGRESSIVE:
            text = (
                f"{ticker} is a growth/aggressive stock (β={beta_txt}) that moves more than the market. "
                "In up markets, it typically outperforms. In down markets, it falls more."
            )
        else:
            text = (
                f"{ticker} is a market-neutral stock (β={beta_txt}) that moves in line with the market. "
                f"Its performance closely tracks the {benchmark}."
            )

        if abs(alpha) > self.config.alpha_threshold:
            direction = "positive" if alpha > 0 else "negative"
            annualized = alpha * self.config.trading_days * 100
            text += f" It shows {direction} alpha ({annualized:.1f}% annualized excess return)."

        pct = r_squared * 100
        text += f" R² of {pct:.1f}% suggests the market explains {pct:.0f}% of price movements."
        return text

    def analyze(
        self,
        asset_prices: PriceInput,
        market_prices: PriceInput,
        ticker: str,
        risk_free_rate: Optional[float] = None,
        benchmark: Optional[str] = None,
    ) -> BetaResult:
        """
        Compute 30/90/250-period betas, alpha and R-squared.

        Args:
            asset_prices: Asset closes (PricePoints or floats)
            market_prices: Benchmark closes on the same date index
            ticker: Asset symbol used in the interpretation
            risk_free_rate: Annual risk-free rate, defaults to config
            benchmark: Benchmark display name, defaults to config

        Returns:
            BetaResult; per-window betas are None when their window lacks data

        Raises:
            ValidationError: If either series is empty or malformed
        """
        cfg = self.config
        rf_annual = cfg.risk_free_rate if risk_free_rate is None else risk_free_rate
        benchmark = benchmark or cfg.benchmark_name

        asset_returns = returns_or_empty(asset_prices, "asset prices")
        market_returns = returns_or_empty(market_prices, "market prices")

        betas = {w: beta_for_window(asset_returns, market_returns, w) for w in WINDOWS}
        resolved = resolve_beta(betas)
        if resolved.source != BetaSource.EXACT:
            logger.info(
                "beta_resolved_with_fallback",
                ticker=ticker,
                source=resolved.source.value,
                window=int(resolved.window) if resolved.window else None,
            )

        rf_daily = rf_annual / cfg.trading_days
        avg_asset = sample_mean(asset_returns)
        avg_market = sample_mean(market_returns)
        alpha = avg_asset - (rf_daily + resolved.value * (avg_market - rf_daily))

        # R² over the longest trailing stretch available, capped at 250
        span = min(len(asset_returns), len(market_returns), int(Window.D250))
        r_squared = (
            linear_regression(market_returns[-span:], asset_returns[-span:]).r_squared
            if span >= 2 else 0.0
        )

        classification = classify_beta(resolved.value)
        beta_r = round(resolved.value, 2)
        alpha_r = round(alpha, 5)
        r_squared_r = round(r_squared, 3)

        return BetaResult(
            beta30d=_round_optional(betas[Window.D30], 3),
            beta90d=_round_optional(betas[Window.D90], 3),
            beta250d=_round_optional(betas[Window.D250], 3),
            alpha=alpha_r,
            r_squared=r_squared_r,
            classification=classification,
            interpretation=self.interpret(ticker, classification, beta_r, alpha_r, r_squared_r, benchmark),
            resolved_beta=ResolvedBeta(
                value=round(resolved.value, 3),
                source=resolved.source,
                window=resolved.window,
            ),
        )
