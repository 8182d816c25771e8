"""Rolling correlation analysis: asset returns vs macro indicators, with significance tiers."""

import math
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence

import numpy as np

from macrolens.analysis.returns import WINDOWS, PriceInput, Window, returns_or_empty
from macrolens.core.config import AnalyticsConfig, get_config
from macrolens.core.errors import ValidationError
from macrolens.core.logger import get_logger

logger = get_logger(__name__)

# Abramowitz & Stegun 7.1.26 coefficients (max error 1.5e-7)
_AS_A1 = 0.254829592
_AS_A2 = -0.284496736
_AS_A3 = 1.421413741
_AS_A4 = -1.453152027
_AS_A5 = 1.061405429
_AS_P = 0.3275911

_DEGENERATE_EPS = 1e-18


@dataclass(frozen=True)
class IndicatorValue:
    date: date
    value: float


@dataclass(frozen=True)
class MacroIndicatorSeries:
    """Named macro series, e.g. "VIX (Volatility)" or "10Y Treasury Yield"."""
    name: str
    values: Sequence[IndicatorValue]

    def levels(self) -> List[float]:
        return [v.value for v in self.values]


@dataclass(frozen=True)
class CorrelationResult:
    indicator: str
    window: Window
    correlation: float      # -1 to 1, 3 dp
    p_value: float          # 0 to 1, 4 dp
    sample_size: int
    significance: str       # "***", "**", "*" or "ns"


@dataclass(frozen=True)
class CorrelationAnalysis:
    ticker: str
    analysis_date: date
    correlations: List[CorrelationResult]
    interpretation: str


def norm_cdf(x: float) -> float:
    """
    Tail probability used for correlation p-values.

    Evaluates 0.5 * (1 + erf(x)) with the Abramowitz-Stegun 7.1.26 erf
    polynomial applied at x itself, not x / sqrt(2). This is narrower than the
    textbook standard normal CDF, so p-values come out smaller than a t-test
    would give; significance tiers are calibrated to this form.
    """
    sign = -1.0 if x < 0 else 1.0
    absx = abs(x)

    t = 1.0 / (1.0 + _AS_P * absx)
    t2 = t * t
    t3 = t2 * t
    t4 = t3 * t
    t5 = t4 * t

    y = 1.0 - (_AS_A5 * t5 + _AS_A4 * t4 + _AS_A3 * t3 + _AS_A2 * t2 + _AS_A1 * t) * math.exp(-absx * absx)
    return 0.5 * (1.0 + sign * y)


def pearson_correlation(x: np.ndarray, y: np.ndarray) -> float:
    """Pearson r of two equal-length series; 0 when either side has no variance."""
    if len(x) != len(y) or len(x) < 2:
        return 0.0

    x_diff = x - np.mean(x)
    y_diff = y - np.mean(y)
    numerator = float(np.sum(x_diff * y_diff))
    x_sum_sq = float(np.sum(x_diff * x_diff))
    y_sum_sq = float(np.sum(y_diff * y_diff))

    if x_sum_sq <= _DEGENERATE_EPS or y_sum_sq <= _DEGENERATE_EPS:
        return 0.0

    r = numerator / math.sqrt(x_sum_sq * y_sum_sq)
    return max(-1.0, min(1.0, r))


def p_value(correlation: float, n: int) -> float:
    """Two-tailed p-value of r using a normal approximation of the t statistic."""
    if n < 3:
        return 1.0

    denom_sq = 1.0 - correlation * correlation
    if denom_sq <= 0:
        # |r| == 1: t is unbounded and the tail probability vanishes
        return 0.0

    t = abs(correlation) * math.sqrt(n - 2) / math.sqrt(denom_sq)
    p = 2.0 * (1.0 - norm_cdf(t))
    return max(0.0, min(1.0, p))


def significance_tier(p: float) -> str:
    if p < 0.01:
        return "***"
    elif p < 0.05:
        return "**"
    elif p < 0.1:
        return "*"
    return "ns"


class CorrelationAnalyzer:
    """
    Correlates an asset's log returns with macro indicator log returns.

    Each indicator is evaluated over the trailing 30, 90 and 250 periods.
    Windows without enough history on either side are left out of the
    results rather than reported as zero.
    """

    def __init__(self, config: Optional[AnalyticsConfig] = None):
        self.config = config or get_config()

    @staticmethod
    def window_correlation(
        asset_returns: np.ndarray,
        indicator_returns: np.ndarray,
        window: Window,
        indicator: str = "",
    ) -> Optional[CorrelationResult]:
        """
        Correlate the last `window` points of two return series.

        Args:
            asset_returns: Asset log returns
            indicator_returns: Indicator log returns on the same date index
            window: Trailing window size
            indicator: Indicator name for the result

        Returns:
            CorrelationResult, or None when either series is too short
        """
        if len(asset_returns) < window or len(indicator_returns) < window:
            return None

        correlation = pearson_correlation(asset_returns[-window:], indicator_returns[-window:])
        p = p_value(correlation, int(window))

        return CorrelationResult(
            indicator=indicator,
            window=window,
            correlation=round(correlation, 3),
            p_value=round(p, 4),
            sample_size=int(window),
            significance=significance_tier(p),
        )

    def correlate(
        self,
        asset_prices: PriceInput,
        indicators: Sequence[MacroIndicatorSeries],
    ) -> List[CorrelationResult]:
        """
        Compute every (indicator, window) correlation with enough data.

        Raises:
            ValidationError: If the asset series is empty or any series is malformed

        Indicators with a zero or negative level are skipped with a warning.
        """
        if asset_prices is None or len(asset_prices) == 0:
            raise ValidationError("asset price series is required")

        asset_returns = returns_or_empty(asset_prices, "asset prices")
        results: List[CorrelationResult] = []

        for indicator in indicators:
            levels = indicator.levels()
            if not levels:
                logger.debug("indicator_series_empty", indicator=indicator.name)
                continue
            values = np.asarray(levels, dtype=float)
            if np.all(np.isfinite(values)) and np.any(values <= 0):
                # rates and spreads can sit at or below zero; log returns are undefined there
                logger.warning(
                    "correlation_indicator_skipped",
                    indicator=indicator.name,
                    reason="non-positive level",
                    min_level=float(values.min()),
                )
                continue
            indicator_returns = returns_or_empty(levels, indicator.name)

            for window in WINDOWS:
                result = self.window_correlation(asset_returns, indicator_returns, window, indicator.name)
                if result is None:
                    logger.debug(
                        "correlation_window_skipped",
                        indicator=indicator.name,
                        window=int(window),
                        asset_points=len(asset_returns),
                        indicator_points=len(indicator_returns),
                    )
                    continue
                results.append(result)

        return results

    def interpret(self, ticker: str, correlations: Sequence[CorrelationResult]) -> str:
        """Summarise significant strong correlations, split by sign."""
        threshold = self.config.strong_correlation
        strong_positive = _unique_names(
            c for c in correlations if c.correlation > threshold and c.significance != "ns"
        )
        strong_negative = _unique_names(
            c for c in correlations if c.correlation < -threshold and c.significance != "ns"
        )

        parts = []
        if strong_positive:
            parts.append(f"{ticker} shows strong positive correlation with {', '.join(strong_positive)}.")
        if strong_negative:
            parts.append(f"{ticker} shows strong negative correlation with {', '.join(strong_negative)}.")
        if not parts:
            return f"{ticker} shows weak correlations with major macro indicators."
        return " ".join(parts)

    def analyze(
        self,
        asset_prices: PriceInput,
        indicators: Sequence[MacroIndicatorSeries],
        ticker: str,
        analysis_date: Optional[date] = None,
    ) -> CorrelationAnalysis:
        """Correlations plus interpretation for one ticker."""
        correlations = self.correlate(asset_prices, indicators)
        logger.info(
            "correlations_computed",
            ticker=ticker,
            indicators=len(indicators),
            results=len(correlations),
        )
        return CorrelationAnalysis(
            ticker=ticker,
            analysis_date=analysis_date or date.today(),
            correlations=correlations,
            interpretation=self.interpret(ticker, correlations),
        )


def _unique_names(results) -> List[str]:
    names: List[str] = []
    for r in results:
        if r.indicator not in names:
            names.append(r.indicator)
    return names
