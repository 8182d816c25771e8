"""Rule-based market regime detector with historical regime performance."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from macrolens.analysis.returns import PriceInput, returns_or_empty, sample_mean, sample_std, validate_prices
from macrolens.core.config import AnalyticsConfig, get_config
from macrolens.core.logger import get_logger

logger = get_logger(__name__)


class MarketRegime(Enum):
    RISK_ON = "risk-on"
    RISK_OFF = "risk-off"
    NEUTRAL = "neutral"


class Trend(Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


REGIME_ACTIONS = {
    MarketRegime.RISK_ON: [
        "Growth/momentum strategies may outperform",
        "Consider increasing equity exposure",
    ],
    MarketRegime.RISK_OFF: [
        "Defensive/quality strategies may outperform",
        "Consider hedging or reducing risk exposure",
    ],
    MarketRegime.NEUTRAL: [
        "Market signals are mixed",
        "Maintain balanced approach",
    ],
}


@dataclass(frozen=True)
class RegimeIndicators:
    vix: Optional[float]
    dxy: Optional[float]
    yield10y: Optional[float]
    vix_trend: Trend = Trend.STABLE
    sp500_trend: Trend = Trend.STABLE
    dxy_trend: Trend = Trend.STABLE
    yield_trend: Trend = Trend.STABLE


@dataclass(frozen=True)
class RegimePerformance:
    regime: MarketRegime
    avg_return: float               # mean daily log return
    win_rate: float                 # % of up days, 0-100
    volatility: float               # sample stdev of daily returns
    sharpe_ratio: float             # avg_return / volatility
    occurrence_percentage: float    # % of history spent in this regime, 0-100


@dataclass(frozen=True)
class HistoricalPerformance:
    risk_on: RegimePerformance
    risk_off: RegimePerformance
    neutral: RegimePerformance

    def for_regime(self, regime: MarketRegime) -> RegimePerformance:
        return {
            MarketRegime.RISK_ON: self.risk_on,
            MarketRegime.RISK_OFF: self.risk_off,
            MarketRegime.NEUTRAL: self.neutral,
        }[regime]


@dataclass(frozen=True)
class RegimeAnalysis:
    current_regime: MarketRegime
    confidence: float       # 0.0 to 1.0
    regime_indicators: RegimeIndicators
    historical_performance: HistoricalPerformance
    interpretation: str
    action_items: List[str]


def calculate_trend(current: Optional[float], previous: Optional[float], threshold: float = 0.005) -> Trend:
    """Direction of the relative move from previous to current."""
    if current is None or previous is None or previous == 0:
        return Trend.STABLE
    change = (current - previous) / previous
    if change > threshold:
        return Trend.UP
    elif change < -threshold:
        return Trend.DOWN
    return Trend.STABLE


def derive_regime_history(returns: np.ndarray, config: Optional[AnalyticsConfig] = None) -> List[MarketRegime]:
    """
    Estimate a regime label for every return from trailing momentum and volatility.

    Label i only looks at the up-to-20 returns before i. This is an
    estimation utility standing in for true historical VIX/DXY regimes, which
    are not available here; it does not use the same rule as classify_regime.
    """
    cfg = config or get_config()
    history: List[MarketRegime] = []

    for i in range(len(returns)):
        lookback = min(cfg.regime_lookback, i)
        if lookback < 2:
            history.append(MarketRegime.NEUTRAL)
            continue

        recent = returns[i - lookback:i]
        avg = sample_mean(recent)
        vol = sample_std(recent)

        if avg > cfg.regime_momentum and vol < cfg.regime_calm_vol:
            history.append(MarketRegime.RISK_ON)
        elif avg < -cfg.regime_momentum and vol > cfg.regime_stress_vol:
            history.append(MarketRegime.RISK_OFF)
        else:
            history.append(MarketRegime.NEUTRAL)

    return history


def _empty_performance(regime: MarketRegime) -> RegimePerformance:
    return RegimePerformance(
        regime=regime,
        avg_return=0.0,
        win_rate=0.0,
        volatility=0.0,
        sharpe_ratio=0.0,
        occurrence_percentage=0.0,
    )


def regime_performance(returns: np.ndarray, history: Sequence[MarketRegime]) -> HistoricalPerformance:
    """Per-regime return statistics over returns labelled by an aligned history."""
    labels = np.array([r.value for r in history[:len(returns)]], dtype=object)
    performances: Dict[MarketRegime, RegimePerformance] = {}

    for regime in MarketRegime:
        subset = np.asarray(returns[:len(labels)])[labels == regime.value]
        if len(subset) == 0:
            performances[regime] = _empty_performance(regime)
            continue

        avg = sample_mean(subset)
        vol = sample_std(subset)
        win_rate = float(np.count_nonzero(subset > 0)) / len(subset)
        sharpe = avg / vol if vol > 0 else 0.0

        performances[regime] = RegimePerformance(
            regime=regime,
            avg_return=round(avg, 4),
            win_rate=round(win_rate * 100, 1),
            volatility=round(vol, 4),
            sharpe_ratio=round(sharpe, 3),
            occurrence_percentage=round(len(subset) / len(returns) * 100, 1),
        )

    return HistoricalPerformance(
        risk_on=performances[MarketRegime.RISK_ON],
        risk_off=performances[MarketRegime.RISK_OFF],
        neutral=performances[MarketRegime.NEUTRAL],
    )


class RegimeDetector:
    """
    Classifies the market environment from VIX level, market trend and dollar direction.

    Rules, first match wins:
    1. Calm VIX + market up + dollar down  -> RISK_ON
    2. High VIX + market down + dollar up  -> RISK_OFF
    3. Calm VIX + market up               -> RISK_ON
    4. High VIX + market down             -> RISK_OFF
    5. Otherwise                          -> NEUTRAL

    Every call is evaluated fresh; no previous regime is kept.
    """

    def __init__(self, config: Optional[AnalyticsConfig] = None):
        self.config = config or get_config()

    def build_indicators(
        self,
        prices: PriceInput,
        vix: Optional[float] = None,
        previous_vix: Optional[float] = None,
        dxy: Optional[float] = None,
        previous_dxy: Optional[float] = None,
        yield10y: Optional[float] = None,
        previous_yield: Optional[float] = None,
    ) -> RegimeIndicators:
        """Snapshot indicators; the market trend is the last close vs its trailing average."""
        cfg = self.config
        closes = validate_prices(prices, "asset prices")
        recent = closes[-cfg.trend_lookback:]
        sp500_trend = calculate_trend(float(closes[-1]), float(np.mean(recent)), cfg.trend_threshold)

        return RegimeIndicators(
            vix=None if vix is None else round(vix, 1),
            dxy=None if dxy is None else round(dxy, 2),
            yield10y=None if yield10y is None else round(yield10y, 2),
            vix_trend=calculate_trend(vix, previous_vix, cfg.trend_threshold),
            sp500_trend=sp500_trend,
            dxy_trend=calculate_trend(dxy, previous_dxy, cfg.trend_threshold),
            yield_trend=calculate_trend(yield10y, previous_yield, cfg.trend_threshold),
        )

    def classify(self, indicators: RegimeIndicators) -> MarketRegime:
        cfg = self.config
        if indicators.vix is None:
            return MarketRegime.NEUTRAL

        vix_calm = indicators.vix < cfg.vix_risk_on
        vix_high = indicators.vix > cfg.vix_risk_off
        market_up = indicators.sp500_trend == Trend.UP
        market_down = indicators.sp500_trend == Trend.DOWN
        usd_weak = indicators.dxy_trend == Trend.DOWN
        usd_strong = indicators.dxy_trend == Trend.UP

        if vix_calm and market_up and usd_weak:
            return MarketRegime.RISK_ON
        if vix_high and market_down and usd_strong:
            return MarketRegime.RISK_OFF
        if vix_calm and market_up:
            return MarketRegime.RISK_ON
        if vix_high and market_down:
            return MarketRegime.RISK_OFF
        return MarketRegime.NEUTRAL

    def confidence(self, regime: MarketRegime, indicators: RegimeIndicators) -> float:
        """Confidence in [0, 1]; extremes and agreeing trends add to a 0.3 base."""
        cfg = self.config
        if indicators.vix is None:
            return 0.3

        score = 0.3
        if regime == MarketRegime.RISK_ON:
            if indicators.vix < cfg.vix_extreme_low:
                score += 0.3
            elif indicators.vix < cfg.vix_risk_on:
                score += 0.2
            if indicators.sp500_trend == Trend.UP:
                score += 0.25
            if indicators.dxy_trend == Trend.DOWN:
                score += 0.15
        elif regime == MarketRegime.RISK_OFF:
            if indicators.vix > cfg.vix_extreme_high:
                score += 0.3
            elif indicators.vix > cfg.vix_risk_off:
                score += 0.2
            if indicators.sp500_trend == Trend.DOWN:
                score += 0.25
            if indicators.dxy_trend == Trend.UP:
                score += 0.15
        else:
            score = 0.4

        return round(min(max(score, 0.0), 1.0), 4)

    def detect(self, indicators: RegimeIndicators) -> Tuple[MarketRegime, float]:
        """Pure classification of one indicator snapshot."""
        regime = self.classify(indicators)
        return regime, self.confidence(regime, indicators)

    @staticmethod
    def interpret(
        regime: MarketRegime,
        confidence: float,
        indicators: RegimeIndicators,
        performance: HistoricalPerformance,
    ) -> str:
        text = f"Current market regime is {regime.value.upper()} ({round(confidence * 100)}% confidence). "
        vix_txt = "n/a" if indicators.vix is None else f"{indicators.vix}"

        if regime == MarketRegime.RISK_ON:
            text += (
                f"Low volatility (VIX={vix_txt}), strong market momentum, and weak dollar suggest investor risk appetite. "
                f"Historically, this stock averaged {performance.risk_on.avg_return * 100:.2f}% per day in this environment."
            )
        elif regime == MarketRegime.RISK_OFF:
            text += (
                f"High volatility (VIX={vix_txt}), market weakness, and dollar strength indicate flight to safety. "
                f"In stress environments this stock averaged {performance.risk_off.avg_return * 100:.2f}% per day."
            )
        else:
            text += "Mixed signals from market indicators create uncertain conditions. "
            text += "Returns have been more balanced across regimes."
        return text

    @staticmethod
    def action_items(regime: MarketRegime, performance: HistoricalPerformance) -> List[str]:
        items = list(REGIME_ACTIONS[regime])
        risk_on_avg = performance.risk_on.avg_return
        risk_off_avg = performance.risk_off.avg_return

        if regime == MarketRegime.RISK_ON:
            if risk_on_avg > risk_off_avg:
                items.append("This stock typically benefits from risk-on conditions")
        elif regime == MarketRegime.RISK_OFF:
            if risk_off_avg > risk_on_avg:
                items.append("This stock shows resilience in downturns")
            else:
                items.append("This stock is vulnerable in risk-off environments")
        return items

    def analyze(
        self,
        prices: PriceInput,
        vix: Optional[float] = None,
        previous_vix: Optional[float] = None,
        dxy: Optional[float] = None,
        previous_dxy: Optional[float] = None,
        yield10y: Optional[float] = None,
        previous_yield: Optional[float] = None,
    ) -> RegimeAnalysis:
        """
        Classify the current regime and attribute historical performance.

        Args:
            prices: Asset closes, ascending by date
            vix, dxy, yield10y: Latest indicator levels, None when unavailable
            previous_*: Prior levels used for the indicator trends

        Returns:
            RegimeAnalysis

        Raises:
            ValidationError: If prices are empty or malformed
        """
        indicators = self.build_indicators(
            prices, vix, previous_vix, dxy, previous_dxy, yield10y, previous_yield,
        )
        regime, confidence = self.detect(indicators)

        returns = returns_or_empty(prices, "asset prices")
        history = derive_regime_history(returns, self.config)
        performance = regime_performance(returns, history)

        logger.info(
            "regime_classified",
            regime=regime.value,
            confidence=confidence,
            vix=indicators.vix,
            market_trend=indicators.sp500_trend.value,
            dxy_trend=indicators.dxy_trend.value,
        )

        return RegimeAnalysis(
            current_regime=regime,
            confidence=confidence,
            regime_indicators=indicators,
            historical_performance=performance,
            interpretation=self.interpret(regime, confidence, indicators, performance),
            action_items=self.action_items(regime, performance),
        )
