"""MacroAnalysisOrchestrator: runs correlation, beta, rolling beta and regime analysis over one snapshot."""

import asyncio
from dataclasses import dataclass
from datetime import date
from functools import partial
from typing import List, Optional, Sequence, Tuple

from macrolens.analysis.beta import BetaRegressor, BetaResult
from macrolens.analysis.correlations import CorrelationAnalyzer, CorrelationResult, MacroIndicatorSeries
from macrolens.analysis.regime_detector import RegimeAnalysis, RegimeDetector
from macrolens.analysis.returns import PricePoint
from macrolens.analysis.rolling_beta import RollingBetaPoint, build_rolling_beta
from macrolens.core.config import AnalyticsConfig, get_config
from macrolens.core.errors import ValidationError
from macrolens.core.logger import get_logger

logger = get_logger(__name__)

# Indicator name fragments used to pick the regime snapshot out of the macro series
VIX_KEY = "VIX"
DXY_KEY = "DXY"
YIELD_KEY = "10Y"


@dataclass(frozen=True)
class MacroAnalysis:
    ticker: str
    analysis_date: date
    correlations: List[CorrelationResult]
    interpretation: str
    beta: BetaResult
    rolling_beta: List[RollingBetaPoint]
    regime_analysis: RegimeAnalysis


def latest_pair(indicators: Sequence[MacroIndicatorSeries], key: str) -> Tuple[Optional[float], Optional[float]]:
    """(last, previous) value of the first indicator whose name contains key."""
    for indicator in indicators:
        if key in indicator.name.upper():
            levels = indicator.levels()
            last = levels[-1] if levels else None
            previous = levels[-2] if len(levels) >= 2 else None
            return last, previous
    return None, None


class MacroAnalysisOrchestrator:
    """
    Feeds one aligned set of series to every analytics component and
    assembles a single MacroAnalysis.

    Inputs are frozen into tuples before any work starts so all components,
    including those running concurrently in the executor, read the same
    snapshot.
    """

    def __init__(self, config: Optional[AnalyticsConfig] = None):
        self.config = config or get_config()
        self._correlations = CorrelationAnalyzer(self.config)
        self._beta = BetaRegressor(self.config)
        self._regimes = RegimeDetector(self.config)

    def _jobs(
        self,
        ticker: str,
        prices: Tuple[PricePoint, ...],
        market_prices: Tuple[PricePoint, ...],
        indicators: Tuple[MacroIndicatorSeries, ...],
        analysis_date: date,
    ):
        if not prices:
            raise ValidationError("price history is required and must be non-empty")
        if not ticker:
            raise ValidationError("ticker is required")

        vix, prev_vix = latest_pair(indicators, VIX_KEY)
        dxy, prev_dxy = latest_pair(indicators, DXY_KEY)
        yld, prev_yld = latest_pair(indicators, YIELD_KEY)

        return [
            partial(self._correlations.analyze, prices, indicators, ticker, analysis_date),
            partial(self._beta.analyze, prices, market_prices, ticker),
            partial(build_rolling_beta, prices, market_prices),
            partial(
                self._regimes.analyze, prices,
                vix=vix, previous_vix=prev_vix,
                dxy=dxy, previous_dxy=prev_dxy,
                yield10y=yld, previous_yield=prev_yld,
            ),
        ]

    @staticmethod
    def _assemble(ticker: str, analysis_date: date, results) -> MacroAnalysis:
        corr, beta, rolling, regime = results
        logger.info(
            "macro_analysis_complete",
            ticker=ticker,
            correlations=len(corr.correlations),
            beta_points=len(rolling),
            regime=regime.current_regime.value,
        )
        return MacroAnalysis(
            ticker=ticker,
            analysis_date=analysis_date,
            correlations=corr.correlations,
            interpretation=corr.interpretation,
            beta=beta,
            rolling_beta=rolling,
            regime_analysis=regime,
        )

    def analyze_sync(
        self,
        ticker: str,
        prices: Sequence[PricePoint],
        market_prices: Sequence[PricePoint],
        indicators: Sequence[MacroIndicatorSeries] = (),
        analysis_date: Optional[date] = None,
    ) -> MacroAnalysis:
        """Run every component in sequence."""
        analysis_date = analysis_date or date.today()
        jobs = self._jobs(ticker, tuple(prices), tuple(market_prices), tuple(indicators), analysis_date)
        return self._assemble(ticker, analysis_date, [job() for job in jobs])

    async def analyze(
        self,
        ticker: str,
        prices: Sequence[PricePoint],
        market_prices: Sequence[PricePoint],
        indicators: Sequence[MacroIndicatorSeries] = (),
        analysis_date: Optional[date] = None,
    ) -> MacroAnalysis:
        """Run the components concurrently in the default executor."""
        analysis_date = analysis_date or date.today()
        jobs = self._jobs(ticker, tuple(prices), tuple(market_prices), tuple(indicators), analysis_date)

        loop = asyncio.get_event_loop()
        try:
            results = await asyncio.gather(*(loop.run_in_executor(None, job) for job in jobs))
        except ValidationError as e:
            logger.error("macro_analysis_rejected", ticker=ticker, error=str(e))
            raise
        return self._assemble(ticker, analysis_date, results)
