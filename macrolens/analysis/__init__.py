"""Analysis modules: returns, correlations, beta, rolling beta, regime, orchestration."""
from .returns import PricePoint, Window, WINDOWS, log_returns
from .correlations import (
    CorrelationAnalysis, CorrelationAnalyzer, CorrelationResult,
    IndicatorValue, MacroIndicatorSeries,
)
from .beta import BetaClass, BetaRegressor, BetaResult, BetaSource, RegressionMetrics, ResolvedBeta
from .rolling_beta import RollingBetaPoint, build_rolling_beta
from .regime_detector import (
    HistoricalPerformance, MarketRegime, RegimeAnalysis, RegimeDetector,
    RegimeIndicators, RegimePerformance, Trend,
)
from .orchestrator import MacroAnalysis, MacroAnalysisOrchestrator

__all__ = [
    "PricePoint", "Window", "WINDOWS", "log_returns",
    "CorrelationAnalysis", "CorrelationAnalyzer", "CorrelationResult",
    "IndicatorValue", "MacroIndicatorSeries",
    "BetaClass", "BetaRegressor", "BetaResult", "BetaSource", "RegressionMetrics", "ResolvedBeta",
    "RollingBetaPoint", "build_rolling_beta",
    "HistoricalPerformance", "MarketRegime", "RegimeAnalysis", "RegimeDetector",
    "RegimeIndicators", "RegimePerformance", "Trend",
    "MacroAnalysis", "MacroAnalysisOrchestrator",
]
