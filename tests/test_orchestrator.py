"""Tests for the macro analysis orchestrator."""
from datetime import date

import numpy as np
import pytest

from macrolens.analysis.orchestrator import MacroAnalysisOrchestrator, latest_pair
from macrolens.analysis.regime_detector import MarketRegime
from macrolens.analysis.returns import Window
from macrolens.core.errors import ValidationError


@pytest.fixture
def orchestrator(config):
    return MacroAnalysisOrchestrator(config)


@pytest.fixture
def inputs(make_prices, make_indicator, market_returns, noise_returns):
    asset = make_prices(1.1 * market_returns + 0.5 * noise_returns)
    market = make_prices(market_returns, start=4500.0)
    indicators = [
        make_indicator("VIX (Volatility)", 18 + 6 * np.sin(np.arange(301) * 0.05)),
        make_indicator("DXY (Dollar Index)", [p.close for p in make_prices(-market_returns, start=103.0)]),
    ]
    return asset, market, indicators


class TestLatestPair:
    """Tests for pulling regime inputs out of the indicator list."""

    def test_found(self, make_indicator):
        indicators = [make_indicator("VIX (Volatility)", [14.0, 13.0, 12.0])]
        assert latest_pair(indicators, "VIX") == (12.0, 13.0)

    def test_missing(self, make_indicator):
        assert latest_pair([make_indicator("Gold Price", [1.0, 2.0])], "VIX") == (None, None)

    def test_single_value(self, make_indicator):
        assert latest_pair([make_indicator("10Y Treasury Yield", [4.2])], "10Y") == (4.2, None)


class TestOrchestrator:
    """Tests for assembling one MacroAnalysis."""

    def test_sync_assembles_everything(self, orchestrator, inputs):
        asset, market, indicators = inputs
        analysis = orchestrator.analyze_sync("aapl", asset, market, indicators, date(2025, 1, 2))

        assert analysis.ticker == "aapl"
        assert analysis.analysis_date == date(2025, 1, 2)
        assert len(analysis.correlations) == 2 * len(Window)
        assert len(analysis.rolling_beta) == len(asset)
        assert analysis.beta.beta250d is not None
        assert analysis.regime_analysis.regime_indicators.vix is not None
        assert analysis.regime_analysis.current_regime in set(MarketRegime)

    @pytest.mark.asyncio
    async def test_async_matches_sync(self, orchestrator, inputs):
        """Concurrent execution gives the same result as sequential."""
        asset, market, indicators = inputs
        sync = orchestrator.analyze_sync("MSFT", asset, market, indicators, date(2025, 1, 2))
        concurrent = await orchestrator.analyze("MSFT", asset, market, indicators, date(2025, 1, 2))
        assert concurrent == sync

    def test_without_indicators(self, orchestrator, inputs):
        asset, market, _ = inputs
        analysis = orchestrator.analyze_sync("X", asset, market)
        assert analysis.correlations == []
        assert analysis.regime_analysis.current_regime == MarketRegime.NEUTRAL

    def test_zero_rate_indicator_keeps_analysis(self, orchestrator, inputs, make_indicator):
        """A rate that falls to 0.0 is left out of correlations; beta and regime still run."""
        asset, market, indicators = inputs
        rate = np.full(301, 0.25)
        rate[100:] = 0.0
        analysis = orchestrator.analyze_sync(
            "X", asset, market, indicators + [make_indicator("Fed Funds Rate", rate)], date(2025, 1, 2),
        )
        assert {c.indicator for c in analysis.correlations} == {"VIX (Volatility)", "DXY (Dollar Index)"}
        assert analysis.beta.beta250d is not None
        assert analysis.regime_analysis.regime_indicators.vix is not None

    def test_empty_prices(self, orchestrator, inputs):
        _, market, indicators = inputs
        with pytest.raises(ValidationError):
            orchestrator.analyze_sync("X", [], market, indicators)

    def test_missing_ticker(self, orchestrator, inputs):
        asset, market, indicators = inputs
        with pytest.raises(ValidationError):
            orchestrator.analyze_sync("", asset, market, indicators)

    @pytest.mark.asyncio
    async def test_async_propagates_validation(self, orchestrator, inputs):
        asset, market, indicators = inputs
        with pytest.raises(ValidationError):
            await orchestrator.analyze("X", asset, market[:-1], indicators)
