"""Rich terminal rendering of a MacroAnalysis."""

from typing import Optional

from rich import box
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table

from macrolens.analysis.beta import BetaClass
from macrolens.analysis.orchestrator import MacroAnalysis
from macrolens.analysis.regime_detector import MarketRegime

REGIME_COLORS = {
    MarketRegime.RISK_ON: "green",
    MarketRegime.RISK_OFF: "red",
    MarketRegime.NEUTRAL: "yellow",
}

BETA_COLORS = {
    BetaClass.DEFENSIVE: "green",
    BetaClass.NEUTRAL: "yellow",
    BetaClass.AGGRESSIVE: "red",
}


def _fmt_opt(value: Optional[float], digits: int = 3) -> str:
    return "—" if value is None else f"{value:.{digits}f}"


def _fmt_pct(p: float, show_sign=True) -> str:
    sign = "+" if p >= 0 and show_sign else ""
    return f"{sign}{p:.2f}%"


def _color_corr(r: float) -> str:
    return "green" if r > 0 else "red" if r < 0 else "white"


def _build_correlations(analysis: MacroAnalysis) -> Panel:
    t = Table(box=box.SIMPLE, show_header=True, header_style="bold cyan", expand=True)
    t.add_column("Indicator", style="dim")
    t.add_column("Window", justify="right")
    t.add_column("r", justify="right")
    t.add_column("p", justify="right")
    t.add_column("Sig", justify="center")

    if analysis.correlations:
        for c in analysis.correlations:
            color = _color_corr(c.correlation)
            t.add_row(
                c.indicator,
                f"{int(c.window)}d",
                f"[{color}]{c.correlation:+.3f}[/{color}]",
                f"{c.p_value:.4f}",
                c.significance,
            )
    else:
        t.add_row("[dim]Not enough aligned history[/dim]", "", "", "", "")

    return Panel(Group(t, f"[dim]{analysis.interpretation}[/dim]"), title="[bold]Macro Correlations[/bold]", border_style="blue")


def _build_beta(analysis: MacroAnalysis, tail: int) -> Panel:
    beta = analysis.beta
    color = BETA_COLORS[beta.classification]

    t = Table(box=box.SIMPLE, show_header=True, header_style="bold cyan", expand=True)
    t.add_column("Metric", style="dim")
    t.add_column("Value", justify="right")
    t.add_row("β 30d", _fmt_opt(beta.beta30d))
    t.add_row("β 90d", _fmt_opt(beta.beta90d))
    t.add_row("β 250d", _fmt_opt(beta.beta250d))
    t.add_row("Alpha (daily)", f"{beta.alpha:+.5f}")
    t.add_row("R²", f"{beta.r_squared:.3f}")
    t.add_row("Class", f"[{color}]{beta.classification.value}[/{color}] ({beta.resolved_beta.source.value})")

    rolling = Table(box=box.SIMPLE, show_header=True, header_style="bold cyan", expand=True)
    rolling.add_column("Date", style="dim")
    rolling.add_column("β 30d", justify="right")
    rolling.add_column("β 90d", justify="right")
    rolling.add_column("β 250d", justify="right")
    for point in analysis.rolling_beta[-tail:]:
        rolling.add_row(point.date.isoformat(), _fmt_opt(point.beta30d), _fmt_opt(point.beta90d), _fmt_opt(point.beta250d))

    return Panel(Group(t, rolling, f"[dim]{beta.interpretation}[/dim]"), title="[bold]Beta vs Benchmark[/bold]", border_style="magenta")


def _build_regime(analysis: MacroAnalysis) -> Panel:
    regime = analysis.regime_analysis
    color = REGIME_COLORS[regime.current_regime]
    ind = regime.regime_indicators

    t = Table(box=box.SIMPLE, show_header=True, header_style="bold cyan", expand=True)
    t.add_column("Regime", style="dim")
    t.add_column("Avg/day", justify="right")
    t.add_column("Win %", justify="right")
    t.add_column("Vol", justify="right")
    t.add_column("Sharpe", justify="right")
    t.add_column("Occur %", justify="right")
    for perf in (regime.historical_performance.risk_on,
                 regime.historical_performance.risk_off,
                 regime.historical_performance.neutral):
        t.add_row(
            perf.regime.value,
            _fmt_pct(perf.avg_return * 100),
            f"{perf.win_rate:.1f}",
            f"{perf.volatility:.4f}",
            f"{perf.sharpe_ratio:.3f}",
            f"{perf.occurrence_percentage:.1f}",
        )

    header = (
        f"[bold {color}]{regime.current_regime.value.upper()}[/bold {color}] "
        f"confidence {regime.confidence:.0%} | VIX {_fmt_opt(ind.vix, 1)} ({ind.vix_trend.value}) "
        f"| DXY {_fmt_opt(ind.dxy, 2)} ({ind.dxy_trend.value}) | market {ind.sp500_trend.value}"
    )
    actions = "\n".join(f"• {item}" for item in regime.action_items)
    return Panel(Group(header, t, f"[dim]{regime.interpretation}[/dim]", actions),
                 title="[bold]Market Regime[/bold]", border_style="yellow")


def render(analysis: MacroAnalysis, console: Optional[Console] = None, rolling_tail: int = 5) -> None:
    """Print every panel of an analysis."""
    console = console or Console()
    console.rule(f"[bold]{analysis.ticker}[/bold] macro analysis {analysis.analysis_date.isoformat()}")
    console.print(_build_correlations(analysis))
    console.print(_build_beta(analysis, rolling_tail))
    console.print(_build_regime(analysis))
