"""
Macro Analytics Engine: Entry Point
===================================
Run with:  python -m macrolens.main --ticker AAPL --prices aapl.csv --market spy.csv \
               --indicator "VIX (Volatility)=vix.csv" --indicator "DXY (Dollar Index)=dxy.csv"

Loads date-aligned CSV series, runs correlation, beta, rolling beta and
regime analysis, then renders Rich tables and optionally exports JSON.
"""

import argparse
import asyncio
import dataclasses
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pandas as pd

from macrolens.analysis.correlations import IndicatorValue, MacroIndicatorSeries
from macrolens.analysis.orchestrator import MacroAnalysisOrchestrator
from macrolens.analysis.returns import PricePoint
from macrolens.core.config import get_config
from macrolens.core.errors import ValidationError
from macrolens.core.logger import get_logger, setup_logging
from macrolens.dashboard.console import render
from macrolens.dashboard.json_export import export_snapshot

logger = get_logger(__name__)

EXIT_INVALID_INPUT = 2


def read_series(path: Path, value_column: Optional[str] = None) -> pd.Series:
    """Read a CSV with a date column and a close/value column into a date-indexed Series."""
    df = pd.read_csv(path)
    df.columns = [c.strip().lower() for c in df.columns]
    if "date" not in df.columns:
        raise ValidationError(f"{path}: missing 'date' column")

    column = value_column or next((c for c in ("close", "value") if c in df.columns), None)
    if column is None or column not in df.columns:
        raise ValidationError(f"{path}: missing 'close' or 'value' column")

    series = pd.Series(
        pd.to_numeric(df[column], errors="coerce").values,
        index=pd.to_datetime(df["date"]).dt.date,
        name=path.stem,
    )
    series = series[~series.index.duplicated(keep="last")].sort_index()
    if series.isna().any():
        raise ValidationError(f"{path}: non-numeric values in '{column}'")
    return series


def align(series: Dict[str, pd.Series]) -> pd.DataFrame:
    """Inner-join series on date, ascending."""
    df = pd.concat(series, axis=1, join="inner").sort_index()
    if df.empty:
        raise ValidationError("series share no common dates")
    return df


def to_price_points(column: pd.Series) -> List[PricePoint]:
    return [PricePoint(date=d, close=float(v)) for d, v in column.items()]


def to_indicator(name: str, column: pd.Series) -> MacroIndicatorSeries:
    return MacroIndicatorSeries(
        name=name,
        values=tuple(IndicatorValue(date=d, value=float(v)) for d, v in column.items()),
    )


def parse_indicator(value: str) -> tuple:
    name, sep, path = value.partition("=")
    if not sep or not name.strip() or not path.strip():
        raise argparse.ArgumentTypeError(f"expected NAME=CSV, got {value!r}")
    return name.strip(), Path(path.strip())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="macrolens",
        description="Rolling correlation, beta and market-regime analysis",
    )
    parser.add_argument("--ticker", required=True, help="Asset symbol")
    parser.add_argument("--prices", required=True, type=Path, help="Asset CSV (date, close)")
    parser.add_argument("--market", required=True, type=Path, help="Benchmark CSV (date, close)")
    parser.add_argument("--indicator", action="append", type=parse_indicator, default=[],
                        metavar="NAME=CSV", help="Macro indicator CSV (date, value); repeatable")
    parser.add_argument("--risk-free-rate", type=float, default=None, help="Annual risk-free rate")
    parser.add_argument("--json-out", type=Path, default=None, help="Directory for the JSON snapshot")
    parser.add_argument("--log-level", default=None, help="Logging level (default from config)")
    return parser


async def run(args: argparse.Namespace) -> int:
    config = get_config()
    if args.risk_free_rate is not None:
        config = dataclasses.replace(config, risk_free_rate=args.risk_free_rate)

    columns = {"__asset__": read_series(args.prices), "__market__": read_series(args.market)}
    for name, path in args.indicator:
        columns[name] = read_series(path)
    df = align(columns)
    logger.info("series_aligned", ticker=args.ticker, points=len(df), indicators=len(args.indicator))

    orchestrator = MacroAnalysisOrchestrator(config)
    analysis = await orchestrator.analyze(
        ticker=args.ticker.upper(),
        prices=to_price_points(df["__asset__"]),
        market_prices=to_price_points(df["__market__"]),
        indicators=[to_indicator(name, df[name]) for name, _ in args.indicator],
    )

    render(analysis)
    if args.json_out:
        export_snapshot(analysis, args.json_out)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = get_config()
    setup_logging(args.log_level or config.log_level, json_output=config.log_json)

    try:
        return asyncio.run(run(args))
    except ValidationError as e:
        logger.error("invalid_input", error=str(e))
        return EXIT_INVALID_INPUT


if __name__ == "__main__":
    sys.exit(main())
