"""Tests for the command-line entry point."""
import json

import numpy as np
import pandas as pd
import pytest

from macrolens.main import EXIT_INVALID_INPUT, align, main, parse_indicator, read_series


def write_csv(path, dates, column, values):
    pd.DataFrame({"date": dates, column: values}).to_csv(path, index=False)
    return path


@pytest.fixture
def csv_inputs(tmp_path, market_returns, noise_returns):
    dates = pd.date_range("2023-01-02", periods=301, freq="B").strftime("%Y-%m-%d")
    market = 4500 * np.exp(np.concatenate([[0.0], np.cumsum(market_returns)]))
    asset = 100 * np.exp(np.concatenate([[0.0], np.cumsum(0.9 * market_returns + noise_returns)]))
    vix = 18 + 6 * np.sin(np.arange(301) * 0.05)
    return {
        "prices": write_csv(tmp_path / "asset.csv", dates, "close", asset),
        "market": write_csv(tmp_path / "spy.csv", dates, "close", market),
        "vix": write_csv(tmp_path / "vix.csv", dates[5:], "value", vix[5:]),
    }


class TestReadSeries:

    def test_sorted_and_deduplicated(self, tmp_path):
        path = write_csv(tmp_path / "s.csv", ["2024-01-03", "2024-01-02", "2024-01-03"], "Close", [3.0, 2.0, 4.0])
        series = read_series(path)
        assert list(series.values) == [2.0, 4.0]

    def test_missing_columns(self, tmp_path):
        from macrolens.core.errors import ValidationError
        path = write_csv(tmp_path / "s.csv", ["2024-01-02"], "price", [1.0])
        with pytest.raises(ValidationError):
            read_series(path)

    def test_align_inner_join(self, csv_inputs):
        df = align({
            "a": read_series(csv_inputs["prices"]),
            "v": read_series(csv_inputs["vix"]),
        })
        assert len(df) == 296

    def test_parse_indicator(self):
        name, path = parse_indicator("VIX (Volatility)=data/vix.csv")
        assert name == "VIX (Volatility)"
        assert path.name == "vix.csv"


class TestMain:

    def test_run_and_export(self, csv_inputs, tmp_path, capsys):
        out_dir = tmp_path / "out"
        code = main([
            "--ticker", "abc",
            "--prices", str(csv_inputs["prices"]),
            "--market", str(csv_inputs["market"]),
            "--indicator", f"VIX (Volatility)={csv_inputs['vix']}",
            "--json-out", str(out_dir),
        ])
        assert code == 0
        files = list(out_dir.glob("ABC_*.json"))
        assert len(files) == 1
        data = json.loads(files[0].read_text(encoding="utf-8"))
        assert len(data["rollingBeta"]) == 296
        assert {c["window"] for c in data["correlations"]} == {30, 90, 250}
        assert "ABC" in capsys.readouterr().out

    def test_invalid_prices_exit_code(self, tmp_path, csv_inputs):
        bad = write_csv(tmp_path / "bad.csv", ["2023-01-02", "2023-01-03"], "close", [100.0, -1.0])
        code = main(["--ticker", "X", "--prices", str(bad), "--market", str(csv_inputs["market"])])
        assert code == EXIT_INVALID_INPUT
