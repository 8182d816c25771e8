"""Analytics engine configuration."""

import os
from dataclasses import dataclass, fields
from typing import Optional

from dotenv import load_dotenv

ENV_PREFIX = "MACROLENS_"


@dataclass
class AnalyticsConfig:
    # Beta / alpha
    risk_free_rate: float = 0.02        # annual
    trading_days: int = 252
    alpha_threshold: float = 0.0005     # daily alpha worth mentioning
    benchmark_name: str = "S&P 500"

    # Correlation interpretation
    strong_correlation: float = 0.5

    # Trend heuristic
    trend_threshold: float = 0.005      # 0.5% relative change
    trend_lookback: int = 20            # closes averaged for the market trend
    regime_lookback: int = 20           # trailing returns behind each historical regime label

    # Regime thresholds
    vix_risk_on: float = 15.0
    vix_risk_off: float = 25.0
    vix_extreme_low: float = 12.0
    vix_extreme_high: float = 30.0

    # Historical regime heuristic (trailing momentum / volatility)
    regime_momentum: float = 0.003
    regime_calm_vol: float = 0.02
    regime_stress_vol: float = 0.03

    # External cache TTL for macro-style results (seconds)
    macro_cache_ttl: int = 86400

    log_level: str = "INFO"
    log_json: bool = False              # one JSON object per log line

    @classmethod
    def from_env(cls) -> "AnalyticsConfig":
        """Build a config from defaults overridden by MACROLENS_* variables."""
        load_dotenv()
        overrides = {}
        for f in fields(cls):
            raw = os.getenv(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            if f.type in (bool, "bool"):
                overrides[f.name] = raw.strip().lower() in ("1", "true", "yes")
            elif f.type in (float, "float"):
                overrides[f.name] = float(raw)
            elif f.type in (int, "int"):
                overrides[f.name] = int(raw)
            else:
                overrides[f.name] = raw
        return cls(**overrides)


# Global singleton
_config: Optional[AnalyticsConfig] = None


def get_config() -> AnalyticsConfig:
    global _config
    if _config is None:
        _config = AnalyticsConfig.from_env()
    return _config


def reset_config() -> None:
    """Drop the cached config so the next get_config() re-reads the environment."""
    global _config
    _config = None
