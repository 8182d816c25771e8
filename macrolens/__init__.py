"""macrolens: rolling correlation, beta and market-regime analytics over price and macro series."""

__version__ = "0.1.0"
