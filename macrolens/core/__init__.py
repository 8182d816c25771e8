"""Core infrastructure: config, logger, errors."""
from .config import AnalyticsConfig, get_config, reset_config
from .errors import ValidationError
from .logger import setup_logging, get_logger

__all__ = [
    "AnalyticsConfig", "get_config", "reset_config",
    "ValidationError",
    "setup_logging", "get_logger",
]
