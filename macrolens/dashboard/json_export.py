"""JSON serialization of analysis results with the dashboard's camelCase field names."""

import json
import math
from dataclasses import fields, is_dataclass
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import numpy as np

from macrolens.core.logger import get_logger

logger = get_logger(__name__)


def camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_wire(obj: Any) -> Any:
    """Recursively serialize dataclasses, enums, dates and numpy scalars for JSON."""
    if is_dataclass(obj) and not isinstance(obj, type):
        return {camel_case(f.name): to_wire(getattr(obj, f.name)) for f in fields(obj)}
    elif isinstance(obj, Enum):
        return obj.value
    elif isinstance(obj, date):
        return obj.isoformat()
    elif isinstance(obj, (list, tuple)):
        return [to_wire(i) for i in obj]
    elif isinstance(obj, dict):
        return {k: to_wire(v) for k, v in obj.items()}
    elif isinstance(obj, np.generic):
        return to_wire(obj.item())
    elif isinstance(obj, float) and not math.isfinite(obj):
        return None
    return obj


def dumps(obj: Any, indent: Optional[int] = 2) -> str:
    return json.dumps(to_wire(obj), indent=indent, ensure_ascii=False)


def cache_key(operation: str, ticker: str, horizon: Optional[str] = None) -> str:
    """Key layout used by the external result cache: {operation}:{ticker}[:{horizon}]."""
    key = f"{operation}:{ticker.upper()}"
    if horizon:
        key += f":{horizon}"
    return key


def export_snapshot(analysis, directory: Path) -> Path:
    """Write a MacroAnalysis to <directory>/<ticker>_<date>.json and return the path."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{analysis.ticker}_{analysis.analysis_date.isoformat()}.json"
    path.write_text(dumps(analysis), encoding="utf-8")
    logger.info("snapshot_exported", path=str(path))
    return path
