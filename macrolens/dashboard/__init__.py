"""Output layer: JSON export and Rich terminal rendering."""
from .json_export import cache_key, dumps, export_snapshot, to_wire
from .console import render

__all__ = ["cache_key", "dumps", "export_snapshot", "to_wire", "render"]
