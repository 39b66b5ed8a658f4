"""Tabular export adapters (CSV/JSON -> TagIndex)."""

from pathlib import Path

from covidence_ris_merger.core.config import MergeConfig

from .base_adapter import STANDARD_SCHEMA, BaseAdapter, TabularSource
from .csv_adapter import CSV_Adapter
from .json_adapter import JSON_Adapter

ADAPTERS: dict[str, type[BaseAdapter]] = {
    "csv": CSV_Adapter,
    "json": JSON_Adapter,
}


def get_adapter(
    source: TabularSource,
    fmt: str = "auto",
    config: MergeConfig | None = None,
) -> BaseAdapter:
    """Pick an adapter by explicit format or by file suffix.

    Streams and unknown suffixes fall back to CSV, the Covidence export format.

    Raises:
        ValueError: fmt is not "auto" or a known format
    """
    if fmt == "auto":
        suffix = Path(source).suffix.lower().lstrip(".") if isinstance(source, (str, Path)) else ""
        fmt = suffix if suffix in ADAPTERS else "csv"

    if fmt not in ADAPTERS:
        raise ValueError(f"Unknown tabular format '{fmt}'. Valid formats: {sorted(ADAPTERS)}")

    return ADAPTERS[fmt](source, config)


__all__ = [
    "BaseAdapter",
    "CSV_Adapter",
    "JSON_Adapter",
    "STANDARD_SCHEMA",
    "get_adapter",
]
