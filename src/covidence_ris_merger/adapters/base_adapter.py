"""Tabular source adapters (base class).

Every tabular export (CSV/JSON) is reduced to the same two-column Polars
DataFrame before it becomes a TagIndex, so the RIS merge never depends on
where the tags came from.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, BinaryIO

import polars as pl
from loguru import logger

from covidence_ris_merger.core.config import MergeConfig
from covidence_ris_merger.core.exceptions import SchemaError
from covidence_ris_merger.core.index import TabularRecord, TagIndex
from covidence_ris_merger.core.tags import split_tags

# Normalized frame produced by every adapter
STANDARD_SCHEMA = {
    "title": pl.String,
    "tags": pl.List(pl.String),
}

TabularSource = Path | str | BinaryIO


class BaseAdapter(ABC):
    """Base class for tabular export adapters.

    Subclasses implement read(); validation and index construction are shared.

    Args:
        source: File path, or an already opened binary stream (e.g. stdin)
        config: Column names, delimiter and schema strictness
    """

    kind = "Tabular"

    def __init__(self, source: TabularSource, config: MergeConfig | None = None) -> None:
        if isinstance(source, (str, Path)):
            self.source: Path | BinaryIO = Path(source)
            if not self.source.exists():
                raise FileNotFoundError(f"{self.kind} file not found: {self.source}")
            self.source_name = str(self.source)
        else:
            self.source = source
            self.source_name = str(getattr(source, "name", "<stream>"))
        self.config = config or MergeConfig()

    @abstractmethod
    def read(self) -> pl.DataFrame:
        """Read the source into a frame matching STANDARD_SCHEMA.

        Raises:
            SchemaError: A row cannot be decoded, or required columns are missing
        """
        ...

    def validate(self, df: pl.DataFrame) -> bool:
        """Check that the normalized frame has rows to index."""
        return not df.is_empty()

    def build_index(self) -> TagIndex:
        """Read, validate and index the source by title.

        An empty source yields an empty index (every RIS lookup will then fail).
        """
        df = self.read()
        if not self.validate(df):
            logger.warning(f"No usable rows in {self.source_name}")
            return TagIndex()

        return TagIndex.build(
            TabularRecord(title=title, tags=tuple(tags)) for title, tags in df.select("title", "tags").iter_rows()
        )

    def _check_columns(self, columns: Iterable[str], row: int | None = None) -> None:
        present = set(columns)
        missing = [c for c in self.config.required_columns if c not in present]
        if missing:
            raise SchemaError(self.source_name, row, f"missing required columns: {missing}")

    def _decode_rows(self, rows: Iterable[Mapping[str, Any]], first_row: int = 1) -> pl.DataFrame:
        """Decode raw rows into the normalized frame.

        Args:
            rows: Raw rows keyed by column name
            first_row: Number reported in errors for the first row (CSV: 2, after the header)
        """
        titles: list[str] = []
        tag_lists: list[list[str]] = []
        title_column = self.config.title_column
        tags_column = self.config.tags_column

        for row_number, row in enumerate(rows, start=first_row):
            title = row.get(title_column)
            if not isinstance(title, str):
                raise SchemaError(
                    self.source_name,
                    row_number,
                    f"'{title_column}' must be a string, got {type(title).__name__}",
                )
            try:
                tags = split_tags(row.get(tags_column), self.config.tag_delimiter)
            except TypeError as e:
                raise SchemaError(self.source_name, row_number, f"'{tags_column}': {e}") from e

            titles.append(title)
            tag_lists.append(list(tags))

        df = pl.DataFrame({"title": titles, "tags": tag_lists}, schema=STANDARD_SCHEMA)
        logger.debug(f"Decoded {len(df)} rows from {self.source_name}")
        return df
