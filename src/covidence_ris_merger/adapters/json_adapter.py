"""JSON_Adapter for reading JSON tabular exports.

Accepts a list of objects (or a single object). The tags field may be a
`;`-joined string or an already-split list of strings.
"""

import json
from collections.abc import Iterator
from typing import Any

import polars as pl
from loguru import logger

from covidence_ris_merger.core.exceptions import SchemaError

from .base_adapter import BaseAdapter


class JSON_Adapter(BaseAdapter):
    """Adapter for JSON exports.

    Args:
        source: JSON file path or binary stream
        config: Column names, delimiter and schema strictness
    """

    kind = "JSON"

    def read(self) -> pl.DataFrame:
        """Read a JSON export into the normalized title/tags frame.

        Raises:
            SchemaError: Invalid JSON, non-object rows, missing keys, or undecodable rows
        """
        try:
            if hasattr(self.source, "read"):
                data = json.load(self.source)
            else:
                with open(self.source, encoding="utf-8") as f:
                    data = json.load(f)
        except json.JSONDecodeError as e:
            raise SchemaError(self.source_name, None, f"invalid JSON: {e}") from e

        if not isinstance(data, list):
            data = [data]

        logger.info(f"Read {len(data)} rows from {self.source_name}")
        return self._decode_rows(self._checked_rows(data))

    def _checked_rows(self, data: list[Any]) -> Iterator[dict[str, Any]]:
        for row_number, row in enumerate(data, start=1):
            if not isinstance(row, dict):
                raise SchemaError(
                    self.source_name, row_number, f"expected an object, got {type(row).__name__}"
                )
            self._check_columns(row.keys(), row_number)
            yield row
