"""CSV reading adapter for Covidence exports.

Every column is read as a string; only the title and tags columns are
interpreted. With strict_schema the full Covidence export header must be
present. Every row must carry as many fields as the header: empty cells are
kept as "" while missing trailing fields come back as null and are rejected.
"""

import polars as pl
from loguru import logger

from covidence_ris_merger.core.exceptions import SchemaError

from .base_adapter import BaseAdapter

# the header is row 1, the first data row is row 2
FIRST_DATA_ROW = 2


class CSV_Adapter(BaseAdapter):
    """Covidence CSV export adapter.

    Args:
        source: CSV file path or binary stream
        config: Column names, delimiter and schema strictness
    """

    kind = "CSV"

    def read(self) -> pl.DataFrame:
        """Read the CSV export into the normalized title/tags frame.

        Returns:
            Polars DataFrame with `title` and `tags` columns

        Raises:
            SchemaError: The CSV cannot be parsed, required columns are missing,
                or a row has the wrong number of fields
        """
        try:
            df = pl.read_csv(
                self.source,
                has_header=True,
                infer_schema_length=0,
                empty_string_is_null=False,
            )
        except pl.exceptions.NoDataError as e:
            raise SchemaError(self.source_name, None, "empty CSV, no header row") from e
        except pl.exceptions.PolarsError as e:
            raise SchemaError(self.source_name, None, f"failed to parse CSV: {e}") from e

        self._check_columns(df.columns)
        self._check_field_counts(df)
        logger.info(f"Read {len(df)} rows from {self.source_name}")
        return self._decode_rows(df.iter_rows(named=True), first_row=FIRST_DATA_ROW)

    def _check_field_counts(self, df: pl.DataFrame) -> None:
        """Reject rows shorter than the header (their missing fields are null)."""
        short = df.select(pl.any_horizontal(pl.all().is_null()).alias("short"))["short"]
        indices = short.arg_true()
        if len(indices):
            row = int(indices[0]) + FIRST_DATA_ROW
            raise SchemaError(
                self.source_name,
                row,
                f"found fewer fields than the {len(df.columns)} header columns",
            )
