"""Merge configuration.

Defaults match a plain Covidence export. A JSON file can override any field:

    {
        "title_column": "Title",
        "tags_column": "Tags",
        "keyword_tag": "KW",
        "strict_schema": false
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from loguru import logger

# Covidence CSV export header, in export order
COVIDENCE_COLUMNS: tuple[str, ...] = (
    "Title",
    "Authors",
    "Abstract",
    "Published Year",
    "Published Month",
    "Journal",
    "Volume",
    "Issue",
    "Pages",
    "Accession Number",
    "DOI",
    "Ref",
    "Covidence #",
    "Study",
    "Notes",
    "Tags",
)


@dataclass(frozen=True)
class MergeConfig:
    """Settings shared by the tabular adapters and the RIS merger.

    Attributes:
        title_column: Tabular column holding the join key
        tags_column: Tabular column holding the tag list
        tag_delimiter: Separator inside a single-string tags field
        keyword_tag: RIS tag used for injected keyword lines
        strict_schema: Require every Covidence export column, not only title/tags
        encoding: Text encoding of the RIS input and output
    """

    title_column: str = "Title"
    tags_column: str = "Tags"
    tag_delimiter: str = ";"
    keyword_tag: str = "KW"
    strict_schema: bool = True
    encoding: str = "utf-8"

    def __post_init__(self) -> None:
        for name in ("title_column", "tags_column", "tag_delimiter", "keyword_tag", "encoding"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise ValueError(f"Invalid config value for '{name}': {value!r}")
        if not isinstance(self.strict_schema, bool):
            raise ValueError(f"Invalid config value for 'strict_schema': {self.strict_schema!r}")
        if "-" in self.keyword_tag:
            raise ValueError(f"keyword_tag must not contain '-': {self.keyword_tag!r}")

    @property
    def required_columns(self) -> tuple[str, ...]:
        """Columns a tabular source must provide."""
        if not self.strict_schema:
            return (self.title_column, self.tags_column)

        columns = list(COVIDENCE_COLUMNS)
        for name in (self.title_column, self.tags_column):
            if name not in columns:
                columns.append(name)
        return tuple(columns)

    def with_overrides(self, **overrides: Any) -> MergeConfig:
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def load_config(config_path: Path | str) -> MergeConfig:
    """Load a MergeConfig from a JSON file.

    Args:
        config_path: Path to a JSON object with MergeConfig field names as keys

    Returns:
        Config with the file's values applied over the defaults

    Raises:
        FileNotFoundError: The file does not exist
        ValueError: Invalid JSON, unknown keys, or invalid values
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        msg = f"Invalid JSON in config file: {config_path}"
        raise ValueError(msg) from e

    if not isinstance(data, dict):
        msg = f"Config file must contain a JSON object, got {type(data)}"
        raise ValueError(msg)

    known = {f.name for f in fields(MergeConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        msg = f"Unknown config keys in {config_path}: {unknown}. Valid keys: {sorted(known)}"
        raise ValueError(msg)

    logger.info(f"Loaded {len(data)} config values from {config_path}")
    return MergeConfig(**data)
