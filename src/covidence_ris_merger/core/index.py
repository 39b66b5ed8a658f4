"""Title-indexed tag lookup built from the tabular export."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from loguru import logger


@dataclass(frozen=True)
class TabularRecord:
    """One document row of the tabular export (only the fields the merge needs)."""

    title: str
    tags: tuple[str, ...]


class TagIndex(Mapping[str, tuple[str, ...]]):
    """Immutable title -> tags mapping.

    Titles are matched exactly; no case folding or fuzzy matching is done.
    """

    def __init__(self, entries: Mapping[str, tuple[str, ...]] | None = None) -> None:
        self._entries: Mapping[str, tuple[str, ...]] = MappingProxyType(dict(entries or {}))

    @classmethod
    def build(cls, records: Iterable[TabularRecord]) -> TagIndex:
        """Consume every record and build the index.

        A title seen more than once keeps the tags of its last row.
        """
        entries: dict[str, tuple[str, ...]] = {}
        duplicates = 0
        for record in records:
            if record.title in entries:
                duplicates += 1
                logger.debug(f"Duplicate title overwrites earlier row: {record.title!r}")
            entries[record.title] = record.tags

        logger.info(f"Built tag index: {len(entries)} titles ({duplicates} duplicate rows)")
        return cls(entries)

    def __getitem__(self, title: str) -> tuple[str, ...]:
        return self._entries[title]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"TagIndex({len(self)} titles)"
