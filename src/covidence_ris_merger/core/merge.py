"""Streaming merge of a RIS stream with a tag index.

The RIS source is read one line at a time and every output line is written to
the sink as soon as the scanner produces it. Nothing is buffered here; if a
fatal error is raised, whatever was already written must be treated as
incomplete.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TextIO

from loguru import logger

from .config import MergeConfig
from .index import TagIndex
from .ris import FoundTitle, ScanContext, WaitingForNextRecord, finish, step


@dataclass(frozen=True)
class MergeStats:
    """Counters reported after a successful merge."""

    lines_read: int
    records: int
    keywords_added: int


def _strip_newline(line: str) -> str:
    if line.endswith("\n"):
        line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
    return line


def merge_records(
    lines: Iterable[str],
    index: TagIndex,
    sink: TextIO,
    config: MergeConfig | None = None,
) -> MergeStats:
    """Copy RIS lines to sink, injecting keyword lines before each record's ER.

    Args:
        lines: RIS lines, with or without trailing newlines (e.g. an open text file)
        index: Title -> tags lookup built from the tabular export
        sink: Text stream receiving the merged RIS
        config: Merge settings (only keyword_tag is used here)

    Returns:
        Counters for the merged stream

    Raises:
        StructuralError: The RIS stream is not a sequence of TY ... TI ... ER records
        TitleLookupError: A record title is missing from the index
    """
    config = config or MergeConfig()
    context = ScanContext()
    records = 0
    keywords = 0

    for raw in lines:
        previous = context.state
        context, out = step(context, _strip_newline(raw), index, config.keyword_tag)
        for text in out:
            sink.write(text)
            sink.write("\n")

        if isinstance(previous, FoundTitle) and isinstance(context.state, WaitingForNextRecord):
            records += 1
            keywords += len(out) - 1
            logger.debug(f"Line {context.line_number}: {previous.title!r} +{len(out) - 1} keyword(s)")

    finish(context)
    stats = MergeStats(lines_read=context.line_number, records=records, keywords_added=keywords)
    logger.info(
        f"Merged {stats.records} records: {stats.keywords_added} keyword lines added "
        f"({stats.lines_read} lines read)"
    )
    return stats
