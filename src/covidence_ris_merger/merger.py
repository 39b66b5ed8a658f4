"""RIS merger (orchestrator).

Loads the tabular export into a TagIndex, then streams the RIS export through
the record scanner into the output. Opening files and standard streams lives
here; the core only sees a line iterable, an index and a text sink.
"""

from __future__ import annotations

import argparse
import io
import sys
from pathlib import Path
from typing import BinaryIO, TextIO

from loguru import logger

from covidence_ris_merger.adapters import ADAPTERS, get_adapter
from covidence_ris_merger.core.config import MergeConfig, load_config
from covidence_ris_merger.core.exceptions import MergeError
from covidence_ris_merger.core.merge import MergeStats, merge_records

STDIO = "-"


def _tabular_source(path: str) -> Path | BinaryIO:
    if path == STDIO:
        # polars needs a seekable buffer
        return io.BytesIO(sys.stdin.buffer.read())
    return Path(path)


def _open_text_input(path: str, encoding: str) -> TextIO:
    if path == STDIO:
        return io.TextIOWrapper(sys.stdin.buffer, encoding=encoding, newline="\n")
    return open(path, encoding=encoding, newline="\n")


def _open_text_output(path: str, encoding: str) -> TextIO:
    if path == STDIO:
        return io.TextIOWrapper(sys.stdout.buffer, encoding=encoding, newline="\n", write_through=False)
    return open(path, "w", encoding=encoding, newline="\n")


def merge_files(
    ris_path: str,
    tabular_path: str,
    output_path: str = STDIO,
    config: MergeConfig | None = None,
    tabular_format: str = "auto",
) -> MergeStats:
    """Merge tags from a tabular export into a RIS export.

    Args:
        ris_path: RIS file path, or "-" for stdin
        tabular_path: CSV/JSON file path, or "-" for stdin
        output_path: Output RIS path, or "-" for stdout
        config: Merge settings (defaults match a Covidence export)
        tabular_format: "auto" (by suffix), "csv" or "json"

    Returns:
        Counters for the merged stream

    Raises:
        ValueError: Both inputs are stdin, or the tabular format is unknown
        SchemaError: The tabular export does not decode
        StructuralError: The RIS export is malformed
        TitleLookupError: A RIS title has no tabular row
        OSError: Reading or writing failed
    """
    config = config or MergeConfig()
    if ris_path == STDIO and tabular_path == STDIO:
        raise ValueError("RIS and tabular input cannot both be read from stdin")

    # the index is complete before any RIS line is read
    index = get_adapter(_tabular_source(tabular_path), tabular_format, config).build_index()

    ris = _open_text_input(ris_path, config.encoding)
    try:
        sink = _open_text_output(output_path, config.encoding)
        try:
            return merge_records(ris, index, sink, config)
        finally:
            if output_path == STDIO:
                sink.flush()
                sink.detach()
            else:
                sink.close()
    finally:
        if ris_path == STDIO:
            ris.detach()
        else:
            ris.close()


def _configure_logging(verbose: bool) -> None:
    # stdout carries the merged RIS, so logs go to stderr only
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Merge Covidence tags into a RIS export as KW lines, matched by title"
    )
    parser.add_argument(
        "covidence_ris",
        nargs="?",
        default=STDIO,
        help="Input RIS file, use '-' for stdin",
    )
    parser.add_argument(
        "covidence_csv",
        nargs="?",
        default=STDIO,
        help="Input tabular export (CSV or JSON), use '-' for stdin",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=STDIO,
        help="Output RIS file, '-' for stdout",
    )
    parser.add_argument(
        "--format",
        choices=["auto", *sorted(ADAPTERS)],
        default="auto",
        help="Tabular export format (default: by file suffix, CSV otherwise)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Optional JSON config file (column names, keyword tag, schema strictness)",
    )
    parser.add_argument("--title-column", default=None, help="Tabular column holding the title")
    parser.add_argument("--tags-column", default=None, help="Tabular column holding the tags")
    parser.add_argument("--keyword-tag", default=None, help="RIS tag for injected keywords (default: KW)")
    parser.add_argument(
        "--lenient-schema",
        action="store_true",
        help="Only require the title and tags columns instead of the full Covidence header",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.covidence_ris == STDIO and args.covidence_csv == STDIO:
        parser.error("the RIS and tabular inputs cannot both be read from stdin")

    _configure_logging(args.verbose)

    try:
        config = load_config(args.config) if args.config else MergeConfig()
        config = config.with_overrides(
            title_column=args.title_column,
            tags_column=args.tags_column,
            keyword_tag=args.keyword_tag,
            strict_schema=False if args.lenient_schema else None,
        )
        merge_files(
            args.covidence_ris,
            args.covidence_csv,
            args.output,
            config=config,
            tabular_format=args.format,
        )
    except (MergeError, OSError, ValueError) as e:
        logger.error(str(e))
        raise SystemExit(1) from e


if __name__ == "__main__":
    main()
