"""RIS record scanner.

Each RIS line is `TAG  - value`. A record opens with `TY`, must contain `TI`
before it closes with `ER`. The scanner is a pure function of
(context, line) -> (context', output lines), so the merge driver only has to
thread the context through the stream and write what comes back.

Rules:
    - empty lines are dropped
    - lines without `-` pass through untouched
    - a record opened by anything but `TY`, or an `ER` before `TI`, is fatal
    - on `ER`, the record's tags are emitted as keyword lines before the `ER` line
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .exceptions import StructuralError, TitleLookupError
from .index import TagIndex

TYPE_TAG = "TY"
TITLE_TAG = "TI"
END_TAG = "ER"
KEYWORD_TAG = "KW"


@dataclass(frozen=True)
class StartParsing:
    """Nothing read yet."""


@dataclass(frozen=True)
class WaitingForNextRecord:
    """Between records: the previous one closed with ER."""


@dataclass(frozen=True)
class LookingForTitle:
    """Inside a record, TI not seen yet."""


@dataclass(frozen=True)
class FoundTitle:
    """Inside a record with its title captured."""

    title: str


ScanState = StartParsing | WaitingForNextRecord | LookingForTitle | FoundTitle


@dataclass(frozen=True)
class ScanContext:
    """Scanner position: lines consumed so far and the current state."""

    line_number: int = 0
    state: ScanState = field(default_factory=StartParsing)

    @property
    def current_line(self) -> int:
        """1-based number of the line being scanned."""
        return self.line_number + 1

    def next_line(self, state: ScanState | None = None) -> ScanContext:
        return ScanContext(self.line_number + 1, self.state if state is None else state)


def split_line(line: str) -> tuple[str, str] | None:
    """Split a line into (tag, value) on the first `-`, both trimmed.

    Returns None for lines that carry no `-` at all.
    """
    tag, sep, value = line.partition("-")
    if not sep:
        return None
    return tag.strip(), value.strip()


def keyword_line(tag: str, keyword_tag: str = KEYWORD_TAG) -> str:
    """Format an injected keyword line, e.g. `KW  - alpha`."""
    return f"{keyword_tag}  - {tag}"


def step(
    context: ScanContext,
    line: str,
    index: TagIndex,
    keyword_tag: str = KEYWORD_TAG,
) -> tuple[ScanContext, list[str]]:
    """Advance the scanner by one line.

    Args:
        context: Current scanner context
        line: One RIS line without its line terminator
        index: Title -> tags lookup
        keyword_tag: RIS tag for injected keyword lines

    Returns:
        (next context, lines to write in order)

    Raises:
        StructuralError: TY/ER found where the record structure forbids it
        TitleLookupError: The record's title is missing from the index
    """
    if not line:
        return context.next_line(), []

    parts = split_line(line)
    if parts is None:
        return context.next_line(), [line]

    tag, value = parts
    state = context.state

    if isinstance(state, (StartParsing, WaitingForNextRecord)):
        if tag == TYPE_TAG:
            return context.next_line(LookingForTitle()), [line]
        if isinstance(state, StartParsing):
            raise StructuralError(f"File started with invalid tag {tag}", context.current_line)
        raise StructuralError(
            f"Record started with invalid tag {tag} while attempting to read "
            f"the next record on line {context.current_line}",
            context.current_line,
        )

    if isinstance(state, LookingForTitle):
        if tag == TITLE_TAG:
            return context.next_line(FoundTitle(value)), [line]
        if tag == END_TAG:
            raise StructuralError(
                "Unable to find title in record before reaching the end of the record "
                f"on line {context.current_line}",
                context.current_line,
            )
        return context.next_line(), [line]

    if tag == END_TAG:
        tags = index.get(state.title)
        if tags is None:
            raise TitleLookupError(state.title, context.current_line)
        out = [keyword_line(t, keyword_tag) for t in tags]
        out.append(line)
        return context.next_line(WaitingForNextRecord()), out

    return context.next_line(), [line]


def finish(context: ScanContext) -> None:
    """Validate the state left after the last line.

    Raises:
        StructuralError: No record was read, or the last record never got a title
    """
    if isinstance(context.state, StartParsing):
        raise StructuralError("No records in file")
    if isinstance(context.state, LookingForTitle):
        raise StructuralError("Last record in file did not have an end", context.line_number)
