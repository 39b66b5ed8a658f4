"""Merger exceptions.

Every failure is fatal for the run. The CLI turns any MergeError into a single
error line and a non-zero exit status.
"""


class MergeError(Exception):
    """Base class for all merge failures."""


class SchemaError(MergeError):
    """A tabular row could not be decoded into a title/tags record.

    Attributes:
        source: Name of the tabular source (file path or "<stdin>")
        row: Row number for diagnostics, None when the whole table is invalid
        reason: Human readable cause
    """

    def __init__(self, source: str, row: int | None, reason: str) -> None:
        self.source = source
        self.row = row
        self.reason = reason
        where = f"{source}, row {row}" if row is not None else source
        super().__init__(f"Failed to read tabular record ({where}): {reason}")


class StructuralError(MergeError):
    """The RIS stream violates record structure (TY ... TI ... ER).

    Attributes:
        line_number: 1-based line number of the offending line, None at end of stream
        reason: Human readable cause
    """

    def __init__(self, reason: str, line_number: int | None = None) -> None:
        self.line_number = line_number
        self.reason = reason
        super().__init__(reason)


class TitleLookupError(MergeError, LookupError):
    """A record's title has no entry in the tag index."""

    def __init__(self, title: str, line_number: int) -> None:
        self.title = title
        self.line_number = line_number
        super().__init__(
            f'Failed to retrieve covidence record for document "{title}" on line {line_number}'
        )
