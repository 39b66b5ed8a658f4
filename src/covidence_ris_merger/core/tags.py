"""Tag list decoding.

Covidence exports tags as one `;`-joined string, while JSON exports (or
hand-made fixtures) may already carry a list. Both decode to the same ordered
tuple of trimmed tags.
"""

from __future__ import annotations

from functools import singledispatch

DEFAULT_DELIMITER = ";"


@singledispatch
def split_tags(value: object, delimiter: str = DEFAULT_DELIMITER) -> tuple[str, ...]:
    """Decode a raw tags field into an ordered tuple of tags.

    Args:
        value: Raw field value (list of strings, or a single delimited string)
        delimiter: Separator used when the value is a single string

    Returns:
        Tags in their original order, each trimmed; empty segments are kept

    Raises:
        TypeError: value is neither a string nor a list of strings

    Examples:
        >>> split_tags("alpha; beta")
        ('alpha', 'beta')
        >>> split_tags(["alpha", " beta "])
        ('alpha', 'beta')
    """
    raise TypeError(f"expected string or list of strings, got {type(value).__name__}")


@split_tags.register(list)
@split_tags.register(tuple)
def _split_sequence(value: list | tuple, delimiter: str = DEFAULT_DELIMITER) -> tuple[str, ...]:
    for item in value:
        if not isinstance(item, str):
            raise TypeError(f"expected list of strings, found item of type {type(item).__name__}")
    return tuple(item.strip() for item in value)


@split_tags.register(str)
def _split_string(value: str, delimiter: str = DEFAULT_DELIMITER) -> tuple[str, ...]:
    return tuple(part.strip() for part in value.split(delimiter))


@split_tags.register(type(None))
def _split_missing(value: None, delimiter: str = DEFAULT_DELIMITER) -> tuple[str, ...]:
    # JSON null / missing key
    return ()
