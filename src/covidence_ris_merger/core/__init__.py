"""RIS merge core.

- Tag list decoding (string or list -> ordered tags)
- Title-indexed tag lookup
- RIS record scanner and streaming merge
"""

from .exceptions import MergeError, SchemaError, StructuralError, TitleLookupError
from .index import TabularRecord, TagIndex
from .merge import MergeStats, merge_records
from .tags import split_tags

__all__ = [
    "split_tags",
    "TabularRecord",
    "TagIndex",
    "merge_records",
    "MergeStats",
    "MergeError",
    "SchemaError",
    "StructuralError",
    "TitleLookupError",
]
