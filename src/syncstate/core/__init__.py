"""
SyncState Core Module

Pure building blocks with no knowledge of fields, validation or merging:
path addressing, structural cloning, equality and reactive signals.
"""

from .paths import (
    MISSING,
    FieldPath,
    parse_field_path,
    stringify_field_path,
    get_value_at_path,
    has_value_at_path,
    set_value_at_path,
)
from .cloning import clone_deep
from .equality import deep_equal, shallow_equal
from .signals import Signal, watch
from .utils import clear_fields, clear_fields_when, keep_fields_when

__all__ = [
    "MISSING",
    "FieldPath",
    "parse_field_path",
    "stringify_field_path",
    "get_value_at_path",
    "has_value_at_path",
    "set_value_at_path",
    "clone_deep",
    "deep_equal",
    "shallow_equal",
    "Signal",
    "watch",
    "clear_fields",
    "clear_fields_when",
    "keep_fields_when",
]
