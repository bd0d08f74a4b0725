"""
SyncState Fields

Field tree nodes, value materialization and shape checking.
"""

from .tree import AbstractField, Field, FieldGroup, FieldArray, FieldRegistration, build_field
from .materializer import materialize_value, merge_raw_values
from .shape import ShapeMismatch, validate_shape

__all__ = [
    "AbstractField",
    "Field",
    "FieldGroup",
    "FieldArray",
    "FieldRegistration",
    "build_field",
    "materialize_value",
    "merge_raw_values",
    "ShapeMismatch",
    "validate_shape",
]
