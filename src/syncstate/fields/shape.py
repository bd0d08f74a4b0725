"""
Shape Validation

Compares a model value against an example "shape" to catch field names
that do not exist in the model (usually typos in field paths) and values
that are objects where the shape expects a primitive.

Missing keys are not reported: forms build their value incrementally and
conditionally registered fields are legitimately absent.
"""

import datetime
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, List

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShapeMismatch:
    """A single difference between a value and its shape"""
    path: str
    kind: str  # "extra-property" | "type-mismatch"
    message: str


def validate_shape(value: Mapping, shape: Mapping) -> List[ShapeMismatch]:
    """
    Validate ``value`` against ``shape`` and log every mismatch as a warning.

    Returns:
        The mismatches found (empty when the value fits the shape)
    """
    mismatches: List[ShapeMismatch] = []
    _walk(value, shape, "", mismatches)
    for mismatch in mismatches:
        logger.warning("Shape mismatch at %r: %s", mismatch.path, mismatch.message)
    return mismatches


def _walk(value: Any, shape: Any, path: str, mismatches: List[ShapeMismatch]) -> None:
    if isinstance(value, Mapping):
        items = value.items()
    elif isinstance(value, list):
        items = enumerate(value)
    else:
        return

    for key, item in items:
        field_path = f"{path}.{key}" if path else str(key)
        if item is None:
            continue

        is_index = isinstance(key, int) or (isinstance(key, str) and key.isdigit())
        # arrays declare a single example item
        shape_key: Any = key
        if is_index:
            shape_key = 0 if isinstance(shape, list) else "0"
        shape_item = _lookup(shape, shape_key)

        if isinstance(shape_item, datetime.date) and item == "":
            continue

        if not is_index and shape_item is None and not _contains(shape, key):
            mismatches.append(ShapeMismatch(
                field_path, "extra-property",
                f"property {key!r} is not part of the expected shape",
            ))
            continue

        if isinstance(item, (Mapping, list)):
            if not is_index and not isinstance(shape_item, (Mapping, list)):
                mismatches.append(ShapeMismatch(
                    field_path, "type-mismatch",
                    "expected a primitive value but found an object",
                ))
                continue
            _walk(item, shape_item if shape_item is not None else {}, field_path, mismatches)


def _lookup(shape: Any, key: Any) -> Any:
    if isinstance(shape, Mapping):
        return shape.get(key)
    if isinstance(shape, list) and isinstance(key, int) and key < len(shape):
        return shape[key]
    return None


def _contains(shape: Any, key: Any) -> bool:
    return isinstance(shape, Mapping) and key in shape


__all__ = ["validate_shape", "ShapeMismatch"]
