"""
Value Materialization

Produces one consistent, independent snapshot of a field tree's value.
The enabled-only view is overlaid with the raw view so disabled fields
still contribute their last-known value, and both views are structurally
copied first so the snapshot never shares mutable state with the tree.
"""

import logging
from collections.abc import Mapping, MutableMapping
from typing import Any, Dict, Optional

from ..core.cloning import clone_deep
from .tree import AbstractField

logger = logging.getLogger(__name__)


def merge_raw_values(target: Any, source: Any) -> Any:
    """
    Fill ``target`` with entries of ``source`` it does not have, recursively.

    Entries already present in ``target`` are kept; nested mappings are
    merged key by key. A list in ``target`` that lost items (disabled
    entries) is replaced by the complete list from ``source``.
    """
    if not isinstance(target, MutableMapping) or not isinstance(source, Mapping):
        return target

    for key, source_item in source.items():
        if key not in target:
            target[key] = source_item
            continue

        target_item = target[key]
        if isinstance(source_item, Mapping) and isinstance(target_item, MutableMapping):
            merge_raw_values(target_item, source_item)
        elif isinstance(source_item, list) and isinstance(target_item, list):
            if len(target_item) < len(source_item):
                target[key] = source_item
            else:
                for target_element, source_element in zip(target_item, source_item):
                    merge_raw_values(target_element, source_element)
    return target


def materialize_value(field_tree: Optional[AbstractField]) -> Dict[Any, Any]:
    """
    Materialize the current value of ``field_tree``.

    Args:
        field_tree: Root node (usually a ``FieldGroup``); None is treated as empty

    Returns:
        A new dict independent of the tree, including disabled fields

    Raises:
        CloneError: if a field holds a value that cannot be copied
    """
    if field_tree is None:
        return {}

    value = clone_deep(field_tree.value)
    raw_value = clone_deep(field_tree.raw_value)

    if not isinstance(value, MutableMapping):
        logger.debug("Field tree root is not a mapping, materializing raw value")
        return raw_value if isinstance(raw_value, dict) else {}

    return merge_raw_values(value, raw_value)


__all__ = ["materialize_value", "merge_raw_values"]
