"""
Equality helpers for model values.

``deep_equal`` compares nested dicts, lists and tuples structurally and
falls back to ``==`` for leaves. Pairs already being compared further up
the stack are treated as equal, so self-referential values terminate.
"""

from collections.abc import Mapping, Sequence, Set
from typing import Any, Optional, Set as SetType, Tuple


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def deep_equal(a: Any, b: Any, _visited: Optional[SetType[Tuple[int, int]]] = None) -> bool:
    """Structural equality for primitives, sequences and mappings."""
    if a is b:
        return True
    if a is None or b is None:
        return False
    if isinstance(a, bool) != isinstance(b, bool):
        return False

    a_mapping, b_mapping = isinstance(a, Mapping), isinstance(b, Mapping)
    a_sequence, b_sequence = _is_sequence(a), _is_sequence(b)

    if not (a_mapping or a_sequence) and not (b_mapping or b_sequence):
        try:
            return bool(a == b)
        except Exception:
            return False

    if a_mapping != b_mapping or a_sequence != b_sequence:
        return False

    visited = set() if _visited is None else _visited
    pair = (id(a), id(b))
    if pair in visited:
        return True
    visited.add(pair)

    try:
        if a_sequence:
            if len(a) != len(b):
                return False
            return all(deep_equal(x, y, visited) for x, y in zip(a, b))

        if len(a) != len(b):
            return False
        for key in a:
            if key not in b:
                return False
            if not deep_equal(a[key], b[key], visited):
                return False
        return True
    finally:
        visited.discard(pair)


def shallow_equal(a: Any, b: Any) -> bool:
    """Same keys; containers compared by identity, scalars by ``==``."""
    if a is b:
        return True
    if a is None or b is None:
        return False
    if not isinstance(a, Mapping) or not isinstance(b, Mapping):
        return a == b

    if len(a) != len(b):
        return False
    return all(key in b and _same_member(a[key], b[key]) for key in a)


def _same_member(x: Any, y: Any) -> bool:
    if x is y:
        return True
    if isinstance(x, (Mapping, Set)) or _is_sequence(x):
        return False
    return type(x) is type(y) and x == y


__all__ = ["deep_equal", "shallow_equal"]
