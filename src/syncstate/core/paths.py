"""
Field Paths - Dot/Bracket Notation Addressing

Converts between human-readable field paths (``addresses[0].street``) and
structured paths (``['addresses', 0, 'street']``), and reads or writes
values at a path inside nested dicts and lists.

None of these helpers raise: malformed paths degrade to a best-effort
traversal that returns the default or silently skips the write.
"""

import re
from collections.abc import Mapping, MutableMapping, MutableSequence, Sequence
from typing import Any, List, Union

PathSegment = Union[str, int]
FieldPath = List[PathSegment]

_BRACKET_INDEX = re.compile(r"\[(\d+)\]")
_NUMERIC = re.compile(r"^\d+$")


class _Missing:
    """Sentinel for 'no value at this path'"""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "MISSING"


MISSING = _Missing()


def is_index(segment: Any) -> bool:
    """True for non-negative integer segments (bools excluded)."""
    return isinstance(segment, int) and not isinstance(segment, bool) and segment >= 0


def parse_field_path(path: str) -> FieldPath:
    """
    Parse a dot/bracket path into its segments.

    Args:
        path: Path such as ``'users[0].addresses[1].street'``

    Returns:
        ``['users', 0, 'addresses', 1, 'street']``; ``[]`` for an empty path
    """
    if not path or not isinstance(path, str):
        return []

    normalized = _BRACKET_INDEX.sub(r".\1", path)
    return [
        int(part) if _NUMERIC.match(part) else part
        for part in normalized.split(".")
        if part != ""
    ]


def stringify_field_path(path: Sequence) -> str:
    """
    Render path segments back to dot/bracket notation.

    Index segments render as ``[n]`` with no preceding dot; name segments
    after the first are preceded by ``.``.
    """
    if isinstance(path, str):
        return path
    if not path:
        return ""

    result = ""
    for position, segment in enumerate(path):
        if is_index(segment):
            result += f"[{segment}]"
        else:
            if position > 0:
                result += "."
            result += str(segment)
    return result


def to_segments(path: Union[str, Sequence]) -> FieldPath:
    """Accept either notation and return a fresh segment list."""
    if isinstance(path, str):
        return parse_field_path(path)
    if path is None:
        return []
    return list(path)


def _child(container: Any, segment: PathSegment) -> Any:
    if isinstance(container, Mapping):
        if segment in container:
            return container[segment]
        if is_index(segment) and str(segment) in container:
            return container[str(segment)]
        return MISSING
    if isinstance(container, Sequence) and not isinstance(container, (str, bytes, bytearray)):
        if is_index(segment) and segment < len(container):
            return container[segment]
        return MISSING
    return MISSING


def _assign(container: Any, segment: PathSegment, value: Any) -> bool:
    if isinstance(container, MutableMapping):
        if is_index(segment) and segment not in container and str(segment) in container:
            segment = str(segment)
        container[segment] = value
        return True
    if isinstance(container, MutableSequence) and not isinstance(container, bytearray):
        if not is_index(segment):
            return False
        if segment >= len(container):
            container.extend([None] * (segment + 1 - len(container)))
        container[segment] = value
        return True
    return False


def get_value_at_path(root: Any, path: Union[str, Sequence], default: Any = None) -> Any:
    """
    Read the value stored at ``path`` inside ``root``.

    An empty path returns ``root`` itself. Traversal stops with ``default``
    as soon as an intermediate value is ``None`` or not a container.
    """
    current = root
    for segment in to_segments(path):
        if current is None:
            return default
        current = _child(current, segment)
        if current is MISSING:
            return default
    return current


def has_value_at_path(root: Any, path: Union[str, Sequence]) -> bool:
    return get_value_at_path(root, path, MISSING) is not MISSING


def set_value_at_path(root: Any, path: Union[str, Sequence], value: Any) -> None:
    """
    Write ``value`` at ``path`` inside ``root``, creating containers on the way.

    A missing or non-container intermediate becomes a list when the next
    segment is an index, otherwise a dict. An empty path is a no-op: the
    root cannot be replaced in place.
    """
    segments = to_segments(path)
    if not segments:
        return

    current = root
    for segment, next_segment in zip(segments, segments[1:]):
        child = _child(current, segment)
        if not isinstance(child, (MutableMapping, MutableSequence)) or isinstance(child, bytearray):
            child = [] if is_index(next_segment) else {}
            if not _assign(current, segment, child):
                return
        current = child

    _assign(current, segments[-1], value)


__all__ = [
    "MISSING", "FieldPath", "PathSegment",
    "parse_field_path", "stringify_field_path", "to_segments", "is_index",
    "get_value_at_path", "has_value_at_path", "set_value_at_path",
]
