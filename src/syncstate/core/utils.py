"""Helpers for clearing or keeping top-level model fields when form structure changes."""

from typing import Any, Dict, Iterable, Mapping


def clear_fields_when(state: Mapping[str, Any], conditions: Mapping[str, bool]) -> Dict[str, Any]:
    """
    Return a copy of ``state`` with every field whose condition is true set to ``None``.

    Example:
        clear_fields_when(model, {"company": kind != "business"})
    """
    result = dict(state)
    for field_name, should_clear in conditions.items():
        if should_clear:
            result[field_name] = None
    return result


def clear_fields(state: Mapping[str, Any], field_names: Iterable[str]) -> Dict[str, Any]:
    """Return a copy of ``state`` with the named fields set to ``None``."""
    result = dict(state)
    for field_name in field_names:
        result[field_name] = None
    return result


def keep_fields_when(state: Mapping[str, Any], conditions: Mapping[str, bool]) -> Dict[str, Any]:
    """Return only the fields of ``state`` whose condition is true."""
    return {
        field_name: state[field_name]
        for field_name, should_keep in conditions.items()
        if should_keep and field_name in state
    }


__all__ = ["clear_fields_when", "clear_fields", "keep_fields_when"]
