"""
Structural Cloning

Explicit per-type copy dispatcher used wherever a value has to become
independent of its source (materialized snapshots, working copies,
conflict records). Shared references are reproduced once through a memo,
so cycles and aliasing inside the value survive the copy.

Immutable leaves (numbers, strings, datetimes, compiled patterns, enums)
are returned as-is. Values that cannot be copied raise ``CloneError``
instead of being aliased.
"""

import array
import copy
import dataclasses
import datetime
import inspect
import re
import uuid
from collections import OrderedDict, defaultdict
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from pathlib import PurePath
from typing import Any, Dict, Optional, TypeVar

from pydantic import BaseModel

from ..errors import CloneError

T = TypeVar("T")

IMMUTABLE_TYPES = (
    type(None), bool, int, float, complex, str, bytes,
    Decimal, Fraction, uuid.UUID, PurePath, Enum,
    datetime.date, datetime.time, datetime.timedelta, datetime.timezone,
    re.Pattern, range, type,
)


def clone_deep(value: T, _memo: Optional[Dict[int, Any]] = None) -> T:
    """
    Return a structural copy of ``value``.

    Raises:
        CloneError: if the value (or anything inside it) cannot be copied
    """
    if isinstance(value, IMMUTABLE_TYPES):
        return value

    memo = {} if _memo is None else _memo
    key = id(value)
    if key in memo:
        return memo[key]

    if isinstance(value, dict):
        if isinstance(value, defaultdict):
            result = defaultdict(value.default_factory)
        elif type(value) in (dict, OrderedDict):
            result = type(value)()
        else:
            result = copy.copy(value)
            result.clear()
        memo[key] = result
        for item_key, item in value.items():
            result[item_key] = clone_deep(item, memo)
        return result

    if isinstance(value, list):
        result = []
        memo[key] = result
        result.extend(clone_deep(item, memo) for item in value)
        return result

    if isinstance(value, tuple):
        items = [clone_deep(item, memo) for item in value]
        result = type(value)._make(items) if hasattr(value, "_fields") else type(value)(items)
        memo[key] = result
        return result

    if isinstance(value, (set, frozenset)):
        result = type(value)(clone_deep(item, memo) for item in value)
        memo[key] = result
        return result

    if isinstance(value, bytearray):
        result = bytearray(value)
        memo[key] = result
        return result

    if isinstance(value, memoryview):
        result = memoryview(bytearray(value.tobytes()))
        if value.format != "B" or value.ndim != 1:
            result = result.cast(value.format, value.shape)
        memo[key] = result
        return result

    if isinstance(value, array.array):
        result = array.array(value.typecode, value)
        memo[key] = result
        return result

    if isinstance(value, BaseModel):
        result = value.model_copy(deep=True)
        memo[key] = result
        return result

    if dataclasses.is_dataclass(value):
        result = copy.copy(value)
        memo[key] = result
        for field in dataclasses.fields(value):
            if hasattr(value, field.name):
                object.__setattr__(result, field.name, clone_deep(getattr(value, field.name), memo))
        return result

    if inspect.isroutine(value) or inspect.isgenerator(value) or inspect.iscoroutine(value):
        raise CloneError(type(value), "callables and generators cannot be copied")

    try:
        result = copy.deepcopy(value, memo)
    except (TypeError, copy.Error, RecursionError) as exc:
        raise CloneError(type(value), str(exc)) from exc
    memo[key] = result
    return result


__all__ = ["clone_deep", "IMMUTABLE_TYPES"]
