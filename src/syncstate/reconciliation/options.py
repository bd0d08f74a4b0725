"""
Reconciliation options and conflict records.
"""

import time
from typing import Any, Callable, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

PROMPT_USER = "prompt-user"

MergeStrategy = Literal["replace", "preserve", "smart"]
ResolutionStrategy = Literal["local", "external", "merge"]

ConflictHandler = Callable[[Any, Any], Union[Any, str]]


class SmartStateOptions(BaseModel):
    """
    How external updates are merged into locally edited values.

    ``on_conflict`` is called as ``on_conflict(local, external)`` and returns
    either the value to use or ``PROMPT_USER`` to hold the conflict for an
    explicit resolution.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    merge_strategy: MergeStrategy = "smart"
    preserve_fields: List[str] = Field(default_factory=list)
    conflict_resolution: bool = False
    on_conflict: Optional[ConflictHandler] = None


class ConflictRecord(BaseModel):
    """A held pair of divergent local and external values"""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    local: Any
    external: Any
    timestamp: float = Field(default_factory=time.time)
    paths: List[str] = Field(default_factory=list)


__all__ = [
    "PROMPT_USER",
    "MergeStrategy",
    "ResolutionStrategy",
    "ConflictHandler",
    "SmartStateOptions",
    "ConflictRecord",
]
