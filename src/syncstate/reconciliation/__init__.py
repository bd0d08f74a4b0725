"""
SyncState Reconciliation

Merging external updates into locally edited values.
"""

from .options import (
    PROMPT_USER,
    ConflictHandler,
    ConflictRecord,
    MergeStrategy,
    ResolutionStrategy,
    SmartStateOptions,
)
from .smart_state import ReconciliationEngine

__all__ = [
    "PROMPT_USER",
    "ConflictHandler",
    "ConflictRecord",
    "MergeStrategy",
    "ResolutionStrategy",
    "SmartStateOptions",
    "ReconciliationEngine",
]
