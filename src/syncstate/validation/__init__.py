"""
SyncState Validation

Debounced, cancelable per-field validation with a consolidated result.
"""

from .results import SuiteResult, ValidationResult
from .scheduler import RunState, ValidationRun, ValidationScheduler
from .config import ValidationConfig, ValidationConfigBuilder, create_validation_config, dependents_of

__all__ = [
    "SuiteResult",
    "ValidationResult",
    "RunState",
    "ValidationRun",
    "ValidationScheduler",
    "ValidationConfig",
    "ValidationConfigBuilder",
    "create_validation_config",
    "dependents_of",
]
