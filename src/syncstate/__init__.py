"""
SyncState - Reactive Form State Synchronization

Keeps a form's model value in sync with its independently editable
fields, runs debounced cancelable validation per field, and merges
external updates into locally edited values without losing unsaved edits.
"""

from .core import (
    MISSING,
    FieldPath,
    parse_field_path,
    stringify_field_path,
    get_value_at_path,
    has_value_at_path,
    set_value_at_path,
    clone_deep,
    deep_equal,
    shallow_equal,
    Signal,
    watch,
    clear_fields,
    clear_fields_when,
    keep_fields_when,
)
from .errors import SyncStateError, CloneError, ConfigurationError, FormSubmissionError
from .fields import (
    Field,
    FieldGroup,
    FieldArray,
    FieldRegistration,
    build_field,
    materialize_value,
    ShapeMismatch,
    validate_shape,
)
from .validation import (
    SuiteResult,
    ValidationResult,
    ValidationScheduler,
    ValidationConfigBuilder,
    create_validation_config,
)
from .reconciliation import (
    PROMPT_USER,
    ConflictRecord,
    SmartStateOptions,
    ReconciliationEngine,
)
from .app import (
    InProcessBus,
    SyncEvent,
    SyncEventType,
    Environment,
    LoggingConfig,
    ReconciliationSettings,
    SyncConfig,
    ValidationSettings,
    configure_logging,
    SynchronizationCoordinator,
)

__version__ = "0.1.0"

__all__ = [
    # Paths and values
    "MISSING",
    "FieldPath",
    "parse_field_path",
    "stringify_field_path",
    "get_value_at_path",
    "has_value_at_path",
    "set_value_at_path",
    "clone_deep",
    "deep_equal",
    "shallow_equal",
    "clear_fields",
    "clear_fields_when",
    "keep_fields_when",

    # Reactivity
    "Signal",
    "watch",

    # Errors
    "SyncStateError",
    "CloneError",
    "ConfigurationError",
    "FormSubmissionError",

    # Fields
    "Field",
    "FieldGroup",
    "FieldArray",
    "FieldRegistration",
    "build_field",
    "materialize_value",
    "ShapeMismatch",
    "validate_shape",

    # Validation
    "SuiteResult",
    "ValidationResult",
    "ValidationScheduler",
    "ValidationConfigBuilder",
    "create_validation_config",

    # Reconciliation
    "PROMPT_USER",
    "ConflictRecord",
    "SmartStateOptions",
    "ReconciliationEngine",

    # Application
    "InProcessBus",
    "SyncEvent",
    "SyncEventType",
    "Environment",
    "LoggingConfig",
    "ReconciliationSettings",
    "SyncConfig",
    "ValidationSettings",
    "configure_logging",
    "SynchronizationCoordinator",
]
