"""
SyncState Errors

Exception types raised by the synchronization layer. Path utilities,
the validation scheduler and the reconciliation engine never raise for
expected conditions; these types cover the few places that fail loudly.
"""

from typing import Dict, List, Optional


class SyncStateError(Exception):
    """Base exception for SyncState errors"""
    pass


class CloneError(SyncStateError, TypeError):
    """Raised when a value cannot be structurally copied"""

    def __init__(self, value_type: type, reason: str = ""):
        self.value_type = value_type
        message = f"Unable to copy value of type {value_type.__name__!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ConfigurationError(SyncStateError, ValueError):
    """Raised when configuration values cannot be parsed"""
    pass


class FormSubmissionError(SyncStateError):
    """
    Raised by ``submit()`` when the aggregated validation result has errors.

    Attributes:
        errors: Field path -> error messages
        warnings: Field path -> warning messages
    """

    def __init__(self, errors: Dict[str, List[str]],
                 warnings: Optional[Dict[str, List[str]]] = None):
        self.errors = errors
        self.warnings = warnings or {}
        count = sum(len(messages) for messages in errors.values())
        fields = ", ".join(sorted(errors))
        super().__init__(f"Form has {count} validation error(s) in: {fields}")
