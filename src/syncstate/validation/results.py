"""
Validation Results

``SuiteResult`` normalizes whatever the caller-supplied validation routine
returns. ``ValidationResult`` is the consolidated view across all fields
that the scheduler maintains field by field.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SuiteResult(BaseModel):
    """Errors and warnings returned by one run of a validation routine"""

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    errors: Dict[str, List[str]] = Field(default_factory=dict)
    warnings: Dict[str, List[str]] = Field(default_factory=dict)

    @field_validator("errors", "warnings", mode="before")
    @classmethod
    def _drop_empty(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, dict):
            return {
                str(path): [messages] if isinstance(messages, str) else list(messages)
                for path, messages in value.items()
                if messages
            }
        return value

    @classmethod
    def coerce(cls, outcome: Any) -> "SuiteResult":
        """Accept a mapping, an object with ``errors``/``warnings`` attributes, or None."""
        if isinstance(outcome, cls):
            return outcome
        if outcome is None:
            return cls()
        return cls.model_validate(outcome)

    def has_errors(self, field_path: Optional[str] = None) -> bool:
        if field_path is None:
            return any(self.errors.values())
        return bool(self.errors.get(field_path))


@dataclass
class ValidationResult:
    """Consolidated validation state for a form"""
    errors: Dict[str, List[str]] = field(default_factory=dict)
    warnings: Dict[str, List[str]] = field(default_factory=dict)
    pending_fields: Set[str] = field(default_factory=set)

    @property
    def is_valid(self) -> bool:
        return not any(self.errors.values())

    @property
    def is_pending(self) -> bool:
        return bool(self.pending_fields)

    def has_errors(self, field_path: Optional[str] = None) -> bool:
        if field_path is None:
            return not self.is_valid
        return bool(self.errors.get(field_path))

    def errors_for(self, field_path: str) -> List[str]:
        return list(self.errors.get(field_path, []))

    def warnings_for(self, field_path: str) -> List[str]:
        return list(self.warnings.get(field_path, []))

    def set_entries(self, field_path: str, errors: List[str], warnings: List[str]) -> None:
        """Replace the entries of one field; empty lists remove the entry"""
        if errors:
            self.errors[field_path] = list(errors)
        else:
            self.errors.pop(field_path, None)
        if warnings:
            self.warnings[field_path] = list(warnings)
        else:
            self.warnings.pop(field_path, None)

    def clear_field(self, field_path: str) -> None:
        self.errors.pop(field_path, None)
        self.warnings.pop(field_path, None)
        self.pending_fields.discard(field_path)

    def clear(self) -> None:
        self.errors.clear()
        self.warnings.clear()
        self.pending_fields.clear()

    def snapshot(self) -> "ValidationResult":
        """Independent copy for publication"""
        return ValidationResult(
            errors={path: list(messages) for path, messages in self.errors.items()},
            warnings={path: list(messages) for path, messages in self.warnings.items()},
            pending_fields=set(self.pending_fields),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "errors": {path: list(messages) for path, messages in self.errors.items()},
            "warnings": {path: list(messages) for path, messages in self.warnings.items()},
            "pending_fields": sorted(self.pending_fields),
            "is_valid": self.is_valid,
            "is_pending": self.is_pending,
        }
