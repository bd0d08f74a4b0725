"""
Sync Events - Notifications Published by the Coordinator

Events describe things that already happened to a form: the model value
changed, an external update was merged, a conflict was detected or
resolved, validation settled, the form was submitted or reset.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class SyncEventType(Enum):
    """Types of synchronization events"""
    MODEL_CHANGED = "model.changed"
    EXTERNAL_MERGED = "external.merged"
    CONFLICT_DETECTED = "conflict.detected"
    CONFLICT_RESOLVED = "conflict.resolved"
    VALIDATION_CHANGED = "validation.changed"
    FORM_SUBMITTED = "form.submitted"
    FORM_SUBMIT_FAILED = "form.submit_failed"
    FORM_RESET = "form.reset"


@dataclass
class SyncEvent:
    """Immutable record of something that happened to a form"""
    event_type: SyncEventType
    form: str = ""
    field_path: Optional[str] = None
    payload: Dict[str, Any] = field(default_factory=dict)
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def name(self) -> str:
        return self.event_type.value

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization"""
        return {
            "event_id": self.event_id,
            "event_type": self.event_type.value,
            "timestamp": self.timestamp.isoformat(),
            "form": self.form,
            "field_path": self.field_path,
            "payload": self.payload,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SyncEvent":
        timestamp = data.get("timestamp")
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)
        elif timestamp is None:
            timestamp = datetime.now()

        return cls(
            event_type=SyncEventType(data["event_type"]),
            form=data.get("form", ""),
            field_path=data.get("field_path"),
            payload=data.get("payload", {}),
            event_id=data.get("event_id", str(uuid.uuid4())),
            timestamp=timestamp,
        )

    def __str__(self) -> str:
        target = f"{self.form}.{self.field_path}" if self.field_path else self.form
        return f"SyncEvent({self.event_type.value}: {target})"


__all__ = ["SyncEvent", "SyncEventType"]
