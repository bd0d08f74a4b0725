"""
SyncState Application Layer

The coordinator that owns a form's state, plus configuration, events and
the event bus it publishes through.
"""

from .bus import EventBus, EventHandler, InProcessBus
from .configuration import (
    Environment,
    LoggingConfig,
    ReconciliationSettings,
    SyncConfig,
    ValidationSettings,
    configure_logging,
)
from .coordinator import SynchronizationCoordinator
from .events import SyncEvent, SyncEventType

__all__ = [
    "EventBus",
    "EventHandler",
    "InProcessBus",
    "Environment",
    "LoggingConfig",
    "ReconciliationSettings",
    "SyncConfig",
    "ValidationSettings",
    "configure_logging",
    "SynchronizationCoordinator",
    "SyncEvent",
    "SyncEventType",
]
