"""
Synchronization Coordinator - The Form State Owner

The coordinator owns the authoritative model value and the field tree,
and wires the other subsystems together:

    on_field_change    -> set on a working copy -> materialize -> publish
                          -> request validation (field, dependents, root)
    on_external_update -> reconcile -> publish (or hold a conflict)
    submit             -> validate every enabled field -> drain -> verdict
    reset              -> replace the value, clear validation and conflicts

Field changes are applied synchronously, so any validation that starts
afterwards sees them even while earlier validations are still running.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Union

from ..core.cloning import clone_deep
from ..core.equality import deep_equal
from ..core.paths import MISSING, get_value_at_path, set_value_at_path, stringify_field_path, to_segments
from ..core.signals import Signal
from ..errors import FormSubmissionError
from ..fields.materializer import materialize_value
from ..fields.shape import validate_shape
from ..fields.tree import FieldGroup, FieldRegistration, build_field
from ..reconciliation.options import ConflictHandler, ConflictRecord, ResolutionStrategy
from ..reconciliation.smart_state import ReconciliationEngine
from ..validation.config import dependents_of
from ..validation.results import ValidationResult
from ..validation.scheduler import ValidationRoutine, ValidationScheduler
from .bus import EventBus, EventHandler, InProcessBus
from .configuration import SyncConfig
from .events import SyncEvent, SyncEventType

logger = logging.getLogger(__name__)

PathLike = Union[str, Sequence]


class SynchronizationCoordinator:
    """
    Holds one form's model value and keeps it in sync with its fields,
    its validation state and external updates.

    Args:
        initial_value: Starting model value (copied, never aliased)
        validate: Routine called as ``validate(model, field_path)``; may be async
        config: Explicit configuration; defaults to ``SyncConfig()``
        validation_config: Trigger path -> dependent paths to revalidate
        on_conflict: Conflict handler used when conflict resolution is enabled
        bus: Event bus receiving ``SyncEvent``s; an ``InProcessBus`` by default
        shape: Example value; in debug mode every published value is checked against it
        name: Form name carried on published events
    """

    def __init__(
        self,
        initial_value: Optional[Mapping[str, Any]] = None,
        validate: Optional[ValidationRoutine] = None,
        config: Optional[SyncConfig] = None,
        validation_config: Optional[Mapping[str, Iterable[str]]] = None,
        on_conflict: Optional[ConflictHandler] = None,
        bus: Optional[EventBus] = None,
        shape: Optional[Mapping[str, Any]] = None,
        name: str = "form",
    ):
        self.name = name
        self.config = config or SyncConfig()
        self.shape = shape
        self.bus = bus or InProcessBus()
        self.validation_config: Dict[str, List[str]] = {
            trigger: list(dependents) for trigger, dependents in (validation_config or {}).items()
        }
        self.options = self.config.reconciliation.to_options(on_conflict)

        self._fields = FieldGroup.from_value(clone_deep(dict(initial_value or {})))
        self._edited: Set[str] = set()
        self._last_external: Any = None

        self.model: Signal[Dict[str, Any]] = Signal(materialize_value(self._fields), name="model")

        settings = self.config.validation
        self.scheduler = ValidationScheduler(
            validate,
            model_provider=lambda: clone_deep(self.model.value),
            debounce_ms=settings.debounce_ms,
            failure_message=settings.failure_message,
            root_form_key=settings.root_form_key,
        )
        self.engine = ReconciliationEngine()

        self.scheduler.result.subscribe(self._on_validation_changed)
        self.engine.conflict.subscribe(self._on_conflict_changed)

    # State

    @property
    def value(self) -> Dict[str, Any]:
        """Independent copy of the current model value"""
        return clone_deep(self.model.value)

    @property
    def fields(self) -> FieldGroup:
        return self._fields

    @property
    def validation(self) -> Signal[ValidationResult]:
        return self.scheduler.result

    @property
    def errors(self) -> Dict[str, List[str]]:
        return self.scheduler.current.errors

    @property
    def warnings(self) -> Dict[str, List[str]]:
        return self.scheduler.current.warnings

    @property
    def pending(self) -> Set[str]:
        return set(self.scheduler.current.pending_fields)

    @property
    def is_valid(self) -> bool:
        return self.scheduler.current.is_valid

    @property
    def is_pending(self) -> bool:
        return self.scheduler.current.is_pending

    @property
    def is_dirty(self) -> bool:
        return bool(self._edited)

    @property
    def edited_fields(self) -> List[str]:
        return sorted(self._edited)

    @property
    def has_conflict(self) -> bool:
        return self.engine.has_conflict

    @property
    def conflict(self) -> Optional[ConflictRecord]:
        return self.engine.pending_conflict

    @property
    def root_form_key(self) -> str:
        return self.config.validation.root_form_key

    # Local edits

    def on_field_change(self, path: PathLike, value: Any) -> Dict[str, Any]:
        """
        Apply a user edit at ``path`` and schedule its validation.

        Returns:
            The published model value
        """
        segments = to_segments(path)
        if not segments:
            logger.warning("Ignoring change with empty field path")
            return self.model.value

        field_path = stringify_field_path(segments)
        working = clone_deep(self.model.value)
        set_value_at_path(working, segments, value)
        self._fields.set_value(working)

        self._edited.add(field_path)
        self._publish_model(field_path)
        self._request_for_change(field_path)
        return self.model.value

    def _request_for_change(self, field_path: str) -> None:
        settings = self.config.validation
        self.scheduler.request_validation(field_path)

        for dependent in dependents_of(self.validation_config, field_path):
            node = self._fields.get(dependent)
            if node is not None and node.disabled:
                continue
            self.scheduler.request_validation(dependent, debounce_ms=settings.dependent_debounce_ms)

        if settings.root_validation_mode == "live" and field_path != settings.root_form_key:
            self.scheduler.request_validation(settings.root_form_key)

    # External updates

    def on_external_update(self, new_external: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        """
        Merge an externally sourced value into the local one.

        A conflict held for manual resolution leaves the local value in place.

        Returns:
            The published model value
        """
        current = self.model.value
        merged = self.engine.merge(
            current,
            new_external,
            current,
            self._last_external,
            options=self.options,
            is_dirty=self.is_dirty,
            is_valid=self.is_valid,
            edited_fields=self.edited_fields or None,
        )
        if new_external is not None:
            self._last_external = clone_deep(new_external)

        if merged is current or deep_equal(merged, current):
            return self.model.value

        changed = self._replace_value(merged)
        self._emit(SyncEventType.EXTERNAL_MERGED, payload={
            "strategy": self.options.merge_strategy,
            "changed": changed,
        })
        return self.model.value

    def resolve_conflict(self, strategy: ResolutionStrategy) -> Optional[Dict[str, Any]]:
        """
        Resolve the held conflict and publish the resolved value.

        Returns:
            The published model value, or None when no conflict is pending
        """
        resolved = self.engine.resolve_conflict(strategy)
        if resolved is None:
            return None

        changed = self._replace_value(resolved)
        self._emit(SyncEventType.CONFLICT_RESOLVED, payload={"strategy": strategy, "changed": changed})
        return self.model.value

    def _replace_value(self, value: Mapping[str, Any]) -> List[str]:
        """Swap in a new value, keep disabled flags and revalidate the leaves that changed"""
        previous = self.model.value
        self._rebuild_fields(value)
        self._publish_model()

        changed = [
            path for path in self._fields.field_paths(include_disabled=False)
            if not deep_equal(get_value_at_path(previous, path, MISSING),
                              get_value_at_path(self.model.value, path, MISSING))
        ]
        for path in changed:
            self.scheduler.request_validation(path)
        return changed

    def _rebuild_fields(self, value: Optional[Mapping[str, Any]]) -> None:
        disabled = self._fields.disabled_paths()
        self._fields = FieldGroup.from_value(clone_deep(dict(value or {})))
        for path in disabled:
            node = self._fields.get(path)
            if node is not None:
                node.disable()

    # Submission

    async def submit(self) -> Dict[str, Any]:
        """
        Validate every enabled field, wait for all validation to settle and
        return the model value.

        Raises:
            FormSubmissionError: if the aggregated result has errors
        """
        settings = self.config.validation
        paths = self._fields.field_paths(include_disabled=False)
        if settings.validate_root_on_submit:
            paths.append(settings.root_form_key)

        for path in paths:
            self.scheduler.request_validation(path, debounce_ms=0)

        result = await self.scheduler.drain()
        for path in list(result.errors):
            node = self._fields.get(path)
            if node is not None and node.disabled:
                self.scheduler.clear_field(path)
        result = self.scheduler.current

        if not result.is_valid:
            logger.info("Submit of %r rejected with errors in %s", self.name, ", ".join(sorted(result.errors)))
            self._emit(SyncEventType.FORM_SUBMIT_FAILED, payload={"errors": result.errors})
            raise FormSubmissionError(result.errors, result.warnings)

        value = self.value
        self._emit(SyncEventType.FORM_SUBMITTED, payload={"value": value})
        return value

    def reset(self, initial_value: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Replace the model value and clear validation, conflict and dirty state"""
        self.scheduler.reset()
        self.engine.clear_conflict()
        self._edited.clear()
        self._last_external = None

        self._rebuild_fields(initial_value)
        self._publish_model()
        self._emit(SyncEventType.FORM_RESET)
        return self.model.value

    # Field lifecycle

    def register_field(self, path: PathLike, value: Any = MISSING, disabled: bool = False) -> FieldRegistration:
        """
        Attach a field at ``path``; without ``value`` it takes the model's current value there.
        """
        segments = to_segments(path)
        field_path = stringify_field_path(segments)
        if value is MISSING:
            value = get_value_at_path(self.model.value, segments)

        node = self._fields.register(segments, build_field(clone_deep(value), disabled=disabled))
        if node is None:
            logger.warning("Cannot register field at %r", field_path)
        else:
            self._publish_model(field_path)
        return FieldRegistration(field_path, node.disabled if node is not None else disabled)

    def unregister_field(self, path: PathLike) -> bool:
        segments = to_segments(path)
        field_path = stringify_field_path(segments)
        if self._fields.unregister(segments) is None:
            return False

        self._edited.discard(field_path)
        self.scheduler.clear_field(field_path)
        self._publish_model(field_path)
        return True

    def set_disabled(self, path: PathLike, disabled: bool = True) -> bool:
        """
        Disable or enable the field at ``path``.

        A disabled field keeps its value in the model but is skipped by
        submit and loses its validation entries.
        """
        segments = to_segments(path)
        node = self._fields.get(segments)
        if node is None or not segments:
            logger.warning("No field registered at %r", stringify_field_path(segments))
            return False

        if disabled:
            node.disable()
            prefix = stringify_field_path(segments)
            for leaf_path, _ in node.iter_nodes(list(segments)):
                self.scheduler.clear_field(stringify_field_path(leaf_path))
            logger.debug("Disabled field %r", prefix)
        else:
            node.enable()

        self._publish_model(stringify_field_path(segments))
        return True

    async def validate_field(self, path: PathLike) -> ValidationResult:
        """Validate one field now and wait for its result"""
        return await self.scheduler.validate_now(stringify_field_path(to_segments(path)))

    def registrations(self) -> List[FieldRegistration]:
        return self._fields.registrations()

    # Publication

    def subscribe(self, handler: EventHandler) -> Callable[[], None]:
        return self.bus.subscribe(handler)

    async def drain(self) -> ValidationResult:
        """Wait for outstanding validation and async event handlers"""
        result = await self.scheduler.drain()
        await self.bus.drain()
        return result

    def _publish_model(self, field_path: Optional[str] = None) -> None:
        value = materialize_value(self._fields)
        if self.shape is not None and self.config.debug:
            validate_shape(value, self.shape)
        self.model.set(value)
        self._emit(SyncEventType.MODEL_CHANGED, field_path=field_path, payload={"value": value})

    def _emit(self, event_type: SyncEventType, field_path: Optional[str] = None,
              payload: Optional[Dict[str, Any]] = None) -> None:
        self.bus.publish(SyncEvent(event_type, form=self.name, field_path=field_path, payload=payload or {}))

    def _on_validation_changed(self, _name: str, result: ValidationResult, _old: Any) -> None:
        self._emit(SyncEventType.VALIDATION_CHANGED, payload=result.to_dict())

    def _on_conflict_changed(self, _name: str, record: Optional[ConflictRecord], _old: Any) -> None:
        if record is not None:
            self._emit(SyncEventType.CONFLICT_DETECTED, payload={
                "paths": list(record.paths),
                "local": record.local,
                "external": record.external,
            })

    def __repr__(self):
        return f"SynchronizationCoordinator({self.name!r}, fields={len(self._fields.field_paths())})"


__all__ = ["SynchronizationCoordinator"]
