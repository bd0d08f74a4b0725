"""
Reconciliation Engine - Smart State Merging

Merges an externally sourced value (a server refresh, another tab, a
websocket push) into a value the user may be editing, without throwing
away unsaved local edits.

Merge strategies:
- ``replace``  -- top-level spread, local keys win over incoming keys
- ``preserve`` -- keep the local value while it is dirty, adopt external otherwise
- ``smart``    -- like ``replace``, but paths listed in ``preserve_fields``
                  (dot notation, nested) always keep the local value

A detected conflict is never an error. With conflict resolution enabled it
is handed to ``on_conflict``, which may return the value to use or
``PROMPT_USER`` to hold a ``ConflictRecord`` until ``resolve_conflict``.
"""

import logging
from collections.abc import Mapping, MutableMapping
from typing import Any, Dict, Iterable, List, Optional, Union

from ..core.cloning import clone_deep
from ..core.equality import deep_equal
from ..core.paths import MISSING, get_value_at_path
from ..core.signals import Signal
from .options import PROMPT_USER, ConflictRecord, ResolutionStrategy, SmartStateOptions

logger = logging.getLogger(__name__)

OptionsLike = Union[SmartStateOptions, Mapping, None]


def _spread(base: Any, overlay: Any) -> Dict[Any, Any]:
    merged: Dict[Any, Any] = dict(base) if isinstance(base, Mapping) else {}
    if isinstance(overlay, Mapping):
        merged.update(overlay)
    return merged


class ReconciliationEngine:
    """
    Stateful merge engine; holds at most one pending conflict.

    The pending conflict is published through the ``conflict`` signal so
    display layers can prompt for a resolution.
    """

    def __init__(self, conflict: Optional[Signal] = None):
        self.conflict: Signal[Optional[ConflictRecord]] = conflict or Signal(None, name="conflict")

    @property
    def has_conflict(self) -> bool:
        return self.conflict.value is not None

    @property
    def pending_conflict(self) -> Optional[ConflictRecord]:
        return self.conflict.value

    def clear_conflict(self) -> None:
        if self.conflict.value is not None:
            self.conflict.set(None)

    def merge(
        self,
        form_value: Any,
        new_external: Any,
        current_value: Any,
        old_external: Any,
        options: OptionsLike = None,
        is_dirty: bool = False,
        is_valid: bool = True,
        edited_fields: Optional[Iterable[str]] = None,
    ) -> Any:
        """
        Merge ``new_external`` into ``form_value``.

        Args:
            form_value: Current local value, possibly with unsaved edits
            new_external: Incoming external value
            current_value: Local value before this merge
            old_external: Last external value seen, the common baseline
            options: ``SmartStateOptions`` or an equivalent mapping
            is_dirty: Whether the user edited the form since the last baseline
            is_valid: Whether the local value currently validates
            edited_fields: Paths the user edited, narrowing conflict detection

        Returns:
            The value the form should hold after the merge
        """
        if new_external is None:
            return form_value
        if current_value is None:
            return new_external

        if deep_equal(new_external, old_external):
            logger.debug("External value unchanged, keeping local value")
            return form_value

        options = self._coerce_options(options)

        if options.conflict_resolution:
            paths = self.detect_conflicts(current_value, new_external, old_external, edited_fields)
            if paths:
                return self._handle_conflict(current_value, new_external, paths, options)

        strategy = options.merge_strategy
        if strategy == "replace":
            merged = _spread(new_external, form_value)
        elif strategy == "preserve":
            merged = form_value if is_dirty else new_external
        else:
            merged = self._smart_merge(form_value, new_external, options.preserve_fields)

        logger.debug("Merged external update using %r strategy (dirty=%s, valid=%s)", strategy, is_dirty, is_valid)
        return merged

    def reconcile(
        self,
        local: Any,
        external_new: Any,
        external_old: Any,
        edited_fields: Optional[Iterable[str]] = None,
        options: OptionsLike = None,
        is_dirty: bool = False,
        is_valid: bool = True,
    ) -> Any:
        """Merge with the local value serving as both form and current value"""
        return self.merge(
            local, external_new, local, external_old,
            options=options, is_dirty=is_dirty, is_valid=is_valid,
            edited_fields=edited_fields,
        )

    def resolve_conflict(self, strategy: ResolutionStrategy, output: Any = None) -> Any:
        """
        Resolve the pending conflict.

        Args:
            strategy: ``local``, ``external`` or ``merge`` (external overlaid with local)
            output: Optional signal (anything with ``set``) or callable receiving the value

        Returns:
            The resolved value, or None when no conflict is pending
        """
        record = self.conflict.value
        if record is None:
            return None

        if strategy == "local":
            resolved = record.local
        elif strategy == "external":
            resolved = record.external
        elif strategy == "merge":
            resolved = _spread(record.external, record.local)
        else:
            raise ValueError(f"Unknown conflict resolution strategy: {strategy!r}")

        if output is not None:
            if hasattr(output, "set"):
                output.set(resolved)
            elif callable(output):
                output(resolved)

        logger.info("Resolved conflict using %r", strategy)
        self.conflict.set(None)
        return resolved

    def detect_conflicts(
        self,
        local: Any,
        new_external: Any,
        old_external: Any,
        edited_fields: Optional[Iterable[str]] = None,
    ) -> List[str]:
        """
        Paths where local and external values both diverged from the baseline.

        Without ``edited_fields`` the top-level keys of all three values are
        compared. A path only collides when local and external also disagree
        with each other.
        """
        if old_external is None:
            return []

        if edited_fields:
            paths = list(dict.fromkeys(edited_fields))
        else:
            paths = []
            for value in (local, new_external, old_external):
                if isinstance(value, Mapping):
                    paths.extend(key for key in value if key not in paths)

        conflicts = []
        for path in paths:
            baseline = get_value_at_path(old_external, path, MISSING)
            mine = get_value_at_path(local, path, MISSING)
            theirs = get_value_at_path(new_external, path, MISSING)
            if (not deep_equal(mine, baseline)
                    and not deep_equal(theirs, baseline)
                    and not deep_equal(mine, theirs)):
                conflicts.append(str(path))
        return conflicts

    def has_user_edited_field(self, current: Any, original: Any, field_path: str) -> bool:
        """True when the value at ``field_path`` differs from ``original`` (always True without one)"""
        if original is None:
            return True
        return not deep_equal(
            self.get_nested_value(current, field_path, MISSING),
            self.get_nested_value(original, field_path, MISSING),
        )

    def get_nested_value(self, target: Any, path: str, default: Any = None) -> Any:
        """Dot-notation lookup; bracket indices are not supported"""
        if not isinstance(target, Mapping):
            return default
        if not path or not path.strip():
            return target

        current = target
        for part in path.split("."):
            if not isinstance(current, Mapping) or part not in current:
                return default
            current = current[part]
        return current

    def set_nested_value(self, target: Any, path: str, value: Any) -> None:
        """Dot-notation write; non-mapping intermediates are replaced with dicts"""
        if not isinstance(target, MutableMapping) or not path:
            return

        *parts, last = path.split(".")
        if not last:
            return

        current = target
        for part in parts:
            if not isinstance(current.get(part), MutableMapping):
                current[part] = {}
            current = current[part]
        current[last] = value

    def deep_equal(self, a: Any, b: Any) -> bool:
        return deep_equal(a, b)

    def _smart_merge(self, form_value: Any, new_external: Any, preserve_fields: List[str]) -> Any:
        if not preserve_fields:
            return _spread(new_external, form_value)

        merged = clone_deep(dict(new_external)) if isinstance(new_external, Mapping) else {}
        for path in preserve_fields:
            local = self.get_nested_value(form_value, path, MISSING)
            if local is not MISSING:
                self.set_nested_value(merged, path, clone_deep(local))
        return merged

    def _handle_conflict(self, current_value: Any, new_external: Any,
                         paths: List[str], options: SmartStateOptions) -> Any:
        logger.info("Conflict detected at %s", ", ".join(paths))

        resolution = PROMPT_USER
        if options.on_conflict is not None:
            resolution = options.on_conflict(current_value, new_external)

        if isinstance(resolution, str) and resolution == PROMPT_USER:
            self.conflict.set(ConflictRecord(
                local=clone_deep(current_value),
                external=clone_deep(new_external),
                paths=paths,
            ))
            return current_value
        return resolution

    @staticmethod
    def _coerce_options(options: OptionsLike) -> SmartStateOptions:
        if options is None:
            return SmartStateOptions()
        if isinstance(options, SmartStateOptions):
            return options
        return SmartStateOptions.model_validate(dict(options))


__all__ = ["ReconciliationEngine"]
