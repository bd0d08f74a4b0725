"""
Validation Dependencies

A validation config maps a trigger field path to the field paths that must
be revalidated whenever the trigger changes, for example
``{"password": ["confirm_password"]}``.
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Union

logger = logging.getLogger(__name__)

ValidationConfig = Dict[str, List[str]]


class ValidationConfigBuilder:
    """
    Fluent builder for validation configs.

    Example:
        config = (ValidationConfigBuilder()
                  .bidirectional("password", "confirm_password")
                  .when_changed("country", ["zip_code", "state"])
                  .build())
    """

    def __init__(self):
        self._config: ValidationConfig = {}

    def when_changed(self, trigger: str, revalidate: Union[str, Iterable[str]]) -> "ValidationConfigBuilder":
        """Revalidate ``revalidate`` whenever ``trigger`` changes"""
        dependents = [revalidate] if isinstance(revalidate, str) else list(revalidate)
        existing = self._config.get(trigger, [])

        duplicates = [path for path in dependents if path in existing]
        if duplicates:
            logger.warning("Duplicate dependents for %r will be ignored: %s", trigger, ", ".join(duplicates))

        self._config[trigger] = _unique(existing + dependents)
        return self

    def bidirectional(self, first: str, second: str) -> "ValidationConfigBuilder":
        """Revalidate each field when the other changes"""
        if second in self._config.get(first, []) and first in self._config.get(second, []):
            logger.warning("Bidirectional dependency %r <-> %r is already configured", first, second)
        self.when_changed(first, second)
        self.when_changed(second, first)
        return self

    def group(self, fields: Iterable[str]) -> "ValidationConfigBuilder":
        """Every field in the group revalidates all the others"""
        fields = list(fields)
        for trigger in fields:
            self.when_changed(trigger, [path for path in fields if path != trigger])
        return self

    def merge(self, other: Mapping[str, Iterable[str]]) -> "ValidationConfigBuilder":
        for trigger, dependents in other.items():
            if dependents:
                self._config[trigger] = _unique(self._config.get(trigger, []) + list(dependents))
        return self

    def build(self) -> ValidationConfig:
        """Return a copy so later builder calls do not leak into it"""
        return {trigger: list(dependents) for trigger, dependents in self._config.items() if dependents}


def create_validation_config(initial: Optional[Mapping[str, Iterable[str]]] = None) -> ValidationConfigBuilder:
    builder = ValidationConfigBuilder()
    if initial:
        builder.merge(initial)
    return builder


def dependents_of(config: Optional[Mapping[str, Iterable[str]]], field_path: str) -> List[str]:
    """Dependent paths registered for ``field_path``, excluding the field itself"""
    if not config:
        return []
    return [path for path in config.get(field_path, []) if path != field_path]


def _unique(paths: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(paths))


__all__ = ["ValidationConfig", "ValidationConfigBuilder", "create_validation_config", "dependents_of"]
