"""
Field Tree - Independently Editable Fields

A field tree mirrors the shape of a model value: ``FieldGroup`` nodes for
dicts, ``FieldArray`` nodes for lists and ``Field`` leaves for everything
else. Each node can be disabled; a node is effectively disabled when it or
any ancestor is.

Two value views exist, following the usual form-control semantics:

- ``value``     -- enabled children only (disabled fields are skipped)
- ``raw_value`` -- every child, disabled or not

Neither view copies leaf values; ``materialize_value`` produces the
independent snapshot.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from ..core.paths import FieldPath, PathSegment, is_index, stringify_field_path, to_segments


@dataclass(frozen=True)
class FieldRegistration:
    """Lightweight record of a registered leaf field"""
    path: str
    disabled: bool


class AbstractField:
    """Base class for all field tree nodes"""

    def __init__(self, disabled: bool = False):
        self.parent: Optional["AbstractField"] = None
        self._disabled = disabled

    @property
    def disabled(self) -> bool:
        if self._disabled:
            return True
        return self.parent is not None and self.parent.disabled

    @property
    def enabled(self) -> bool:
        return not self.disabled

    @property
    def explicitly_disabled(self) -> bool:
        return self._disabled

    def disable(self) -> None:
        self._disabled = True

    def enable(self) -> None:
        self._disabled = False

    @property
    def value(self) -> Any:
        raise NotImplementedError

    @property
    def raw_value(self) -> Any:
        raise NotImplementedError

    def patch_value(self, value: Any) -> None:
        raise NotImplementedError

    def child(self, segment: PathSegment) -> Optional["AbstractField"]:
        return None

    def iter_nodes(self, prefix: Optional[FieldPath] = None) -> Iterator[Tuple[FieldPath, "AbstractField"]]:
        yield (prefix or []), self


class Field(AbstractField):
    """Leaf field holding a single value"""

    def __init__(self, value: Any = None, disabled: bool = False):
        super().__init__(disabled)
        self._value = value

    @property
    def value(self) -> Any:
        return self._value

    @property
    def raw_value(self) -> Any:
        return self._value

    def set_value(self, value: Any) -> None:
        self._value = value

    def patch_value(self, value: Any) -> None:
        self._value = value

    def __repr__(self):
        state = " disabled" if self._disabled else ""
        return f"Field({self._value!r}{state})"


class _ContainerField(AbstractField):

    def set_child(self, segment: PathSegment, node: AbstractField) -> Optional[AbstractField]:
        raise NotImplementedError

    def remove_child(self, segment: PathSegment) -> Optional[AbstractField]:
        raise NotImplementedError

    def items(self) -> List[Tuple[PathSegment, AbstractField]]:
        raise NotImplementedError

    def iter_nodes(self, prefix: Optional[FieldPath] = None) -> Iterator[Tuple[FieldPath, AbstractField]]:
        prefix = prefix or []
        yield prefix, self
        for segment, node in self.items():
            yield from node.iter_nodes(prefix + [segment])

    def _patch_child(self, segment: PathSegment, value: Any) -> None:
        existing = self.child(segment)
        if existing is None:
            self.set_child(segment, build_field(value))
        elif isinstance(existing, Field):
            existing.set_value(value)
        elif isinstance(existing, FieldGroup) and type(value) is dict:
            existing.set_value(value)
        elif isinstance(existing, FieldArray) and type(value) is list:
            existing.patch_value(value)
        else:
            self.set_child(segment, build_field(value, disabled=existing.explicitly_disabled))


class FieldGroup(_ContainerField):
    """Mapping of named child fields"""

    def __init__(self, controls: Optional[Mapping[str, AbstractField]] = None, disabled: bool = False):
        super().__init__(disabled)
        self.controls: Dict[PathSegment, AbstractField] = {}
        for name, control in (controls or {}).items():
            self.add_control(name, control)

    @classmethod
    def from_value(cls, value: Optional[Mapping[str, Any]]) -> "FieldGroup":
        """Build a tree whose shape follows ``value``."""
        group = cls()
        if value:
            group.patch_value(value)
        return group

    @property
    def value(self) -> Dict[PathSegment, Any]:
        if self.disabled:
            return self.raw_value
        return {name: control.value for name, control in self.controls.items() if control.enabled}

    @property
    def raw_value(self) -> Dict[PathSegment, Any]:
        return {name: control.raw_value for name, control in self.controls.items()}

    def add_control(self, name: PathSegment, control: AbstractField) -> AbstractField:
        control.parent = self
        self.controls[name] = control
        return control

    def _key(self, segment: PathSegment) -> PathSegment:
        if segment not in self.controls and is_index(segment) and str(segment) in self.controls:
            return str(segment)
        return segment

    def child(self, segment: PathSegment) -> Optional[AbstractField]:
        return self.controls.get(self._key(segment))

    def set_child(self, segment: PathSegment, node: AbstractField) -> Optional[AbstractField]:
        return self.add_control(self._key(segment), node)

    def remove_child(self, segment: PathSegment) -> Optional[AbstractField]:
        node = self.controls.pop(self._key(segment), None)
        if node is not None:
            node.parent = None
        return node

    def items(self) -> List[Tuple[PathSegment, AbstractField]]:
        return list(self.controls.items())

    def patch_value(self, value: Any) -> None:
        if not isinstance(value, Mapping):
            return
        for name, item in value.items():
            self._patch_child(name, item)

    def set_value(self, value: Any) -> None:
        """Replace the group wholesale; children missing from ``value`` are removed."""
        if not isinstance(value, Mapping):
            return
        for name in [name for name in self.controls if name not in value]:
            self.remove_child(name)
        self.patch_value(value)

    # Path based access

    def get(self, path: Union[str, Sequence]) -> Optional[AbstractField]:
        """Return the node at ``path`` (the group itself for an empty path)."""
        node: Optional[AbstractField] = self
        for segment in to_segments(path):
            if node is None:
                return None
            node = node.child(segment)
        return node

    def register(self, path: Union[str, Sequence], node: AbstractField) -> Optional[AbstractField]:
        """
        Attach ``node`` at ``path``, creating intermediate groups or arrays.

        Returns:
            The attached node, or None when the path is empty or unreachable
        """
        segments = to_segments(path)
        if not segments:
            return None

        current: AbstractField = self
        for segment, next_segment in zip(segments, segments[1:]):
            child = current.child(segment)
            if not isinstance(child, _ContainerField):
                child = FieldArray() if is_index(next_segment) else FieldGroup()
                if not isinstance(current, _ContainerField) or current.set_child(segment, child) is None:
                    return None
            current = child

        if not isinstance(current, _ContainerField):
            return None
        return current.set_child(segments[-1], node)

    def unregister(self, path: Union[str, Sequence]) -> Optional[AbstractField]:
        segments = to_segments(path)
        if not segments:
            return None
        parent = self.get(segments[:-1])
        if not isinstance(parent, _ContainerField):
            return None
        return parent.remove_child(segments[-1])

    def iter_leaves(self) -> Iterator[Tuple[FieldPath, Field]]:
        for path, node in self.iter_nodes():
            if isinstance(node, Field):
                yield path, node

    def registrations(self) -> List[FieldRegistration]:
        return [
            FieldRegistration(stringify_field_path(path), leaf.disabled)
            for path, leaf in self.iter_leaves()
        ]

    def field_paths(self, include_disabled: bool = True) -> List[str]:
        return [
            stringify_field_path(path)
            for path, leaf in self.iter_leaves()
            if include_disabled or leaf.enabled
        ]

    def disabled_paths(self) -> List[str]:
        """Paths of nodes disabled on their own account (not via an ancestor)."""
        return [
            stringify_field_path(path)
            for path, node in self.iter_nodes()
            if node.explicitly_disabled and path
        ]

    def __repr__(self):
        return f"FieldGroup({self.controls!r})"


class FieldArray(_ContainerField):
    """Ordered sequence of child fields"""

    def __init__(self, controls: Optional[Sequence[AbstractField]] = None, disabled: bool = False):
        super().__init__(disabled)
        self.controls: List[AbstractField] = []
        for control in controls or []:
            self.append(control)

    @property
    def value(self) -> List[Any]:
        if self.disabled:
            return self.raw_value
        return [control.value for control in self.controls if control.enabled]

    @property
    def raw_value(self) -> List[Any]:
        return [control.raw_value for control in self.controls]

    def append(self, control: AbstractField) -> AbstractField:
        control.parent = self
        self.controls.append(control)
        return control

    def child(self, segment: PathSegment) -> Optional[AbstractField]:
        if is_index(segment) and segment < len(self.controls):
            return self.controls[segment]
        return None

    def set_child(self, segment: PathSegment, node: AbstractField) -> Optional[AbstractField]:
        if not is_index(segment):
            return None
        while len(self.controls) <= segment:
            self.append(Field())
        node.parent = self
        self.controls[segment] = node
        return node

    def remove_child(self, segment: PathSegment) -> Optional[AbstractField]:
        if not is_index(segment) or segment >= len(self.controls):
            return None
        node = self.controls.pop(segment)
        node.parent = None
        return node

    def items(self) -> List[Tuple[PathSegment, AbstractField]]:
        return list(enumerate(self.controls))

    def patch_value(self, value: Any) -> None:
        if not isinstance(value, list):
            return
        for index, item in enumerate(value):
            self._patch_child(index, item)
        for control in self.controls[len(value):]:
            control.parent = None
        del self.controls[len(value):]

    def __repr__(self):
        return f"FieldArray({self.controls!r})"


def build_field(value: Any, disabled: bool = False) -> AbstractField:
    """Create a node for ``value``: dicts become groups, lists arrays, anything else a leaf."""
    if type(value) is dict:
        group = FieldGroup(disabled=disabled)
        group.patch_value(value)
        return group
    if type(value) is list:
        array = FieldArray(disabled=disabled)
        array.patch_value(value)
        return array
    return Field(value, disabled=disabled)


__all__ = [
    "AbstractField", "Field", "FieldGroup", "FieldArray",
    "FieldRegistration", "build_field",
]
