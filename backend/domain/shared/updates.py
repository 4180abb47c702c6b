"""
Path-addressed partial document updates.

A document mutation is a small, immutable syntax tree: each operation
(set, unset, add-to-set) targets a field addressed by a dot-notation path
such as ``prop1.0.nestedProp``. Operations are collected into an
UpdateDefinition, which the document store applies to a matched document
in a single round trip.

Several field assignments against one document are expressed as a
"stacked" update (see ``stack_updates``) so that K field changes cost one
store call instead of K.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Iterable, Optional, Tuple, Union

from .exceptions import InvalidPathException


PATH_SEPARATOR = "."


class UpdateOperator(str, Enum):
    """Field update operators understood by the document store."""

    SET = "$set"
    UNSET = "$unset"
    ADD_TO_SET = "$addToSet"


# =============================================================================
# PATHS
# =============================================================================

@dataclass(frozen=True)
class FieldPath:
    """
    Fully-qualified location of a field inside a document.

    Segments are field names or array indexes; none of them may be empty.
    """

    segments: Tuple[str, ...]

    def __post_init__(self):
        if not self.segments:
            raise InvalidPathException("", "path has no segments")
        for segment in self.segments:
            if not segment:
                raise InvalidPathException(
                    PATH_SEPARATOR.join(self.segments),
                    "path contains an empty segment"
                )

    @classmethod
    def parse(cls, dotted: str) -> FieldPath:
        """Parse a dot-notation path."""
        return cls(tuple(dotted.split(PATH_SEPARATOR)))

    @classmethod
    def join(cls, prefix: Optional[str], property_name: str) -> FieldPath:
        """
        Join an optional dot-notation prefix with a property name.

        A ``None`` prefix addresses the document root.
        """
        if prefix is None:
            return cls.parse(property_name)
        return cls.parse(f"{prefix}{PATH_SEPARATOR}{property_name}")

    @property
    def dotted(self) -> str:
        return PATH_SEPARATOR.join(self.segments)

    @property
    def parent(self) -> Tuple[str, ...]:
        return self.segments[:-1]

    @property
    def leaf(self) -> str:
        return self.segments[-1]

    def overlaps(self, other: FieldPath) -> bool:
        """Check whether one path is a strict prefix of the other."""
        if self.segments == other.segments:
            return False
        shortest = min(len(self.segments), len(other.segments))
        return self.segments[:shortest] == other.segments[:shortest]

    def __str__(self) -> str:
        return self.dotted


def _as_path(path: Union[str, FieldPath]) -> FieldPath:
    if isinstance(path, FieldPath):
        return path
    return FieldPath.parse(path)


# =============================================================================
# OPERATIONS
# =============================================================================

@dataclass(frozen=True)
class SetField:
    """Assign ``value`` to the field at ``path``, creating parents as needed."""

    operator: ClassVar[UpdateOperator] = UpdateOperator.SET

    path: FieldPath
    value: Any = None


@dataclass(frozen=True)
class UnsetField:
    """Remove the field at ``path``."""

    operator: ClassVar[UpdateOperator] = UpdateOperator.UNSET

    path: FieldPath


@dataclass(frozen=True)
class AddToSetField:
    """Append ``value`` to the array at ``path`` unless already present."""

    operator: ClassVar[UpdateOperator] = UpdateOperator.ADD_TO_SET

    path: FieldPath
    value: Any = None


FieldOperation = Union[SetField, UnsetField, AddToSetField]


@dataclass(frozen=True)
class UpdateDefinition:
    """
    Ordered, immutable set of field operations applied to one document.

    Each fully-qualified path appears at most once: adding an operation for
    a path that is already present replaces the earlier operation
    (last write wins) while keeping its position. Paths that nest inside
    one another cannot be combined and raise InvalidPathException.
    """

    operations: Tuple[FieldOperation, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.operations

    @property
    def paths(self) -> Tuple[str, ...]:
        return tuple(op.path.dotted for op in self.operations)

    def with_operation(self, operation: FieldOperation) -> UpdateDefinition:
        """Return a new definition including ``operation``."""
        operations = list(self.operations)
        for index, existing in enumerate(operations):
            if existing.path == operation.path:
                operations[index] = operation
                return UpdateDefinition(tuple(operations))
            if existing.path.overlaps(operation.path):
                raise InvalidPathException(
                    operation.path.dotted,
                    f"conflicts with '{existing.path.dotted}' in the same update"
                )
        operations.append(operation)
        return UpdateDefinition(tuple(operations))

    def set(self, path: Union[str, FieldPath], value: Any) -> UpdateDefinition:
        return self.with_operation(SetField(_as_path(path), value))

    def unset(self, path: Union[str, FieldPath]) -> UpdateDefinition:
        return self.with_operation(UnsetField(_as_path(path)))

    def add_to_set(self, path: Union[str, FieldPath], value: Any) -> UpdateDefinition:
        return self.with_operation(AddToSetField(_as_path(path), value))

    def combine(self, other: UpdateDefinition) -> UpdateDefinition:
        """Merge ``other`` into this definition; ``other`` wins on equal paths."""
        combined = self
        for operation in other.operations:
            combined = combined.with_operation(operation)
        return combined

    def __len__(self) -> int:
        return len(self.operations)


# =============================================================================
# STACKED UPDATES
# =============================================================================

@dataclass(frozen=True)
class StackableUpdate:
    """
    One field assignment in a stacked update.

    ``prefix`` locates a nested object or array element using dot notation,
    ``None`` meaning the document root; ``property_name`` is the field set
    beneath it.
    """

    prefix: Optional[str]
    property_name: str
    value: Any = None

    @property
    def path(self) -> FieldPath:
        return FieldPath.join(self.prefix, self.property_name)


def stack_updates(entries: Iterable[StackableUpdate]) -> UpdateDefinition:
    """
    Merge stackable entries into one multi-field set definition.

    When two entries resolve to the same path the later entry wins.
    An empty sequence produces an empty definition.
    """
    update = UpdateDefinition()
    for entry in entries:
        update = update.set(entry.path, entry.value)
    return update


def set_property(prefix: Optional[str], property_name: str, value: Any) -> UpdateDefinition:
    """Set a single property beneath ``prefix``."""
    return UpdateDefinition().set(FieldPath.join(prefix, property_name), value)


def remove_property(prefix: Optional[str], property_name: str) -> UpdateDefinition:
    """Unset a single property beneath ``prefix``."""
    return UpdateDefinition().unset(FieldPath.join(prefix, property_name))


def add_item_to_set(path: str, item: Any) -> UpdateDefinition:
    """Add ``item`` to the array at ``path`` if it is not already there."""
    return UpdateDefinition().add_to_set(path, item)
