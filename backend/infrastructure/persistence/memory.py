"""
In-memory document store.

Implements the DocumentStore port with plain Python lists, following the
MongoDB semantics the inventory code relies on (filter subset, dot-path
updates, per-document atomic updates). Used by the test suite and for
running the service locally without a database
(DOCUMENT_STORE_BACKEND=memory).
"""

from __future__ import annotations
import copy
from collections import Counter
from typing import Any, AsyncIterator, Dict, Iterable, List, Optional, Sequence

from bson import ObjectId

from domain.inventory.repositories import (
    Document,
    DocumentQuery,
    DocumentStore,
    Filter,
)
from domain.shared.exceptions import InvalidPathException
from domain.shared.updates import (
    AddToSetField,
    FieldPath,
    SetField,
    UnsetField,
    UpdateDefinition,
)
from domain.shared.value_objects import NodeKind

_MISSING = object()


# =============================================================================
# MATCHING
# =============================================================================

def _resolve(document: Any, dotted: str) -> Any:
    current = document
    for segment in dotted.split("."):
        if isinstance(current, dict):
            current = current.get(segment, _MISSING)
        elif isinstance(current, list) and segment.isdigit():
            index = int(segment)
            current = current[index] if index < len(current) else _MISSING
        else:
            return _MISSING
        if current is _MISSING:
            return _MISSING
    return current


def _equals(value: Any, expected: Any) -> bool:
    if expected is None:
        return value is _MISSING or value is None
    if value is _MISSING:
        return False
    if isinstance(value, list) and not isinstance(expected, list):
        return expected in value
    return value == expected


def _matches_condition(value: Any, condition: Any) -> bool:
    if isinstance(condition, dict) and condition and all(k.startswith("$") for k in condition):
        for operator, argument in condition.items():
            if operator == "$ne":
                if _equals(value, argument):
                    return False
            elif operator == "$in":
                if not any(_equals(value, item) for item in argument):
                    return False
            elif operator == "$exists":
                if (value is not _MISSING) != bool(argument):
                    return False
            else:
                raise ValueError(f"Unsupported filter operator: {operator}")
        return True
    return _equals(value, condition)


def matches(document: Document, filter: Filter) -> bool:
    """Check a document against a MongoDB-style filter."""
    for key, condition in filter.items():
        if key == "$and":
            if not all(matches(document, sub) for sub in condition):
                return False
        elif not _matches_condition(_resolve(document, key), condition):
            return False
    return True


# =============================================================================
# UPDATES
# =============================================================================

def _step(container: Any, segment: str, path: FieldPath, create: bool) -> Any:
    """Move one segment down, creating an object when ``create`` is set."""
    if isinstance(container, dict):
        if segment not in container:
            if not create:
                return _MISSING
            container[segment] = {}
        return container[segment]
    if isinstance(container, list) and segment.isdigit():
        index = int(segment)
        if index >= len(container):
            if not create:
                return _MISSING
            container.extend([None] * (index - len(container)))
            container.append({})
        return container[index]
    raise InvalidPathException(path.dotted, f"cannot traverse into '{segment}'")


def _assign(container: Any, segment: str, value: Any, path: FieldPath) -> None:
    if isinstance(container, dict):
        container[segment] = value
    elif isinstance(container, list) and segment.isdigit():
        index = int(segment)
        if index >= len(container):
            container.extend([None] * (index + 1 - len(container)))
        container[index] = value
    else:
        raise InvalidPathException(path.dotted, f"cannot set '{segment}' on a non-object")


def _apply_set(document: Document, path: FieldPath, value: Any) -> None:
    container: Any = document
    for segment in path.parent:
        container = _step(container, segment, path, create=True)
    _assign(container, path.leaf, copy.deepcopy(value), path)


def _apply_unset(document: Document, path: FieldPath) -> None:
    container: Any = document
    for segment in path.parent:
        container = _step(container, segment, path, create=False)
        if container is _MISSING:
            return
    if isinstance(container, dict):
        container.pop(path.leaf, None)
    elif isinstance(container, list) and path.leaf.isdigit():
        index = int(path.leaf)
        if index < len(container):
            container[index] = None


def _apply_add_to_set(document: Document, path: FieldPath, value: Any) -> None:
    current = _resolve(document, path.dotted)
    if current is _MISSING or current is None:
        _apply_set(document, path, [value])
        return
    if not isinstance(current, list):
        raise InvalidPathException(path.dotted, "add-to-set target is not an array")
    if value not in current:
        current.append(copy.deepcopy(value))


def apply_update(document: Document, update: UpdateDefinition) -> Document:
    """Apply ``update`` to a copy of ``document`` and return the copy."""
    updated = copy.deepcopy(document)
    for operation in update.operations:
        if operation.path.segments[0] == "id":
            raise InvalidPathException(operation.path.dotted, "the document id is immutable")
        if isinstance(operation, SetField):
            _apply_set(updated, operation.path, operation.value)
        elif isinstance(operation, UnsetField):
            _apply_unset(updated, operation.path)
        elif isinstance(operation, AddToSetField):
            _apply_add_to_set(updated, operation.path, operation.value)
    return updated


# =============================================================================
# STORE
# =============================================================================

class InMemoryQuery(DocumentQuery):
    """Query over an InMemoryDocumentStore collection."""

    def __init__(self, store: InMemoryDocumentStore, kind: NodeKind, filters: Sequence[Filter] = ()):
        super().__init__(kind, filters)
        self.store = store

    def _clone(self, filters: Sequence[Filter]) -> InMemoryQuery:
        return InMemoryQuery(self.store, self.kind, filters)

    async def batches(self, batch_size: Optional[int] = None) -> AsyncIterator[List[Document]]:
        size = batch_size or self.store.batch_size
        self.store.calls["find"] += 1
        snapshot = [
            copy.deepcopy(d)
            for d in self.store.collection(self.kind)
            if matches(d, self.filter)
        ]
        for start in range(0, len(snapshot), size):
            yield snapshot[start:start + size]


class InMemoryDocumentStore(DocumentStore):
    """
    DocumentStore kept in process memory.

    ``calls`` counts store round trips by operation name.
    """

    def __init__(self, batch_size: int = 100):
        self.batch_size = batch_size
        self._collections: Dict[str, List[Document]] = {}
        self.calls: Counter = Counter()

    @property
    def update_calls(self) -> int:
        return self.calls["update_one"] + self.calls["update_many"]

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())

    def collection(self, kind: NodeKind) -> List[Document]:
        return self._collections.setdefault(kind.collection, [])

    def reset(self) -> None:
        self._collections.clear()
        self.calls.clear()

    def new_id(self) -> str:
        return str(ObjectId())

    def query(self, kind: NodeKind) -> InMemoryQuery:
        return InMemoryQuery(self, kind)

    async def insert_one(self, kind: NodeKind, document: Document) -> None:
        self.calls["insert_one"] += 1
        stored = copy.deepcopy(document)
        stored.setdefault("id", self.new_id())
        self.collection(kind).append(stored)

    async def insert_many(self, kind: NodeKind, documents: Iterable[Document]) -> None:
        documents = list(documents)
        if not documents:
            return
        self.calls["insert_many"] += 1
        for document in documents:
            stored = copy.deepcopy(document)
            stored.setdefault("id", self.new_id())
            self.collection(kind).append(stored)

    def _update(self, kind: NodeKind, filter: Filter, update: UpdateDefinition, limit: Optional[int]) -> int:
        collection = self.collection(kind)
        matched = 0
        for index, document in enumerate(collection):
            if limit is not None and matched >= limit:
                break
            if matches(document, filter):
                collection[index] = apply_update(document, update)
                matched += 1
        return matched

    async def update_one(self, kind: NodeKind, filter: Filter, update: UpdateDefinition) -> int:
        if update.is_empty:
            return 0
        self.calls["update_one"] += 1
        return self._update(kind, filter, update, limit=1)

    async def update_many(self, kind: NodeKind, filter: Filter, update: UpdateDefinition) -> int:
        if update.is_empty:
            return 0
        self.calls["update_many"] += 1
        return self._update(kind, filter, update, limit=None)

    def _delete(self, kind: NodeKind, filter: Filter, limit: Optional[int]) -> int:
        kept: List[Document] = []
        deleted = 0
        for document in self.collection(kind):
            if (limit is None or deleted < limit) and matches(document, filter):
                deleted += 1
            else:
                kept.append(document)
        self._collections[kind.collection] = kept
        return deleted

    async def delete_one(self, kind: NodeKind, filter: Filter) -> int:
        self.calls["delete_one"] += 1
        return self._delete(kind, filter, limit=1)

    async def delete_many(self, kind: NodeKind, filter: Filter) -> int:
        self.calls["delete_many"] += 1
        return self._delete(kind, filter, limit=None)

