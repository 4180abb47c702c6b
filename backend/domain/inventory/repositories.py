"""
Inventory Domain - Repository Interfaces (Ports).

These are abstract interfaces that define how the domain interacts with the
document store. The actual implementations are in the infrastructure layer.

Filters are MongoDB-style mappings restricted to field equality (``None``
also matches a missing field), ``$ne``, ``$in``, ``$exists`` and ``$and``.
The field name ``id`` addresses the store-native key.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from contextlib import aclosing
from typing import (
    Any,
    AsyncIterator,
    Callable,
    Dict,
    Iterable,
    List,
    Optional,
    Sequence,
)

from domain.shared.updates import StackableUpdate, UpdateDefinition, stack_updates
from domain.shared.value_objects import NodeKind


Document = Dict[str, Any]
Filter = Dict[str, Any]


def combine_filters(filters: Sequence[Filter]) -> Filter:
    """AND filters together, flattening when their fields do not clash."""
    non_empty = [f for f in filters if f]
    if not non_empty:
        return {}
    if len(non_empty) == 1:
        return dict(non_empty[0])
    merged: Filter = {}
    for f in non_empty:
        if any(key in merged for key in f):
            return {"$and": [dict(item) for item in non_empty]}
        merged.update(f)
    return merged


class DocumentQuery(ABC):
    """
    Lazily evaluated, composable view over one collection.

    Nothing is read from the store until the query is consumed.
    """

    def __init__(self, kind: NodeKind, filters: Sequence[Filter] = ()):
        self.kind = kind
        self.filters = tuple(filters)

    @property
    def filter(self) -> Filter:
        return combine_filters(self.filters)

    def where(self, filter: Filter) -> DocumentQuery:
        """Return a new query narrowed by ``filter``."""
        return self._clone(self.filters + (filter,))

    @abstractmethod
    def _clone(self, filters: Sequence[Filter]) -> DocumentQuery:
        pass

    @abstractmethod
    def batches(self, batch_size: Optional[int] = None) -> AsyncIterator[List[Document]]:
        """Iterate results in store order, one fetched batch at a time."""
        pass

    async def to_list(self) -> List[Document]:
        documents: List[Document] = []
        async for batch in self.batches():
            documents.extend(batch)
        return documents

    async def first(self) -> Optional[Document]:
        async with aclosing(self.batches(batch_size=1)) as batches:
            async for batch in batches:
                if batch:
                    return batch[0]
        return None

    async def count(self) -> int:
        total = 0
        async for batch in self.batches():
            total += len(batch)
        return total

    async def __aiter__(self) -> AsyncIterator[Document]:
        async for batch in self.batches():
            for document in batch:
                yield document


class DocumentStore(ABC):
    """Port for the backing document store."""

    @abstractmethod
    def new_id(self) -> str:
        """Generate a fresh store-native identifier."""
        pass

    @abstractmethod
    def query(self, kind: NodeKind) -> DocumentQuery:
        """Get a queryable view over the collection for ``kind``."""
        pass

    @abstractmethod
    async def insert_one(self, kind: NodeKind, document: Document) -> None:
        """Insert a document."""
        pass

    @abstractmethod
    async def insert_many(self, kind: NodeKind, documents: Iterable[Document]) -> None:
        """Insert documents. An empty iterable is a no-op."""
        pass

    @abstractmethod
    async def update_one(self, kind: NodeKind, filter: Filter, update: UpdateDefinition) -> int:
        """Apply ``update`` to the first match. Returns the matched count."""
        pass

    @abstractmethod
    async def update_many(self, kind: NodeKind, filter: Filter, update: UpdateDefinition) -> int:
        """Apply ``update`` to every match. Returns the matched count."""
        pass

    @abstractmethod
    async def delete_one(self, kind: NodeKind, filter: Filter) -> int:
        """Delete the first match. Returns the deleted count."""
        pass

    @abstractmethod
    async def delete_many(self, kind: NodeKind, filter: Filter) -> int:
        """Delete every match. Returns the deleted count."""
        pass

    async def close(self) -> None:
        """Release any resources held by the store."""

    async def update_stacked(
        self,
        kind: NodeKind,
        filter: Filter,
        entries: Iterable[StackableUpdate],
    ) -> int:
        """
        Apply several field assignments to one document in a single call.

        An empty sequence returns immediately without contacting the store.
        """
        update = stack_updates(entries)
        if update.is_empty:
            return 0
        return await self.update_one(kind, filter, update)

    async def index_of(
        self,
        query: DocumentQuery,
        predicate: Callable[[Document], bool],
        batch_size: Optional[int] = None,
    ) -> Optional[int]:
        """
        Zero-based position of the first document matching ``predicate``.

        Scans the query's cursor batch by batch in store order, so it is
        O(n) with no index support. Use only where the filter language
        cannot express the predicate.
        """
        index = 0
        async with aclosing(query.batches(batch_size)) as batches:
            async for batch in batches:
                for document in batch:
                    if predicate(document):
                        return index
                    index += 1
        return None
